"""
Store Service: store CRUD and per-store rating aggregates.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from store_ratings.database import commit_or_conflict
from store_ratings.models.rating import Rating
from store_ratings.models.store import Store
from store_ratings.models.user import User, Role
from store_ratings.schemas import StoreCreate, StoreUpdate
from store_ratings.services.listing import LIKE_ESCAPE, contains_pattern, order_clauses, paginate

logger = logging.getLogger(__name__)

AVERAGE_RATING = func.coalesce(func.avg(Rating.rating), 0).label("average_rating")
TOTAL_RATINGS = func.count(Rating.id).label("total_ratings")

PUBLIC_SORT_FIELDS = {
    "name": Store.name,
    "address": Store.address,
    "created_at": Store.created_at,
    "average_rating": AVERAGE_RATING,
    "total_ratings": TOTAL_RATINGS,
}

ADMIN_SORT_FIELDS = dict(PUBLIC_SORT_FIELDS, email=Store.email)

OWNER_RATING_SORT_FIELDS = {
    "rating": Rating.rating,
    "created_at": Rating.created_at,
    "user_name": User.name,
}

RECENT_RATINGS_LIMIT = 50


def summarize(store: Store, average: Any, total: Any, **extra) -> Dict[str, Any]:
    """Flatten a store and its aggregate into a response dict."""
    summary = {
        "id": store.id,
        "name": store.name,
        "email": store.email,
        "address": store.address,
        "owner_id": store.owner_id,
        "created_at": store.created_at,
        "average_rating": float(average or 0),
        "total_ratings": int(total or 0),
    }
    summary.update(extra)
    return summary


class StoreService:
    def aggregate_query(self, db: Session):
        """Stores left-joined to their ratings, one row per store."""
        return (
            db.query(Store, AVERAGE_RATING, TOTAL_RATINGS)
            .outerjoin(Rating, Rating.store_id == Store.id)
            .group_by(Store.id)
        )

    def rating_aggregate(self, db: Session, store_id: int) -> Dict[str, Any]:
        """Average and count of one store's ratings (0 and 0 when unrated)."""
        average, total = (
            db.query(func.coalesce(func.avg(Rating.rating), 0), func.count(Rating.id))
            .filter(Rating.store_id == store_id)
            .one()
        )
        return {"average_rating": float(average or 0), "total_ratings": int(total or 0)}

    def list_stores(
        self,
        db: Session,
        search: Optional[str] = None,
        sort_by: str = "name",
        sort_order: str = "asc",
        page: int = 1,
        limit: int = 20,
        admin: bool = False,
    ) -> Dict[str, Any]:
        """
        List stores with their aggregate rating.

        The public listing searches name and address; the admin listing also
        searches email, can sort by email and includes the owner's name.
        """
        search_filter = None
        if search:
            pattern = contains_pattern(search)
            columns = [Store.name, Store.address]
            if admin:
                columns.append(Store.email)
            search_filter = or_(*[column.ilike(pattern, escape=LIKE_ESCAPE) for column in columns])

        count_query = db.query(func.count(Store.id))
        if search_filter is not None:
            count_query = count_query.filter(search_filter)
        total = count_query.scalar() or 0

        query = self.aggregate_query(db)
        if admin:
            query = (
                query.add_columns(User.name.label("owner_name"))
                .outerjoin(User, Store.owner_id == User.id)
                .group_by(User.name)
            )
        if search_filter is not None:
            query = query.filter(search_filter)

        allowed = ADMIN_SORT_FIELDS if admin else PUBLIC_SORT_FIELDS
        query = query.order_by(
            *order_clauses(sort_by, sort_order, allowed, "name", "asc", tiebreaker=Store.id)
        )
        rows, pagination = paginate(query, page, limit, total)

        if admin:
            stores = [
                summarize(store, average, count, owner_name=owner_name)
                for store, average, count, owner_name in rows
            ]
        else:
            stores = [summarize(store, average, count) for store, average, count in rows]
        return {"stores": stores, "pagination": pagination}

    def get_store(self, db: Session, store_id: int) -> Store:
        store = db.query(Store).filter(Store.id == store_id).first()
        if not store:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Store not found")
        return store

    def get_store_summary(
        self, db: Session, store_id: int, user: Optional[User] = None
    ) -> Dict[str, Any]:
        """Store detail with aggregate; includes the caller's own rating when known."""
        row = self.aggregate_query(db).filter(Store.id == store_id).first()
        if not row:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Store not found")
        store, average, total = row
        summary = summarize(store, average, total)
        if user is not None:
            summary["user_rating"] = (
                db.query(Rating.rating)
                .filter(Rating.user_id == user.id, Rating.store_id == store_id)
                .scalar()
            )
        return summary

    def recent_ratings(
        self, db: Session, store_id: int, limit: int = RECENT_RATINGS_LIMIT
    ) -> List[Dict[str, Any]]:
        """Newest ratings for a store with the rater's name."""
        self.get_store(db, store_id)
        rows = (
            db.query(Rating.rating, Rating.comment, Rating.created_at, User.name)
            .join(User, Rating.user_id == User.id)
            .filter(Rating.store_id == store_id)
            .order_by(Rating.created_at.desc(), Rating.id.desc())
            .limit(limit)
            .all()
        )
        return [
            {"rating": rating, "comment": comment, "created_at": created_at, "user_name": name}
            for rating, comment, created_at, name in rows
        ]

    def _check_owner(self, db: Session, owner_id: Optional[int]) -> None:
        if owner_id is None:
            return
        owner = db.query(User).filter(User.id == owner_id).first()
        if not owner:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Owner not found")
        if owner.role != Role.STORE_OWNER:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Owner must have store_owner role",
            )

    def _check_email_free(self, db: Session, email: str, exclude_id: Optional[int] = None) -> None:
        query = db.query(Store.id).filter(Store.email == email)
        if exclude_id is not None:
            query = query.filter(Store.id != exclude_id)
        if query.first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Store with this email already exists",
            )

    def create_store(self, db: Session, data: StoreCreate) -> Store:
        """Create a new store."""
        self._check_email_free(db, data.email)
        self._check_owner(db, data.owner_id)

        store = Store(
            name=data.name,
            email=data.email,
            address=data.address,
            owner_id=data.owner_id,
        )
        db.add(store)
        commit_or_conflict(db, "Store with this email already exists")
        db.refresh(store)
        logger.info(f"Created store {store.id} ({store.name})")
        return store

    def update_store(self, db: Session, store_id: int, data: StoreUpdate) -> Store:
        store = self.get_store(db, store_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("email") is not None:
            self._check_email_free(db, changes["email"], exclude_id=store_id)
        if "owner_id" in changes:
            self._check_owner(db, changes["owner_id"])

        for field, value in changes.items():
            if value is None and field != "owner_id":
                continue
            setattr(store, field, value)

        commit_or_conflict(db, "Store with this email already exists")
        db.refresh(store)
        logger.info(f"Updated store {store.id}")
        return store

    def delete_store(self, db: Session, store_id: int) -> None:
        """Delete a store; its ratings go with it."""
        store = self.get_store(db, store_id)
        db.delete(store)
        db.commit()
        logger.info(f"Deleted store {store_id}")

    def get_owned_store(self, db: Session, owner: User) -> Store:
        store = (
            db.query(Store)
            .filter(Store.owner_id == owner.id)
            .order_by(Store.id)
            .first()
        )
        if not store:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No store found for this user",
            )
        return store

    def owned_store_summary(self, db: Session, owner: User) -> Dict[str, Any]:
        store = self.get_owned_store(db, owner)
        stats = self.rating_aggregate(db, store.id)
        return summarize(store, stats["average_rating"], stats["total_ratings"])

    def list_store_ratings(
        self,
        db: Session,
        store: Store,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        """Paginated ratings of one store with rater details."""
        total = db.query(func.count(Rating.id)).filter(Rating.store_id == store.id).scalar() or 0
        query = (
            db.query(Rating, User.name, User.email)
            .join(User, Rating.user_id == User.id)
            .filter(Rating.store_id == store.id)
            .order_by(
                *order_clauses(
                    sort_by, sort_order, OWNER_RATING_SORT_FIELDS, "created_at", "desc",
                    tiebreaker=Rating.id,
                )
            )
        )
        rows, pagination = paginate(query, page, limit, total)
        ratings = [
            {
                "id": rating.id,
                "rating": rating.rating,
                "comment": rating.comment,
                "created_at": rating.created_at,
                "user_name": user_name,
                "user_email": user_email,
            }
            for rating, user_name, user_email in rows
        ]
        return {"ratings": ratings, "pagination": pagination}


store_service = StoreService()
