"""
Rating Service: create-or-update, delete and history of user ratings.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from store_ratings.models.rating import Rating
from store_ratings.models.store import Store
from store_ratings.models.user import User
from store_ratings.services.listing import order_clauses, paginate
from store_ratings.services.store_service import store_service

logger = logging.getLogger(__name__)

USER_RATING_SORT_FIELDS = {
    "rating": Rating.rating,
    "created_at": Rating.created_at,
    "store_name": Store.name,
}


class RatingService:
    def _find(self, db: Session, user_id: int, store_id: int) -> Optional[Rating]:
        return (
            db.query(Rating)
            .filter(Rating.user_id == user_id, Rating.store_id == store_id)
            .first()
        )

    def _apply(self, rating: Rating, value: int, comment: Optional[str]) -> None:
        rating.rating = value
        rating.comment = comment
        rating.updated_at = datetime.utcnow()

    def upsert_rating(
        self,
        db: Session,
        user: User,
        store_id: int,
        value: int,
        comment: Optional[str] = None,
    ) -> Tuple[Rating, bool]:
        """
        Insert the caller's rating for a store, or update it if one exists.

        Returns the rating and whether it was newly created. When a concurrent
        request inserts the same (user, store) pair first, the unique
        constraint rejects our insert and the submission is applied to the
        winning row instead.
        """
        store_service.get_store(db, store_id)

        existing = self._find(db, user.id, store_id)
        if existing:
            self._apply(existing, value, comment)
            db.commit()
            db.refresh(existing)
            return existing, False

        rating = Rating(user_id=user.id, store_id=store_id, rating=value, comment=comment)
        db.add(rating)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.info(
                f"Concurrent first rating by user {user.id} for store {store_id}, applying as update"
            )
            existing = self._find(db, user.id, store_id)
            if existing is None:
                raise
            self._apply(existing, value, comment)
            db.commit()
            db.refresh(existing)
            return existing, False

        db.refresh(rating)
        return rating, True

    def update_rating(
        self,
        db: Session,
        user: User,
        rating_id: int,
        value: int,
        comment: Optional[str] = None,
    ) -> Rating:
        """Update one of the caller's ratings by id; other users' ratings are a 404."""
        rating = (
            db.query(Rating)
            .filter(Rating.id == rating_id, Rating.user_id == user.id)
            .first()
        )
        if not rating:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Rating not found or unauthorized",
            )
        self._apply(rating, value, comment)
        db.commit()
        db.refresh(rating)
        return rating

    def get_user_rating(self, db: Session, user: User, store_id: int) -> Optional[Rating]:
        return self._find(db, user.id, store_id)

    def delete_rating(self, db: Session, user: User, store_id: int) -> None:
        """Delete the caller's own rating for a store."""
        rating = self._find(db, user.id, store_id)
        if not rating:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rating not found")
        db.delete(rating)
        db.commit()

    def delete_rating_by_id(self, db: Session, rating_id: int) -> int:
        """Delete any rating by id. Returns the store it belonged to."""
        rating = db.query(Rating).filter(Rating.id == rating_id).first()
        if not rating:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rating not found")
        store_id = rating.store_id
        db.delete(rating)
        db.commit()
        logger.info(f"Deleted rating {rating_id} of store {store_id}")
        return store_id

    def list_user_ratings(
        self,
        db: Session,
        user_id: int,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        """Paginated ratings given by one user, with store details."""
        total = db.query(func.count(Rating.id)).filter(Rating.user_id == user_id).scalar() or 0
        query = (
            db.query(Rating, Store.name, Store.address)
            .join(Store, Rating.store_id == Store.id)
            .filter(Rating.user_id == user_id)
            .order_by(
                *order_clauses(
                    sort_by, sort_order, USER_RATING_SORT_FIELDS, "created_at", "desc",
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
                "updated_at": rating.updated_at,
                "store_id": rating.store_id,
                "store_name": store_name,
                "store_address": store_address,
            }
            for rating, store_name, store_address in rows
        ]
        return {"ratings": ratings, "pagination": pagination}


rating_service = RatingService()
