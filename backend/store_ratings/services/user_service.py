"""
User administration: listing, detail, role changes and deletion.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from store_ratings.models.store import Store
from store_ratings.models.user import User, Role
from store_ratings.schemas import UserResponse
from store_ratings.services.listing import LIKE_ESCAPE, contains_pattern, order_clauses, paginate
from store_ratings.services.store_service import store_service, summarize

logger = logging.getLogger(__name__)

USER_SORT_FIELDS = {
    "name": User.name,
    "email": User.email,
    "address": User.address,
    "role": User.role,
    "created_at": User.created_at,
}


class UserService:
    def get_user(self, db: Session, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user

    def list_users(
        self,
        db: Session,
        search: Optional[str] = None,
        role: Optional[Role] = None,
        sort_by: str = "name",
        sort_order: str = "asc",
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        """Filter by free-text search and exact role, sort and paginate."""
        query = db.query(User)
        if search:
            pattern = contains_pattern(search)
            query = query.filter(
                or_(
                    User.name.ilike(pattern, escape=LIKE_ESCAPE),
                    User.email.ilike(pattern, escape=LIKE_ESCAPE),
                    User.address.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        if role is not None:
            query = query.filter(User.role == role)

        total = query.with_entities(func.count(User.id)).scalar() or 0
        query = query.order_by(
            *order_clauses(sort_by, sort_order, USER_SORT_FIELDS, "name", "asc", tiebreaker=User.id)
        )
        users, pagination = paginate(query, page, limit, total)
        return {
            "users": [UserResponse.model_validate(u) for u in users],
            "pagination": pagination,
        }

    def get_user_detail(self, db: Session, user_id: int) -> Dict[str, Any]:
        """User profile; store owners also get their store with its aggregate."""
        user = self.get_user(db, user_id)
        detail = UserResponse.model_validate(user).model_dump()
        if user.role == Role.STORE_OWNER:
            row = (
                store_service.aggregate_query(db)
                .filter(Store.owner_id == user.id)
                .order_by(Store.id)
                .first()
            )
            detail["store"] = summarize(*row) if row else None
        return detail

    def change_role(self, db: Session, user_id: int, role: Role) -> User:
        user = self.get_user(db, user_id)
        previous = user.role
        user.role = role
        if previous == Role.STORE_OWNER and role != Role.STORE_OWNER:
            # Stores may only be owned by store owners
            for store in user.owned_stores:
                store.owner_id = None
        db.commit()
        db.refresh(user)
        logger.info(f"Role of user {user_id} changed from {previous.value} to {role.value}")
        return user

    def delete_user(self, db: Session, user_id: int, acting_admin: User) -> None:
        """Delete a user; ratings cascade and owned stores lose their owner."""
        if user_id == acting_admin.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Administrators cannot delete their own account",
            )
        user = self.get_user(db, user_id)
        db.delete(user)
        db.commit()
        logger.info(f"Deleted user {user_id}")


user_service = UserService()
