"""
Authentication Service.
"""

import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from store_ratings.core import security
from store_ratings.database import commit_or_conflict
from store_ratings.models.user import User, Role

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "User with this email already exists"


class AuthService:
    def authenticate_user(
        self, db: Session, email: str, password: str
    ) -> Optional[User]:
        """Authenticate a user by email and password."""
        user = self.get_user_by_email(db, email)
        if not user:
            return None
        if not security.verify_password(password, user.hashed_password):
            return None
        return user

    def get_user_by_email(self, db: Session, email: str) -> Optional[User]:
        """Get a user by email."""
        return db.query(User).filter(User.email == email).first()

    def get_user_by_id(self, db: Session, user_id: int) -> Optional[User]:
        """Get a user by id."""
        return db.query(User).filter(User.id == user_id).first()

    def create_user(
        self,
        db: Session,
        name: str,
        email: str,
        password: str,
        address: str,
        role: Role = Role.NORMAL_USER,
    ) -> User:
        """Create a new user."""
        if self.get_user_by_email(db, email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_EMAIL
            )

        db_user = User(
            name=name,
            email=email,
            hashed_password=security.get_password_hash(password),
            address=address,
            role=role,
        )
        db.add(db_user)
        commit_or_conflict(db, DUPLICATE_EMAIL)
        db.refresh(db_user)
        logger.info(f"Created {role.value} account {db_user.id}")
        return db_user

    def create_user_token(self, user: User) -> dict:
        """Create access token for user."""
        access_token = security.create_access_token(
            data={"sub": str(user.id), "email": user.email, "role": user.role.value}
        )
        return {"access_token": access_token, "token_type": "bearer"}

    def update_profile(
        self,
        db: Session,
        user: User,
        name: Optional[str] = None,
        address: Optional[str] = None,
    ) -> User:
        """Update the caller's name and/or address. Role and email are untouched."""
        if name is not None:
            user.name = name
        if address is not None:
            user.address = address
        db.commit()
        db.refresh(user)
        return user

    def change_password(
        self, db: Session, user: User, current_password: str, new_password: str
    ) -> None:
        if not security.verify_password(current_password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Current password is incorrect",
            )
        user.hashed_password = security.get_password_hash(new_password)
        db.commit()
        logger.info(f"Password changed for user {user.id}")


auth_service = AuthService()
