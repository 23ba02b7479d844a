"""
User database model.
"""

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Enum, CheckConstraint
from sqlalchemy.orm import relationship

from store_ratings.database import Base


class Role(str, enum.Enum):
    SYSTEM_ADMIN = "system_admin"
    NORMAL_USER = "normal_user"
    STORE_OWNER = "store_owner"


class User(Base):
    """User model."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("length(name) >= 20", name="ck_users_name_length"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(60), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    address = Column(String(400), nullable=False)
    role = Column(
        Enum(
            Role,
            name="user_role",
            values_callable=lambda roles: [r.value for r in roles],
            validate_strings=True,
        ),
        nullable=False,
        default=Role.NORMAL_USER,
        index=True,
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    ratings = relationship(
        "Rating", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    # Deleting an owner sets owner_id to NULL on its stores
    owned_stores = relationship("Store", back_populates="owner")

    def __repr__(self):
        return f"<User {self.email} ({self.role.value})>"
