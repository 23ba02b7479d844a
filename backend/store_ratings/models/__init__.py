"""
Database models for the Store Ratings API.

All SQLAlchemy models are imported here so the metadata is complete.
"""

from store_ratings.models.user import User, Role
from store_ratings.models.store import Store
from store_ratings.models.rating import Rating

__all__ = [
    "User",
    "Role",
    "Store",
    "Rating",
]
