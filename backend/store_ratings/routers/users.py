"""
API endpoints for the signed-in user's own data.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from store_ratings.database import get_db
from store_ratings.dependencies import get_current_user, require_store_owner
from store_ratings.models.user import User
from store_ratings.services.listing import MAX_PAGE
from store_ratings.services.analytics_service import analytics_service
from store_ratings.services.rating_service import rating_service
from store_ratings.services.store_service import store_service

router = APIRouter()


@router.get("/store")
def get_my_store(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_store_owner),
):
    """Store owned by the current user, with its aggregate rating."""
    return {"store": store_service.owned_store_summary(db, current_user)}


@router.get("/ratings")
def get_my_ratings(
    sort_by: str = "created_at",
    sort_order: str = "desc",
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Rating history of the current user."""
    return rating_service.list_user_ratings(
        db, current_user.id, sort_by, sort_order, page, limit
    )


@router.get("/stats")
def get_my_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Statistics of the current user."""
    return analytics_service.user_stats(db, current_user)
