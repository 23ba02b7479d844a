"""
API endpoints for browsing stores and for store owners.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from store_ratings.database import get_db
from store_ratings.dependencies import get_optional_user, require_store_owner
from store_ratings.models.user import User
from store_ratings.schemas import StoreListResponse
from store_ratings.services.listing import MAX_PAGE
from store_ratings.services.analytics_service import analytics_service
from store_ratings.services.store_service import store_service

router = APIRouter()


@router.get("", response_model=StoreListResponse)
def list_stores(
    search: Optional[str] = None,
    sort_by: str = "name",
    sort_order: str = "asc",
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """List stores with search, sorting, pagination and aggregate rating."""
    return store_service.list_stores(db, search, sort_by, sort_order, page, limit)


@router.get("/owner/dashboard")
def owner_dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_store_owner),
):
    """Statistics, trends and customers of the owner's store."""
    return analytics_service.owner_dashboard(db, current_user)


@router.get("/owner/analytics")
def owner_analytics(
    period: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_store_owner),
):
    """Daily breakdown, customer behaviour and sentiment for the owner's store."""
    return analytics_service.owner_analytics(db, current_user, period)


@router.get("/owner/ratings")
def owner_ratings(
    sort_by: str = "created_at",
    sort_order: str = "desc",
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_store_owner),
):
    """All ratings of the owner's store, paginated."""
    store = store_service.get_owned_store(db, current_user)
    return store_service.list_store_ratings(db, store, sort_by, sort_order, page, limit)


@router.get("/{store_id}")
def get_store(
    store_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    """Store detail with aggregate rating, plus the caller's rating when signed in."""
    return {"store": store_service.get_store_summary(db, store_id, current_user)}


@router.get("/{store_id}/ratings")
def get_store_ratings(store_id: int, db: Session = Depends(get_db)):
    """Most recent ratings of a store."""
    return {"ratings": store_service.recent_ratings(db, store_id)}
