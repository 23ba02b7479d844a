"""
API endpoints for submitting and reviewing ratings.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from store_ratings.database import get_db
from store_ratings.dependencies import get_current_user
from store_ratings.models.user import User
from store_ratings.schemas import (
    RatingCreate,
    RatingDeleteResponse,
    RatingResponse,
    RatingSubmitResponse,
)
from store_ratings.services.listing import MAX_PAGE
from store_ratings.services.analytics_service import analytics_service
from store_ratings.services.rating_service import rating_service
from store_ratings.services.store_service import store_service

router = APIRouter()


@router.get("/user")
def list_my_ratings(
    sort_by: str = "created_at",
    sort_order: str = "desc",
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Ratings given by the current user."""
    return rating_service.list_user_ratings(
        db, current_user.id, sort_by, sort_order, page, limit
    )


@router.get("/user/insights")
def my_insights(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Rating statistics, trend and favourite stores of the current user."""
    return analytics_service.user_insights(db, current_user)


@router.get("/user/recommendations")
def my_recommendations(
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Stores the current user has not rated yet."""
    return analytics_service.user_recommendations(db, current_user, limit)


@router.get("/user/{store_id}")
def my_rating_for_store(
    store_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The current user's rating of one store, or null."""
    rating = rating_service.get_user_rating(db, current_user, store_id)
    return {"rating": RatingResponse.model_validate(rating) if rating else None}


@router.post("/{store_id}", response_model=RatingSubmitResponse)
def submit_rating(
    store_id: int,
    rating_in: RatingCreate,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create the current user's rating of a store, or update it if it exists."""
    rating, created = rating_service.upsert_rating(
        db, current_user, store_id, rating_in.rating, rating_in.comment
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
    return {
        "message": "Rating submitted successfully" if created else "Rating updated successfully",
        "rating": rating,
        "store_stats": store_service.rating_aggregate(db, store_id),
    }


@router.put("/{rating_id}", response_model=RatingSubmitResponse)
def update_rating(
    rating_id: int,
    rating_in: RatingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update one of the current user's ratings by its id."""
    rating = rating_service.update_rating(
        db, current_user, rating_id, rating_in.rating, rating_in.comment
    )
    return {
        "message": "Rating updated successfully",
        "rating": rating,
        "store_stats": store_service.rating_aggregate(db, rating.store_id),
    }


@router.delete("/{store_id}", response_model=RatingDeleteResponse)
def delete_rating(
    store_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete the current user's rating of a store."""
    rating_service.delete_rating(db, current_user, store_id)
    return {
        "message": "Rating deleted successfully",
        "store_stats": store_service.rating_aggregate(db, store_id),
    }
