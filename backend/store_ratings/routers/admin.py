"""
System administrator API endpoints.

Every route requires the system_admin role.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from store_ratings.database import get_db
from store_ratings.dependencies import require_admin
from store_ratings.models.user import User, Role
from store_ratings.schemas import (
    AdminUserCreate,
    MessageResponse,
    RoleUpdate,
    StoreCreate,
    StoreResponse,
    StoreUpdate,
    UserListResponse,
    UserResponse,
)
from store_ratings.services.listing import MAX_PAGE
from store_ratings.services.analytics_service import analytics_service
from store_ratings.services.auth_service import auth_service
from store_ratings.services.rating_service import rating_service
from store_ratings.services.store_service import store_service
from store_ratings.services.user_service import user_service

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db)):
    """Global counts, growth, top stores and recent activity."""
    return analytics_service.admin_dashboard(db)


@router.get("/analytics")
def analytics(
    period: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db),
):
    """Rating trends, engagement per role and store performance."""
    return analytics_service.admin_analytics(db, period)


# --- Users ---

@router.get("/users", response_model=UserListResponse)
def list_users(
    search: Optional[str] = None,
    role: Optional[Role] = None,
    sort_by: str = "name",
    sort_order: str = "asc",
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """List users with search, role filter, sorting and pagination."""
    return user_service.list_users(db, search, role, sort_by, sort_order, page, limit)


@router.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(user_in: AdminUserCreate, db: Session = Depends(get_db)):
    """Create a user with any role."""
    user = auth_service.create_user(
        db=db,
        name=user_in.name,
        email=user_in.email,
        password=user_in.password,
        address=user_in.address,
        role=user_in.role,
    )
    return {"message": "User created successfully", "user": UserResponse.model_validate(user)}


@router.get("/users/{user_id}")
def get_user(user_id: int, db: Session = Depends(get_db)):
    """User detail; store owners include their store."""
    return {"user": user_service.get_user_detail(db, user_id)}


@router.put("/users/{user_id}/role", response_model=UserResponse)
def change_user_role(user_id: int, role_in: RoleUpdate, db: Session = Depends(get_db)):
    """Change a user's role."""
    return user_service.change_role(db, user_id, role_in.role)


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Delete a user and their ratings."""
    user_service.delete_user(db, user_id, current_user)
    return {"message": "User deleted successfully"}


@router.get("/users/{user_id}/ratings")
def get_user_ratings(
    user_id: int,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Ratings given by one user."""
    user_service.get_user(db, user_id)
    return rating_service.list_user_ratings(db, user_id, sort_by, sort_order, page, limit)


# --- Stores ---

@router.get("/stores")
def list_stores(
    search: Optional[str] = None,
    sort_by: str = "name",
    sort_order: str = "asc",
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """List stores with owner names, search, sorting and pagination."""
    return store_service.list_stores(db, search, sort_by, sort_order, page, limit, admin=True)


@router.post("/stores", status_code=status.HTTP_201_CREATED)
def create_store(store_in: StoreCreate, db: Session = Depends(get_db)):
    """Create a store, optionally assigned to a store owner."""
    store = store_service.create_store(db, store_in)
    return {"message": "Store created successfully", "store": StoreResponse.model_validate(store)}


@router.put("/stores/{store_id}", response_model=StoreResponse)
def update_store(store_id: int, store_in: StoreUpdate, db: Session = Depends(get_db)):
    """Update store details or reassign its owner."""
    return store_service.update_store(db, store_id, store_in)


@router.delete("/stores/{store_id}", response_model=MessageResponse)
def delete_store(store_id: int, db: Session = Depends(get_db)):
    """Delete a store and its ratings."""
    store_service.delete_store(db, store_id)
    return {"message": "Store deleted successfully"}


# --- Ratings ---

@router.delete("/ratings/{rating_id}")
def delete_rating(rating_id: int, db: Session = Depends(get_db)):
    """Delete any rating."""
    store_id = rating_service.delete_rating_by_id(db, rating_id)
    return {
        "message": "Rating deleted successfully",
        "store_stats": store_service.rating_aggregate(db, store_id),
    }
