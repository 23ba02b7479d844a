"""
Authentication API endpoints.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from store_ratings.config import settings
from store_ratings.core.rate_limit import limiter
from store_ratings.database import get_db
from store_ratings.dependencies import get_current_user
from store_ratings.models.user import User
from store_ratings.schemas import (
    AuthResponse,
    MessageResponse,
    PasswordUpdate,
    ProfileUpdate,
    Token,
    UserCreate,
    UserLogin,
    UserResponse,
)
from store_ratings.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_CREDENTIALS = "Invalid email or password"


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(user_in: UserCreate, db: Session = Depends(get_db)) -> Any:
    """
    Register a new normal user and log them in.
    """
    user = auth_service.create_user(
        db=db,
        name=user_in.name,
        email=user_in.email,
        password=user_in.password,
        address=user_in.address,
    )
    return {
        "message": "User registered successfully",
        "user": user,
        **auth_service.create_user_token(user),
    }


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
def login(request: Request, credentials: UserLogin, db: Session = Depends(get_db)) -> Any:
    """
    Verify credentials and return the user with an access token.
    """
    user = auth_service.authenticate_user(
        db, email=credentials.email, password=credentials.password
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return {
        "message": "Login successful",
        "user": user,
        **auth_service.create_user_token(user),
    }


@router.post("/token", response_model=Token)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
def login_access_token(
    request: Request,
    db: Session = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> Any:
    """
    OAuth2 compatible token login, get an access token for future requests.
    """
    user = auth_service.authenticate_user(
        db, email=form_data.username, password=form_data.password
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth_service.create_user_token(user)


@router.get("/profile", response_model=UserResponse)
def read_profile(current_user: User = Depends(get_current_user)) -> Any:
    """
    Get current user.
    """
    return current_user


@router.put("/profile", response_model=UserResponse)
def update_profile(
    profile: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    """
    Update the current user's name and address.
    """
    return auth_service.update_profile(
        db, current_user, name=profile.name, address=profile.address
    )


@router.put("/password", response_model=MessageResponse)
def change_password(
    passwords: PasswordUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    """
    Change the current user's password after checking the current one.
    """
    auth_service.change_password(
        db, current_user, passwords.current_password, passwords.new_password
    )
    return {"message": "Password updated successfully"}
