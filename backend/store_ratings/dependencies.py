"""
Shared API dependencies: bearer-token authentication and role checks.
"""

import logging
from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from store_ratings.database import get_db
from store_ratings.services.auth_service import auth_service
from store_ratings.core import security
from store_ratings.models.user import User, Role

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


def _user_from_token(db: Session, token: str) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = security.decode_access_token(token)
        subject = payload.get("sub")
        if subject is None:
            raise credentials_exception
        user_id = int(subject)
    except (JWTError, ValueError):
        raise credentials_exception

    user = auth_service.get_user_by_id(db, user_id=user_id)
    if user is None:
        raise credentials_exception
    return user


def get_current_user(
    db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)
) -> User:
    """
    Validate access token and return current user.
    """
    return _user_from_token(db, token)


def get_optional_user(
    db: Session = Depends(get_db), token: Optional[str] = Depends(optional_oauth2_scheme)
) -> Optional[User]:
    """
    Like get_current_user, but a missing, expired or otherwise unusable token
    yields None (the anonymous view) instead of a 401.
    """
    if token is None:
        return None
    try:
        return _user_from_token(db, token)
    except HTTPException:
        logger.debug("Ignoring invalid bearer token on public endpoint")
        return None


def require_roles(*roles: Role) -> Callable[..., User]:
    """
    Build a dependency that lets only users holding one of the given roles through.
    """
    allowed = frozenset(roles)

    def check_role(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            logger.warning(
                f"User {current_user.id} ({current_user.role.value}) denied, "
                f"requires one of {sorted(r.value for r in allowed)}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return check_role


require_admin = require_roles(Role.SYSTEM_ADMIN)
require_store_owner = require_roles(Role.STORE_OWNER)
