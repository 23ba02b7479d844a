"""
Per-IP request rate limiting shared by the app and the routers.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from store_ratings.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)
