"""
FastAPI dependencies for Timeline Service
"""
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from typing import Optional
import logging

from .config import settings
from .database import Database, get_db
from .repositories import TimelineRepository
from .schemas import User
from .service import TimelineService

logger = logging.getLogger(__name__)

optional_security = HTTPBearer(auto_error=False)


def decode_user(token: str) -> Optional[User]:
    """Validate a JWT and return its user, or None when it is unusable"""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        logger.debug(f"Ignoring invalid token: {e}")
        return None

    user_id = payload.get("sub")
    if user_id is None:
        return None

    try:
        return User(id=int(user_id), username=payload.get("username"))
    except (TypeError, ValueError):
        return None


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security)
) -> Optional[User]:
    """
    Optional authentication - returns None if no usable token provided
    """
    if not credentials:
        return None
    return decode_user(credentials.credentials)


def get_timeline_service(db: Database = Depends(get_db)) -> TimelineService:
    """Get TimelineService instance with dependencies"""
    return TimelineService(TimelineRepository(db))
