"""
Dependencies module - reusable FastAPI dependencies for route handlers.

get_current_user protects account endpoints; get_optional_user lets the AI
endpoints serve anonymous callers; resolve_tier turns either into the
explicit SubscriptionTier the orchestrator needs.
"""

import logging
import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from medisage.ai.schemas.query import SubscriptionTier
from medisage.core.config import settings
from medisage.core.security import decode_access_token
from medisage.db.session import get_db
from medisage.models.user import User

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# SECURITY SCHEME
# ---------------------------------------------------------------------------
# auto_error=False: a missing header yields None instead of FastAPI's 403,
# so we can answer 401 (required) or fall through to anonymous (optional)
security = HTTPBearer(auto_error=False)


def _credentials_exception(detail: str = "Not authenticated") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _user_from_token(token: str, db: Session) -> User:
    """
    Resolve a bearer token to an active user.

    The same 401 is used for a bad signature, an expired token and a
    deleted user, so callers can't tell which one happened.
    """
    subject = decode_access_token(token)
    if subject is None:
        raise _credentials_exception("Could not validate credentials")

    try:
        uid = uuid.UUID(subject)
    except ValueError:
        raise _credentials_exception("Could not validate credentials")

    user = db.query(User).filter(User.id == uid).first()
    if user is None:
        raise _credentials_exception("Could not validate credentials")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Validate the JWT and return the authenticated user.

    Raises:
        401 Unauthorized: token missing, invalid, expired, or user not found
        403 Forbidden: account deactivated
    """
    if credentials is None:
        raise _credentials_exception()
    return _user_from_token(credentials.credentials, db)


def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User | None:
    """
    Like get_current_user, but anonymous requests get None.

    A token that is present but invalid is still rejected with 401.
    """
    if credentials is None:
        return None
    return _user_from_token(credentials.credentials, db)


def resolve_tier(user: User | None) -> SubscriptionTier:
    """
    The caller's tier: the user's own, or DEFAULT_TIER for anonymous requests.

    A stored tier that is no longer a SubscriptionTier also falls back to
    DEFAULT_TIER, with a warning, instead of failing the request.
    """
    if user is None:
        return SubscriptionTier(settings.DEFAULT_TIER)
    try:
        return SubscriptionTier(user.tier)
    except ValueError:
        logger.warning(
            f"User {user.id} has unknown tier {user.tier!r}, using {settings.DEFAULT_TIER}"
        )
        return SubscriptionTier(settings.DEFAULT_TIER)
