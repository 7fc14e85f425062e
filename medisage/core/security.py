"""
Security utilities - password hashing and JWT handling for MediSage accounts.

Session mechanics stay deliberately thin: the rest of the API only needs
"given a request, resolve an optional authenticated user id", and a signed
bearer token carrying the user's UUID is enough for that.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from medisage.core.config import settings

# bcrypt via passlib; deprecated="auto" keeps old hashes verifiable if the
# scheme list ever changes
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash for storage in users.hashed_password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Timing-safe comparison of a login attempt against the stored hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(subject: str, expires_delta: timedelta | None = None) -> str:
    """
    Create a signed JWT access token.

    Args:
        subject: Stored in the "sub" claim - the user's UUID as a string
        expires_delta: Optional lifetime; defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded token string for the "Authorization: Bearer <token>" header
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": subject, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[str]:
    """
    Decode a token and return its subject, or None when invalid or expired.

    Signature and "exp" are both verified by jose.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub")
