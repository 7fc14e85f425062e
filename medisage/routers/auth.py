"""
Auth router - registration, login and session status.
Register and login are public; status requires a bearer token.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from medisage.core.security import create_access_token, hash_password, verify_password
from medisage.db.session import get_db
from medisage.deps import get_current_user
from medisage.models.user import User
from medisage.schemas.auth import Token, UserLogin, UserRegister
from medisage.schemas.user import UserOut

# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/api/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# POST /api/auth/register - Create a new account
# ---------------------------------------------------------------------------
@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    """
    Register a new user account on the default tier.

    Raises:
        400 Bad Request: missing or malformed fields
        409 Conflict: username already taken
    """
    existing = db.query(User).filter(User.username == payload.username).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already exists",
        )

    user = User(
        username=payload.username,
        email=payload.email,
        name=payload.name,
        hashed_password=hash_password(payload.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


# ---------------------------------------------------------------------------
# POST /api/auth/login - Authenticate and get a JWT
# ---------------------------------------------------------------------------
@router.post("/login", response_model=Token)
def login(payload: UserLogin, db: Session = Depends(get_db)):
    """
    Exchange username/password for a bearer token.

    Unknown username and wrong password share one 401 so usernames
    can't be enumerated.
    """
    user = db.query(User).filter(User.username == payload.username).first()
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    return Token(access_token=create_access_token(subject=str(user.id)))


# ---------------------------------------------------------------------------
# GET /api/auth/status - Who am I
# ---------------------------------------------------------------------------
@router.get("/status", response_model=UserOut)
def auth_status(current_user: User = Depends(get_current_user)):
    """Return the authenticated user, or 401 when the token is missing or invalid."""
    return current_user
