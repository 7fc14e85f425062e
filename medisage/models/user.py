"""
User model - a registered MediSage account.
A user carries the subscription tier that decides which AI models serve them.
"""

import uuid  # Python's built-in module for generating unique identifiers
from datetime import datetime, timezone  # For timestamps with timezone awareness

from sqlalchemy import Boolean, DateTime, String, Uuid  # Column types for database
from sqlalchemy.orm import Mapped, mapped_column, relationship  # SQLAlchemy 2.0 ORM tools

from medisage.core.config import settings
from medisage.db.base import Base  # Declarative base class that all models inherit from


class User(Base):
    """
    SQLAlchemy ORM model for the 'users' table.

    A MediSage user can:
    - Register and log in with username/password
    - Ask questions, check symptoms and (corporate tier) scan medicines
    - Save items from their history for later
    """

    __tablename__ = "users"

    # ---------------------------------------------------------------------------
    # PRIMARY KEY
    # ---------------------------------------------------------------------------
    # Uuid: native UUID on PostgreSQL, CHAR(32) elsewhere (SQLite in tests)
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # ---------------------------------------------------------------------------
    # CREDENTIALS
    # ---------------------------------------------------------------------------
    # username: login name, unique across accounts (409 on duplicates)
    username: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)

    # email: contact address, not used for login
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # hashed_password: bcrypt hash, plain passwords are never stored
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    # ---------------------------------------------------------------------------
    # PROFILE
    # ---------------------------------------------------------------------------
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # tier: "personal" or "corporate"; resolved on every orchestrated request
    tier: Mapped[str] = mapped_column(
        String(20), nullable=False, default=lambda: settings.DEFAULT_TIER
    )

    # ---------------------------------------------------------------------------
    # ACCOUNT STATUS
    # ---------------------------------------------------------------------------
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # ---------------------------------------------------------------------------
    # TIMESTAMPS
    # ---------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ---------------------------------------------------------------------------
    # RELATIONSHIPS
    # ---------------------------------------------------------------------------
    # history: every recorded request/result pair made while logged in
    history: Mapped[list["HistoryRecord"]] = relationship(
        "HistoryRecord", back_populates="user"
    )
