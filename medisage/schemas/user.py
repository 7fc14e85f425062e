"""
User schemas - what user data the API exposes (never the password hash).
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from medisage.ai.schemas.query import SubscriptionTier


class UserOut(BaseModel):
    """
    Schema for user data in API responses.

    Example response:
    {
        "id": "550e8400-e29b-41d4-a716-446655440000",
        "username": "jdoe",
        "email": "jdoe@example.com",
        "name": "Jane Doe",
        "tier": "personal",
        "is_active": true,
        "created_at": "2025-12-02T10:30:00Z"
    }
    """
    # from_attributes: build straight from the SQLAlchemy User object
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: str | None
    name: str | None
    tier: SubscriptionTier
    is_active: bool
    created_at: datetime


class TierUpdate(BaseModel):
    """Schema for PUT /api/user/tier."""
    tier: SubscriptionTier
