"""
Auth schemas - Pydantic models for registration and login.
Constraint violations are rendered as 400 {"message": ...} by the app's
validation handler.
"""

from pydantic import BaseModel, EmailStr, Field


class UserRegister(BaseModel):
    """
    Schema for POST /api/auth/register request body.

    Example request body:
    {
        "username": "jdoe",
        "password": "secret123",
        "email": "jdoe@example.com",
        "name": "Jane Doe"
    }
    """
    username: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=6)
    email: EmailStr
    name: str | None = None


class UserLogin(BaseModel):
    """Schema for POST /api/auth/login request body."""
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class Token(BaseModel):
    """
    Login response. Clients send it back as "Authorization: Bearer <access_token>".
    """
    access_token: str
    token_type: str = "bearer"
