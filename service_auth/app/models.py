"""
Data models for Auth service.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class User:
    """Stored user record. The password is only ever kept as a bcrypt hash."""
    id: str
    username: str
    email: str
    password_hash: str
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)


class RegisterRequest(BaseModel):
    """Request model for user registration."""
    username: str = Field(..., description="Display name, unique")
    email: str = Field(..., description="Login email, unique")
    password: str = Field(..., description="Plain-text password")


class RegisterResponse(BaseModel):
    """Response model for user registration."""
    user_id: str
    message: str = "User registered successfully"


class LoginRequest(BaseModel):
    """Request model for login."""
    email: str
    password: str


class LoginResponse(BaseModel):
    """Response model for login."""
    token: str
    user_id: str
    username: str


class TokenValidationRequest(BaseModel):
    """Request model for token validation."""
    token: str


class TokenValidationResponse(BaseModel):
    """Response model for token validation."""
    valid: bool
    user_id: Optional[str] = None
    username: Optional[str] = None
