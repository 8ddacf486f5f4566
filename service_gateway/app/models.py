"""
Request models for the Gateway's public API.
"""

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    """Public registration payload."""
    username: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    """Public login payload."""
    email: str
    password: str
