"""Authentication Pydantic schemas for API validation."""

from .auth import (
    TokenPayload,
    TokenResponse,
    UserBase,
    UserCreate,
    UserLogin,
    UserResponse,
)

__all__ = [
    "UserBase",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "TokenPayload",
    "TokenResponse",
]
