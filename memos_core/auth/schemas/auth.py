"""Pydantic schemas for authentication requests and responses."""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...schema.types import Role

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class UserBase(BaseModel):
    """Shared username field, normalized to lowercase."""

    username: str = Field(..., min_length=1, max_length=64)

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username may only contain letters, numbers, underscores and hyphens")
        return v.lower()


class UserCreate(UserBase):
    """Signup request."""

    password: str = Field(..., description="At least 8 characters, one letter and one digit")
    nickname: str = ""
    email: str = ""

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        if not any(c.isalpha() for c in v):
            raise ValueError("Password must contain at least one letter")
        if not any(c.isdigit() for c in v):
            raise ValueError("Password must contain at least one digit")
        return v


class UserLogin(BaseModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v: str) -> str:
        return v.lower()


class UserResponse(BaseModel):
    """Public user fields; never includes the password hash."""

    model_config = ConfigDict(use_enum_values=True)

    id: int
    username: str
    role: Role
    nickname: str = ""
    email: str = ""
    avatar_url: str = ""
    description: str = ""
    row_status: str = "NORMAL"
    created_ts: int
    updated_ts: int


class TokenPayload(BaseModel):
    """JWT claims."""

    sub: str  # user id; JWT requires a string subject
    username: str
    role: Role
    iat: int
    exp: int


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
