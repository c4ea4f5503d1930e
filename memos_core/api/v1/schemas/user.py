"""User profile schemas."""

from pydantic import BaseModel

from ....schema.types import Role


class UserUpdate(BaseModel):
    """Self-service profile update. Role and password are not editable here."""

    nickname: str | None = None
    email: str | None = None
    avatar_url: str | None = None
    description: str | None = None


class RoleUpdate(BaseModel):
    role: Role
