"""Pydantic schemas for API v1 validation.

Auth schemas are re-exported from the auth module for convenience.
"""

from ....auth.schemas import TokenResponse, UserResponse

from .inbox import InboxCreate, InboxResponse, InboxUpdate
from .memo import MemoCreate, MemoResponse, MemoUpdate, OrganizerUpdate, RelationCreate, RelationResponse
from .reaction import ReactionCreate, ReactionResponse
from .setting import SystemSettingResponse, SystemSettingUpdate, UserSettingResponse, UserSettingUpdate
from .user import RoleUpdate, UserUpdate

__all__ = [
    "MemoCreate",
    "MemoUpdate",
    "MemoResponse",
    "OrganizerUpdate",
    "RelationCreate",
    "RelationResponse",
    "InboxCreate",
    "InboxUpdate",
    "InboxResponse",
    "ReactionCreate",
    "ReactionResponse",
    "SystemSettingUpdate",
    "SystemSettingResponse",
    "UserSettingUpdate",
    "UserSettingResponse",
    "UserUpdate",
    "RoleUpdate",
    # Auth schemas (re-exported from memos_core.auth.schemas)
    "UserResponse",
    "TokenResponse",
]
