"""Memo request/response schemas."""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ....schema.types import RowStatus, Visibility


class MemoCreate(BaseModel):
    content: str = ""
    visibility: Visibility = Visibility.PRIVATE
    payload: dict[str, Any] = Field(default_factory=dict)


class MemoUpdate(BaseModel):
    """Partial update; only fields that are set are written."""

    content: str | None = None
    visibility: Visibility | None = None
    row_status: RowStatus | None = None
    payload: dict[str, Any] | None = None


class MemoResponse(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    id: int
    uid: str
    creator_id: int
    created_ts: int
    updated_ts: int
    row_status: RowStatus
    content: str
    visibility: Visibility
    pinned: bool
    payload: dict[str, Any]

    @classmethod
    def from_row(cls, row, pinned: bool | None = None) -> "MemoResponse":
        """Build from a memo row; `pinned` overrides with the caller's organizer state."""
        return cls(
            id=row["id"],
            uid=row["uid"],
            creator_id=row["creator_id"],
            created_ts=row["created_ts"],
            updated_ts=row["updated_ts"],
            row_status=row["row_status"],
            content=row["content"],
            visibility=row["visibility"],
            pinned=bool(row["pinned"]) if pinned is None else pinned,
            payload=json.loads(row["payload"] or "{}"),
        )


class OrganizerUpdate(BaseModel):
    pinned: bool


class RelationCreate(BaseModel):
    related_memo_uid: str
    type: str = Field(default="REFERENCE", min_length=1)


class RelationResponse(BaseModel):
    memo_id: int
    related_memo_id: int
    type: str
