"""Inbox request/response schemas."""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ....schema.types import InboxStatus


class InboxCreate(BaseModel):
    receiver_id: int
    message: dict[str, Any] = Field(default_factory=dict)


class InboxUpdate(BaseModel):
    status: InboxStatus


class InboxResponse(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    id: int
    created_ts: int
    sender_id: int
    receiver_id: int
    status: str
    message: dict[str, Any]

    @classmethod
    def from_row(cls, row) -> "InboxResponse":
        return cls(
            id=row["id"],
            created_ts=row["created_ts"],
            sender_id=row["sender_id"],
            receiver_id=row["receiver_id"],
            status=row["status"],
            message=json.loads(row["message"] or "{}"),
        )
