"""Reaction request/response schemas."""

from pydantic import BaseModel, Field


class ReactionCreate(BaseModel):
    content_id: str = Field(..., min_length=1)
    reaction_type: str = Field(..., min_length=1)


class ReactionResponse(BaseModel):
    id: int
    created_ts: int
    creator_id: int
    content_id: str
    reaction_type: str

    @classmethod
    def from_row(cls, row) -> "ReactionResponse":
        return cls(**{name: row[name] for name in cls.model_fields})
