"""System and user setting schemas."""

from pydantic import BaseModel


class SystemSettingUpdate(BaseModel):
    value: str
    description: str = ""


class SystemSettingResponse(BaseModel):
    name: str
    value: str
    description: str


class UserSettingUpdate(BaseModel):
    value: str


class UserSettingResponse(BaseModel):
    user_id: int
    key: str
    value: str
