"""Pydantic v2 schemas for admin user and stats endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    firebase_uid: str
    email: str
    display_name: str | None
    role: str
    can_chat: bool
    can_sell: bool
    can_buy: bool
    is_seller_approved: bool
    created_at: datetime
    last_login: datetime


class AdminUserUpdate(BaseModel):
    """Profile and capability changes; only the fields sent are written."""

    email: str | None = Field(None, min_length=3, max_length=320)
    display_name: str | None = Field(None, max_length=256)
    role: str | None = Field(None, pattern=r"^(USER|ADMIN)$")
    can_chat: bool | None = None
    can_sell: bool | None = None
    can_buy: bool | None = None
    is_seller_approved: bool | None = None

    @field_validator("email", "role", "can_chat", "can_sell", "can_buy", "is_seller_approved")
    @classmethod
    def not_null(cls, v: object) -> object:
        if v is None:
            raise ValueError("may be omitted but not set to null")
        return v


class AdminStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_users: int = Field(..., serialization_alias="totalUsers")
    total_jobs: int = Field(..., serialization_alias="totalJobs")
    total_conversations: int = Field(..., serialization_alias="totalConversations")
    total_messages: int = Field(..., serialization_alias="totalMessages")
