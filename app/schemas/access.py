"""Pydantic v2 schemas for chat requests and per-listing chat permissions."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ChatRequestCreate(BaseModel):
    user_uid: str = Field(..., min_length=1, max_length=128)
    user_name: str | None = Field(None, max_length=256)
    user_email: str | None = Field(None, max_length=320)
    job_id: int | None = None
    reason: str | None = None


class ChatRequestReview(BaseModel):
    status: str = Field(..., pattern=r"^(approved|rejected)$")
    notes: str | None = None


class ChatRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_uid: str
    user_name: str | None
    user_email: str | None
    job_id: int | None
    job_title: str | None = None
    job_client: str | None = None
    reason: str | None
    status: str
    requested_at: datetime
    reviewed_at: datetime | None
    reviewed_by: str | None
    notes: str | None


class ChatPermissionCreate(BaseModel):
    requester_uid: str = Field(..., min_length=1, max_length=128)
    seller_uid: str = Field(..., min_length=1, max_length=128)
    seller_name: str | None = Field(None, max_length=256)
    machinery_id: int


class ChatPermissionDecision(BaseModel):
    approved: bool = Field(..., strict=True)
    admin_uid: str | None = Field(None, max_length=128)


class ChatPermissionRevoke(BaseModel):
    admin_uid: str | None = Field(None, max_length=128)


class ChatPermissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    requester_uid: str
    requester_name: str | None
    seller_uid: str
    seller_name: str | None
    machinery_id: int
    machinery_name: str | None = None
    machinery_image: str | None = None
    status: str
    requested_at: datetime
    approved_at: datetime | None
    approved_by: str | None
    revoked_at: datetime | None
    revoked_by: str | None
