"""Pydantic v2 schemas for chat endpoints (camelCase wire names)."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ConversationCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: int = Field(..., alias="jobId")
    job_owner_uid: str = Field(..., alias="jobOwnerUid", min_length=1)
    participant_uid: str = Field(..., alias="participantUid", min_length=1)
    job_title: str = Field(..., alias="jobTitle")


class MessageCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    conversation_id: int = Field(..., alias="conversationId")
    sender_uid: str = Field(..., alias="senderUid", min_length=1)
    sender_name: str = Field(..., alias="senderName")
    message: str = Field(..., min_length=1)


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: int
    sender_uid: str
    sender_name: str
    message: str
    timestamp: datetime


class ConversationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    job_id: int
    job_owner_uid: str
    participant_uid: str
    job_title: str
    last_message: str | None
    last_message_time: datetime
    created_at: datetime
    job_owner_name: str | None = None
    participant_name: str | None = None
