"""Pydantic v2 schemas for the community forum."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class _Stripped(BaseModel):
    @field_validator("*", mode="before")
    @classmethod
    def strip_strings(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class ForumPostCreate(_Stripped):
    user_uid: str = Field(..., min_length=1, max_length=128)
    title: str = Field(..., min_length=1, max_length=256)
    content: str = Field(..., min_length=1)


class ForumCommentCreate(_Stripped):
    user_uid: str = Field(..., min_length=1, max_length=128)
    content: str = Field(..., min_length=1)


class ForumPostResponse(BaseModel):
    id: int
    user_id: int
    title: str
    content: str
    created_at: datetime
    firebase_uid: str | None = None
    display_name: str | None = None
    email: str | None = None


class ForumCommentResponse(BaseModel):
    id: int
    post_id: int
    user_id: int
    content: str
    created_at: datetime
    firebase_uid: str | None = None
    display_name: str | None = None
    email: str | None = None


class AdminForumPostResponse(ForumPostResponse):
    comment_count: int = 0


class AdminForumCommentResponse(ForumCommentResponse):
    post_title: str | None = None
