"""Pydantic v2 schemas for bids."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BidCreate(BaseModel):
    bidder_uid: str = Field(..., min_length=1, max_length=128)
    bidder_name: str = Field(..., min_length=1, max_length=256)
    bid_amount: float = Field(..., gt=0)
    message: str | None = Field(None, max_length=4096)


class BidStatusUpdate(BaseModel):
    status: str = Field(..., pattern=r"^(pending|accepted|rejected|withdrawn)$")


class BidResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    job_id: int
    bidder_uid: str
    bidder_name: str
    bid_amount: float
    message: str | None
    status: str
    created_at: datetime
    updated_at: datetime
