"""Pydantic v2 schemas for Job endpoints.

Create requests keep the browser client's wire shape: ``{"jobData": {...},
"user": {...}}`` with a camelCase ``estimatedDuration``.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def capitalize_status(value: str | None) -> str | None:
    """'open' -> 'Open', 'IN-PROGRESS' -> 'In-progress'."""
    if not value:
        return value
    return value[:1].upper() + value[1:].lower()


class PosterInfo(BaseModel):
    """The authenticated poster, as forwarded by the browser client."""
    model_config = ConfigDict(populate_by_name=True)

    uid: str = Field(..., min_length=1, max_length=128)
    email: str = Field(..., min_length=1, max_length=320)
    display_name: str | None = Field(None, alias="displayName", max_length=256)


class JobData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=256)
    category: str = Field(..., min_length=1, max_length=128)
    material: str = Field(..., min_length=1, max_length=128)
    quantity: int = Field(..., ge=0)
    budget: float = Field(..., ge=0)
    location: str = Field(..., min_length=1, max_length=256)
    client: str | None = Field(None, max_length=256)
    deadline: date | None = None
    description: str | None = None
    requirements: dict | list | None = None
    specifications: dict | list | None = None
    estimated_duration: str | None = Field(None, alias="estimatedDuration", max_length=128)
    status: str | None = Field(None, max_length=32)

    @field_validator("title", "category", "material", "location")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class JobCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_data: JobData = Field(..., alias="jobData")
    user: PosterInfo


class JobUpdate(BaseModel):
    """Owner edit. Only the fields present in the body are written."""
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = Field(None, min_length=1, max_length=256)
    category: str | None = Field(None, min_length=1, max_length=128)
    material: str | None = Field(None, min_length=1, max_length=128)
    quantity: int | None = Field(None, ge=0)
    budget: float | None = Field(None, ge=0)
    location: str | None = Field(None, min_length=1, max_length=256)
    client: str | None = Field(None, max_length=256)
    deadline: date | None = None
    description: str | None = None
    requirements: dict | list | None = None
    specifications: dict | list | None = None
    estimated_duration: str | None = Field(None, alias="estimatedDuration", max_length=128)
    status: str | None = Field(None, max_length=32)

    @field_validator("title", "category", "material", "quantity", "budget", "location", "client", "status")
    @classmethod
    def not_null(cls, v: object) -> object:
        # Fields may be left out, but these columns cannot be cleared
        if v is None:
            raise ValueError("may be omitted but not set to null")
        return v


class AdminJobUpdate(JobUpdate):
    """Admin edit; accepts snake_case ``estimated_duration`` as well."""


class JobPriorityUpdate(BaseModel):
    priority: str = Field(..., pattern=r"^(high|normal|low)$")


class BoostRequest(BaseModel):
    user_uid: str = Field(..., min_length=1, max_length=128)


class BoostDecision(BaseModel):
    approved: bool = Field(..., strict=True)


class JobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    firebase_uid: str
    owner_uid: str
    user_name: str | None = None
    user_email: str | None = None
    title: str
    category: str
    material: str
    quantity: int
    budget: float
    location: str
    client: str
    deadline: date | None
    description: str | None
    requirements: dict | list
    specifications: dict | list
    estimated_duration: str | None
    status: str
    bids_received: int
    rating: float | None
    posted_date: datetime
    updated_at: datetime
    priority: str
    boost_requested: bool
    boost_approved: bool
    boost_requested_at: datetime | None
    boost_approved_at: datetime | None

    @model_validator(mode="before")
    @classmethod
    def from_job(cls, data: object) -> object:
        """Flatten the owning user onto the job and default the JSON columns."""
        if isinstance(data, dict):
            return data
        owner = getattr(data, "owner", None)
        values = {
            name: getattr(data, name)
            for name in cls.model_fields
            if name not in ("owner_uid", "user_name", "user_email") and hasattr(data, name)
        }
        values["owner_uid"] = data.firebase_uid  # type: ignore[attr-defined]
        values["user_name"] = owner.display_name if owner is not None else None
        values["user_email"] = owner.email if owner is not None else None
        if values.get("requirements") is None:
            values["requirements"] = {}
        if values.get("specifications") is None:
            values["specifications"] = []
        return values

    @field_validator("status", mode="after")
    @classmethod
    def display_status(cls, v: str) -> str:
        return capitalize_status(v) or v


class JobCreated(BaseModel):
    success: bool = True
    job_id: int = Field(..., serialization_alias="jobId")
