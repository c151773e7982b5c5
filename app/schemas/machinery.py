"""Pydantic v2 schemas for machinery listings."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Columns that can be left out of an update but never cleared
_REQUIRED = ("name", "category", "price", "unit", "rating", "in_stock")


class MachineryFields(BaseModel):
    capacity: str | None = Field(None, max_length=128)
    unit: str = Field("piece", min_length=1, max_length=32)
    image: str | None = Field(None, max_length=2048)
    location: str | None = Field(None, max_length=256)
    supplier: str | None = Field(None, max_length=256)
    rating: float = Field(0, ge=0, le=5)
    in_stock: bool = True
    year: int | None = Field(None, ge=1900, le=2100)
    condition: str | None = Field(None, max_length=64)
    description: str | None = None
    specifications: dict | list | None = None
    features: dict | list | None = None


class MachineryCreate(MachineryFields):
    """A seller's listing. ``firebase_uid`` identifies the poster."""

    firebase_uid: str = Field(..., min_length=1, max_length=128)
    name: str = Field(..., min_length=1, max_length=256)
    category: str = Field(..., min_length=1, max_length=128)
    price: float = Field(..., gt=0)


class AdminMachineryCreate(MachineryFields):
    """Admin-entered listing with no owner; approved on creation."""

    name: str = Field(..., min_length=1, max_length=256)
    category: str = Field(..., min_length=1, max_length=128)
    price: float = Field(..., gt=0)
    is_approved: bool = True


class MachineryUpdate(BaseModel):
    """Owner edit. Only the fields present in the body are written."""

    firebase_uid: str = Field(..., min_length=1, max_length=128)
    name: str | None = Field(None, min_length=1, max_length=256)
    category: str | None = Field(None, min_length=1, max_length=128)
    capacity: str | None = Field(None, max_length=128)
    price: float | None = Field(None, gt=0)
    unit: str | None = Field(None, min_length=1, max_length=32)
    image: str | None = Field(None, max_length=2048)
    location: str | None = Field(None, max_length=256)
    supplier: str | None = Field(None, max_length=256)
    rating: float | None = Field(None, ge=0, le=5)
    in_stock: bool | None = None
    year: int | None = Field(None, ge=1900, le=2100)
    condition: str | None = Field(None, max_length=64)
    description: str | None = None
    specifications: dict | list | None = None
    features: dict | list | None = None

    @field_validator(*_REQUIRED)
    @classmethod
    def not_null(cls, v: object) -> object:
        if v is None:
            raise ValueError("may be omitted but not set to null")
        return v

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude={"firebase_uid"})


class AdminMachineryUpdate(MachineryUpdate):
    """Admin edit: no owner check, and may approve or hide the listing."""

    firebase_uid: str | None = None  # type: ignore[assignment]
    is_approved: bool | None = None

    @field_validator("is_approved")
    @classmethod
    def approval_not_null(cls, v: bool | None) -> bool:
        if v is None:
            raise ValueError("may be omitted but not set to null")
        return v


class MachineryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int | None
    firebase_uid: str | None
    user_name: str | None = None
    user_email: str | None = None
    name: str
    category: str
    capacity: str | None
    price: float
    unit: str
    image: str | None
    location: str | None
    supplier: str | None
    rating: float
    in_stock: bool
    year: int | None
    condition: str | None
    description: str | None
    specifications: dict | list | None
    features: dict | list | None
    is_approved: bool
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="before")
    @classmethod
    def from_listing(cls, data: object) -> object:
        """Flatten the posting user's name and email onto the listing."""
        if isinstance(data, dict):
            return data
        owner = getattr(data, "owner", None)
        values = {
            name: getattr(data, name)
            for name in cls.model_fields
            if name not in ("user_name", "user_email")
        }
        values["user_name"] = owner.display_name if owner is not None else None
        values["user_email"] = owner.email if owner is not None else None
        return values


class MachineryConversationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    machinery_id: int
    machinery_name: str | None
    machinery_image: str | None
    seller_uid: str
    seller_name: str | None
    buyer_uid: str
    buyer_name: str | None
    permission_granted: bool
    last_message: str | None
    last_message_time: datetime
    created_at: datetime
