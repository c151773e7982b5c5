"""Pydantic v2 schemas for testimonials, banners and sponsors."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

PLACEHOLDER_IMAGE = "/placeholder-banner.svg"


class TestimonialCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    company: str = Field(..., min_length=1, max_length=256)
    image: str = Field(..., max_length=2048)
    testimonial: str = Field(..., min_length=1)
    rating: int = Field(5, ge=1, le=5)
    active: bool = True


class TestimonialUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=256)
    company: str | None = Field(None, min_length=1, max_length=256)
    image: str | None = Field(None, max_length=2048)
    testimonial: str | None = Field(None, min_length=1)
    rating: int | None = Field(None, ge=1, le=5)
    active: bool | None = None


class TestimonialResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    company: str
    image: str
    testimonial: str
    rating: int
    active: bool
    created_at: datetime
    updated_at: datetime


class BannerCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=256)
    image: str = Field(..., min_length=1, max_length=2048)
    active: bool = True


class BannerUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=256)
    image: str | None = Field(None, min_length=1, max_length=2048)
    active: bool | None = None


class BannerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    image: str
    active: bool
    created_at: datetime
    updated_at: datetime


class SponsorCreate(BaseModel):
    name: str | None = Field(None, max_length=256, validate_default=True)
    logo: str | None = Field(None, max_length=2048, validate_default=True)
    website: str | None = Field(None, max_length=2048)
    active: bool = True

    @field_validator("name")
    @classmethod
    def default_name(cls, v: str | None) -> str:
        # Blank names would render as empty cards
        if v is None or not v.strip():
            return "New Sponsor"
        return v.strip()

    @field_validator("logo")
    @classmethod
    def default_logo(cls, v: str | None) -> str:
        if v is None or not v.strip():
            return PLACEHOLDER_IMAGE
        return v.strip()


class SponsorUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=256)
    logo: str | None = Field(None, min_length=1, max_length=2048)
    website: str | None = Field(None, max_length=2048)
    active: bool | None = None


class SponsorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    logo: str
    website: str | None
    active: bool
    created_at: datetime
    updated_at: datetime
