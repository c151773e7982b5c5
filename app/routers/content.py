"""Homepage content endpoints: testimonials, banners and sponsors.

Every successful write broadcasts the matching ``*_updated`` event.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rate_limit import check_rate_limit
from app.context import get_broadcaster
from app.database import get_db
from app.schemas.content import (
    BannerCreate,
    BannerResponse,
    BannerUpdate,
    SponsorCreate,
    SponsorResponse,
    SponsorUpdate,
    TestimonialCreate,
    TestimonialResponse,
    TestimonialUpdate,
)
from app.services import content as content_service
from app.services.broadcast import Broadcaster
from app.services.content import BANNERS, SPONSORS, TESTIMONIALS

router = APIRouter(tags=["content"])
write_router = APIRouter(tags=["content"], dependencies=[Depends(check_rate_limit)])


# --- Testimonials ---

@router.get("/testimonials", response_model=list[TestimonialResponse])
async def list_testimonials(db: AsyncSession = Depends(get_db)) -> list[TestimonialResponse]:
    """Active testimonials, newest first."""
    items = await content_service.list_items(db, TESTIMONIALS)
    return [TestimonialResponse.model_validate(i) for i in items]


@write_router.post("/testimonials")
async def create_testimonial(
    data: TestimonialCreate,
    db: AsyncSession = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> dict:
    item = await content_service.create_item(db, broadcaster, TESTIMONIALS, data)
    return {"success": True, "id": item.id}


@write_router.put("/testimonials/{item_id}")
async def update_testimonial(
    item_id: int,
    data: TestimonialUpdate,
    db: AsyncSession = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> dict:
    await content_service.update_item(db, broadcaster, TESTIMONIALS, item_id, data)
    return {"success": True}


@write_router.delete("/testimonials/{item_id}")
async def delete_testimonial(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> dict:
    await content_service.delete_item(db, broadcaster, TESTIMONIALS, item_id)
    return {"success": True}


# --- Banners ---

@router.get("/banners", response_model=list[BannerResponse])
async def list_banners(db: AsyncSession = Depends(get_db)) -> list[BannerResponse]:
    items = await content_service.list_items(db, BANNERS)
    return [BannerResponse.model_validate(i) for i in items]


@write_router.post("/banners")
async def create_banner(
    data: BannerCreate,
    db: AsyncSession = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> dict:
    item = await content_service.create_item(db, broadcaster, BANNERS, data)
    return {"success": True, "id": item.id}


@write_router.put("/banners/{item_id}")
async def update_banner(
    item_id: int,
    data: BannerUpdate,
    db: AsyncSession = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> dict:
    await content_service.update_item(db, broadcaster, BANNERS, item_id, data)
    return {"success": True}


@write_router.delete("/banners/{item_id}")
async def delete_banner(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> dict:
    await content_service.delete_item(db, broadcaster, BANNERS, item_id)
    return {"success": True}


# --- Sponsors ---

@router.get("/sponsors", response_model=list[SponsorResponse])
async def list_sponsors(db: AsyncSession = Depends(get_db)) -> list[SponsorResponse]:
    items = await content_service.list_items(db, SPONSORS)
    return [SponsorResponse.model_validate(i) for i in items]


@write_router.post("/sponsors")
async def create_sponsor(
    data: SponsorCreate,
    db: AsyncSession = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> dict:
    item = await content_service.create_item(db, broadcaster, SPONSORS, data)
    return {"success": True, "id": item.id}


@write_router.put("/sponsors/{item_id}")
async def update_sponsor(
    item_id: int,
    data: SponsorUpdate,
    db: AsyncSession = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> dict:
    await content_service.update_item(db, broadcaster, SPONSORS, item_id, data)
    return {"success": True}


@write_router.delete("/sponsors/{item_id}")
async def delete_sponsor(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> dict:
    await content_service.delete_item(db, broadcaster, SPONSORS, item_id)
    return {"success": True}
