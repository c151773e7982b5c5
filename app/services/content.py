"""Admin-managed homepage content with change broadcasts.

Testimonials, banners and sponsors share one set of operations; each kind
names its model, the event emitted after a write, and its 404 label.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from fastapi import HTTPException
from pydantic import BaseModel
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base
from app.models.content import Banner, Sponsor, Testimonial
from app.services.broadcast import (
    BANNERS_UPDATED,
    SPONSORS_UPDATED,
    TESTIMONIALS_UPDATED,
    Broadcaster,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentKind:
    model: type[Base]
    event: str
    label: str


TESTIMONIALS = ContentKind(Testimonial, TESTIMONIALS_UPDATED, "Testimonial")
BANNERS = ContentKind(Banner, BANNERS_UPDATED, "Banner")
SPONSORS = ContentKind(Sponsor, SPONSORS_UPDATED, "Sponsor")

DEFAULT_TESTIMONIALS: list[dict[str, Any]] = [
    {
        "name": "Rajesh Kumar",
        "company": "Kumar Plastics Ltd.",
        "image": "/placeholder-avatar.svg",
        "testimonial": "Excellent platform for finding quality machinery. "
        "Found the perfect injection molding machine for our production line.",
        "rating": 5,
    },
    {
        "name": "Priya Sharma",
        "company": "Sharma Industries",
        "image": "/placeholder-avatar.svg",
        "testimonial": "Great experience sourcing raw materials. "
        "The suppliers are reliable and the quality is consistently good.",
        "rating": 5,
    },
    {
        "name": "Amit Patel",
        "company": "Patel Manufacturing",
        "image": "/placeholder-avatar.svg",
        "testimonial": "The B2B platform has revolutionized our procurement process. "
        "Highly recommended for plastic industry professionals.",
        "rating": 5,
    },
    {
        "name": "Sunita Reddy",
        "company": "Reddy Polymers",
        "image": "/placeholder-avatar.svg",
        "testimonial": "Outstanding service and quality products. "
        "The platform connects us with the best suppliers in the industry.",
        "rating": 5,
    },
]

DEFAULT_BANNERS: list[dict[str, Any]] = [
    {"title": "Welcome to B2B Plastics SRM", "image": "/placeholder-banner.svg"},
    {"title": "Quality Machinery & Materials", "image": "/placeholder-banner.svg"},
]

DEFAULT_SPONSORS: list[dict[str, Any]] = [
    {
        "name": "PlasticTech Solutions",
        "logo": "/placeholder-banner.svg",
        "website": "https://plastictechsolutions.com",
    },
    {
        "name": "Industrial Partners",
        "logo": "/placeholder-banner.svg",
        "website": "https://industrialpartners.com",
    },
]


async def list_items(db: AsyncSession, kind: ContentKind, active_only: bool = True) -> list[Any]:
    """Newest first. Public listings only include active rows."""
    model: Any = kind.model
    query = select(model)
    if active_only:
        query = query.where(model.active.is_(True))
    result = await db.execute(query.order_by(model.created_at.desc(), model.id.desc()))
    return list(result.scalars().all())


async def create_item(
    db: AsyncSession, broadcaster: Broadcaster, kind: ContentKind, data: BaseModel
) -> Any:
    item = kind.model(**data.model_dump())
    db.add(item)
    await db.commit()
    await db.refresh(item)
    logger.info("%s %s created", kind.label, item.id)  # type: ignore[attr-defined]
    await broadcaster.emit(kind.event)
    return item


async def update_item(
    db: AsyncSession, broadcaster: Broadcaster, kind: ContentKind, item_id: int, data: BaseModel
) -> Any:
    # Explicit nulls mean "leave unchanged"
    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    item = await db.get(kind.model, item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"{kind.label} not found")
    for name, value in changes.items():
        setattr(item, name, value)
    item.updated_at = datetime.now(UTC)  # type: ignore[attr-defined]
    await db.commit()
    await db.refresh(item)
    await broadcaster.emit(kind.event)
    return item


async def delete_item(
    db: AsyncSession, broadcaster: Broadcaster, kind: ContentKind, item_id: int
) -> None:
    model: Any = kind.model
    result = await db.execute(delete(model).where(model.id == item_id))
    if result.rowcount == 0:
        await db.rollback()
        raise HTTPException(status_code=404, detail=f"{kind.label} not found")
    await db.commit()
    logger.info("%s %s deleted", kind.label, item_id)
    await broadcaster.emit(kind.event)


async def seed_defaults(db: AsyncSession) -> None:
    """Insert the stock rows into any content table that is still empty."""
    for kind, rows in (
        (TESTIMONIALS, DEFAULT_TESTIMONIALS),
        (BANNERS, DEFAULT_BANNERS),
        (SPONSORS, DEFAULT_SPONSORS),
    ):
        model: Any = kind.model
        count = (await db.execute(select(func.count(model.id)))).scalar_one()
        if count:
            continue
        db.add_all(model(**row) for row in rows)
        logger.info("Seeded %d default %s rows", len(rows), kind.label.lower())
    await db.commit()
