"""Machinery listings: seller CRUD gated on admin-granted selling rights, admin moderation."""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import HTTPException
from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.machinery import Machinery
from app.models.user import User
from app.schemas.machinery import AdminMachineryCreate, MachineryCreate, MachineryUpdate
from app.services.user import get_user_by_uid

logger = logging.getLogger(__name__)

SELLING_NOT_APPROVED = "Selling permission not approved. Please contact admin for seller approval."


async def list_approved(db: AsyncSession) -> list[Machinery]:
    """Public catalogue: approved listings, newest first."""
    result = await db.execute(
        select(Machinery)
        .where(Machinery.is_approved.is_(True))
        .order_by(Machinery.created_at.desc(), Machinery.id.desc())
    )
    return list(result.scalars().all())


async def list_for_user(db: AsyncSession, firebase_uid: str) -> list[Machinery]:
    """A seller's own listings, including those still awaiting approval."""
    result = await db.execute(
        select(Machinery)
        .where(Machinery.firebase_uid == firebase_uid)
        .order_by(Machinery.created_at.desc(), Machinery.id.desc())
    )
    return list(result.scalars().all())


async def get_listing(db: AsyncSession, machinery_id: int) -> Machinery:
    result = await db.execute(
        select(Machinery)
        .where(Machinery.id == machinery_id)
        .execution_options(populate_existing=True)
    )
    listing = result.scalar_one_or_none()
    if listing is None:
        raise HTTPException(status_code=404, detail="Machinery not found")
    return listing


async def create_listing(db: AsyncSession, data: MachineryCreate) -> Machinery:
    """Create a seller's listing. New listings wait for admin approval."""
    seller = await get_user_by_uid(db, data.firebase_uid)
    if seller is None:
        raise HTTPException(status_code=404, detail="User not found")
    if not seller.may_list_machinery:
        raise HTTPException(status_code=403, detail=SELLING_NOT_APPROVED)

    listing = Machinery(
        user_id=seller.id,
        is_approved=False,
        **data.model_dump(),
    )
    db.add(listing)
    await db.commit()
    logger.info("Machinery %s listed by %s, pending approval", listing.id, data.firebase_uid)
    return await get_listing(db, listing.id)


async def _owned_listing(db: AsyncSession, machinery_id: int, firebase_uid: str, action: str) -> Machinery:
    listing = await db.get(Machinery, machinery_id)
    if listing is None:
        raise HTTPException(status_code=404, detail="Machinery not found")
    if listing.firebase_uid != firebase_uid:
        raise HTTPException(status_code=403, detail=f"You can only {action} your own machinery")
    return listing


def _apply(listing: Machinery, changes: dict[str, Any]) -> None:
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")
    for name, value in changes.items():
        setattr(listing, name, value)
    listing.updated_at = datetime.now(UTC)


async def update_listing(db: AsyncSession, machinery_id: int, data: MachineryUpdate) -> Machinery:
    listing = await _owned_listing(db, machinery_id, data.firebase_uid, "edit")
    _apply(listing, data.changes())
    await db.commit()
    return await get_listing(db, machinery_id)


async def delete_listing(db: AsyncSession, machinery_id: int, firebase_uid: str) -> None:
    listing = await _owned_listing(db, machinery_id, firebase_uid, "delete")
    await db.delete(listing)
    await db.commit()
    logger.info("Machinery %s deleted by its seller", machinery_id)


# --- Admin ---

async def search_listings(db: AsyncSession, search: str | None = None) -> list[Machinery]:
    """Every listing, grouped by category, matching name/category/supplier/seller."""
    query = select(Machinery)
    if search:
        term = f"%{search.lower()}%"
        query = query.outerjoin(User, Machinery.user_id == User.id).where(
            or_(
                Machinery.name.ilike(term),
                Machinery.category.ilike(term),
                Machinery.supplier.ilike(term),
                User.display_name.ilike(term),
            )
        )
    result = await db.execute(
        query.order_by(Machinery.category, Machinery.created_at.desc(), Machinery.id.desc())
    )
    return list(result.scalars().all())


async def admin_create_listing(db: AsyncSession, data: AdminMachineryCreate) -> Machinery:
    listing = Machinery(**data.model_dump())
    db.add(listing)
    await db.commit()
    logger.info("Admin listed machinery %s", listing.id)
    return await get_listing(db, listing.id)


async def admin_update_listing(db: AsyncSession, machinery_id: int, data: MachineryUpdate) -> Machinery:
    listing = await db.get(Machinery, machinery_id)
    if listing is None:
        raise HTTPException(status_code=404, detail="Machinery not found")
    _apply(listing, data.changes())
    await db.commit()
    return await get_listing(db, machinery_id)


async def admin_delete_listing(db: AsyncSession, machinery_id: int) -> None:
    """Delete a listing. Its chat permissions and threads go with it via ON DELETE CASCADE."""
    result = await db.execute(delete(Machinery).where(Machinery.id == machinery_id))
    if result.rowcount == 0:
        await db.rollback()
        raise HTTPException(status_code=404, detail="Machinery not found")
    await db.commit()
    logger.info("Admin deleted machinery %s", machinery_id)
