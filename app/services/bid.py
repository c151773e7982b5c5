"""Bids: at most one per (job, bidder), overwritten in place on re-bid."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.bid import Bid
from app.schemas.bid import BidCreate
from app.services.job import get_job, refresh_bid_count

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BidResult:
    bid_id: int
    updated: bool


async def place_bid(db: AsyncSession, job_id: int, data: BidCreate) -> BidResult:
    """Create the caller's bid on a job, or overwrite their existing one.

    A single INSERT .. ON CONFLICT statement, so two concurrent first bids
    from the same bidder cannot both insert. ``updated`` is true when an
    existing bid was overwritten.
    """
    await get_job(db, job_id)

    now = datetime.now(UTC)
    stmt = sqlite_insert(Bid).values(
        job_id=job_id,
        bidder_uid=data.bidder_uid,
        bidder_name=data.bidder_name,
        bid_amount=data.bid_amount,
        message=data.message,
        revision=0,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["job_id", "bidder_uid"],
        set_={
            "bid_amount": stmt.excluded.bid_amount,
            "message": stmt.excluded.message,
            "bidder_name": stmt.excluded.bidder_name,
            "updated_at": now,
            "revision": Bid.revision + 1,
        },
    ).returning(Bid.id, Bid.revision)

    row = (await db.execute(stmt)).one()
    await refresh_bid_count(db, job_id)
    await db.commit()

    result = BidResult(bid_id=row.id, updated=row.revision > 0)
    logger.info(
        "Bid %s on job %s by %s %s",
        result.bid_id, job_id, data.bidder_uid, "updated" if result.updated else "placed",
    )
    return result


async def get_my_bid(db: AsyncSession, job_id: int, bidder_uid: str) -> Bid | None:
    result = await db.execute(
        select(Bid).where(Bid.job_id == job_id, Bid.bidder_uid == bidder_uid)
    )
    return result.scalar_one_or_none()


async def list_bids(db: AsyncSession, job_id: int) -> list[Bid]:
    result = await db.execute(
        select(Bid).where(Bid.job_id == job_id).order_by(Bid.created_at.desc(), Bid.id.desc())
    )
    return list(result.scalars().all())


async def update_bid_status(db: AsyncSession, bid_id: int, status: str) -> Bid:
    result = await db.execute(select(Bid).where(Bid.id == bid_id))
    bid = result.scalar_one_or_none()
    if bid is None:
        raise HTTPException(status_code=404, detail="Bid not found")
    bid.status = status
    bid.updated_at = datetime.now(UTC)
    await db.commit()
    return bid
