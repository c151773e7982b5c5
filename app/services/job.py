"""Job listing business logic: CRUD, owner listings and boost requests."""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import HTTPException
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.bid import Bid
from app.models.job import PRIORITY_ORDER, Job, JobPriority
from app.models.user import User
from app.schemas.job import JobCreate, JobUpdate
from app.services.user import upsert_user

logger = logging.getLogger(__name__)


def _ordered(query):  # type: ignore[no-untyped-def]
    return query.order_by(PRIORITY_ORDER, Job.posted_date.desc(), Job.id.desc())


async def create_job(db: AsyncSession, data: JobCreate) -> Job:
    """Upsert the poster, then insert the job owned by them."""
    poster = data.user
    user_id = await upsert_user(db, poster.uid, poster.email, poster.display_name)

    fields = data.job_data
    job = Job(
        user_id=user_id,
        firebase_uid=poster.uid,
        title=fields.title,
        category=fields.category,
        material=fields.material,
        quantity=fields.quantity,
        budget=fields.budget,
        location=fields.location,
        client=fields.client or poster.display_name or poster.email,
        deadline=fields.deadline,
        description=fields.description,
        requirements=fields.requirements if fields.requirements is not None else {},
        specifications=fields.specifications if fields.specifications is not None else [],
        estimated_duration=fields.estimated_duration,
        status=fields.status or "active",
    )
    db.add(job)
    await db.commit()
    logger.info("Job %s created by %s", job.id, poster.uid)
    return await get_job(db, job.id)


async def list_jobs(db: AsyncSession) -> list[Job]:
    """All jobs, high priority first, newest first within a priority."""
    result = await db.execute(_ordered(select(Job)))
    return list(result.scalars().all())


async def search_jobs(db: AsyncSession, search: str | None = None) -> list[Job]:
    query = select(Job)
    if search:
        term = f"%{search.lower()}%"
        query = query.outerjoin(User, Job.user_id == User.id).where(
            or_(
                Job.title.ilike(term),
                Job.category.ilike(term),
                Job.client.ilike(term),
                User.display_name.ilike(term),
            )
        )
    result = await db.execute(_ordered(query))
    return list(result.scalars().all())


async def list_jobs_for_user(db: AsyncSession, firebase_uid: str) -> list[Job]:
    result = await db.execute(
        select(Job)
        .where(Job.firebase_uid == firebase_uid)
        .order_by(Job.posted_date.desc(), Job.id.desc())
    )
    return list(result.scalars().all())


async def get_job(db: AsyncSession, job_id: int) -> Job:
    # populate_existing reloads the owner for jobs already in the identity map
    result = await db.execute(
        select(Job).where(Job.id == job_id).execution_options(populate_existing=True)
    )
    job = result.scalar_one_or_none()
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


async def update_job(db: AsyncSession, job_id: int, data: JobUpdate) -> Job:
    """Write only the fields present in the request body."""
    changes: dict[str, Any] = data.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    job = await get_job(db, job_id)
    for name, value in changes.items():
        if name == "requirements" and value is None:
            value = {}
        elif name == "specifications" and value is None:
            value = []
        setattr(job, name, value)
    job.updated_at = datetime.now(UTC)
    await db.commit()
    return await get_job(db, job_id)


async def delete_job(db: AsyncSession, job_id: int) -> None:
    """Delete a job. Bids and conversations go with it via ON DELETE CASCADE."""
    result = await db.execute(delete(Job).where(Job.id == job_id))
    if result.rowcount == 0:
        await db.rollback()
        raise HTTPException(status_code=404, detail="Job not found")
    await db.commit()
    logger.info("Job %s deleted", job_id)


async def refresh_bid_count(db: AsyncSession, job_id: int) -> None:
    """Recompute jobs.bids_received from the bids table. Does not commit."""
    count = select(func.count(Bid.id)).where(Bid.job_id == job_id).scalar_subquery()
    await db.execute(update(Job).where(Job.id == job_id).values(bids_received=count))


async def request_boost(db: AsyncSession, job_id: int, user_uid: str) -> None:
    """Owner asks an admin to promote the job to high priority."""
    result = await db.execute(
        select(Job).where(Job.id == job_id, Job.firebase_uid == user_uid)
    )
    job = result.scalar_one_or_none()
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found or you do not have permission")
    if job.boost_requested:
        raise HTTPException(status_code=400, detail="Boost already requested for this job")

    job.boost_requested = True
    job.boost_requested_at = datetime.now(UTC)
    await db.commit()
    logger.info("Boost requested for job %s by %s", job_id, user_uid)


async def set_priority(db: AsyncSession, job_id: int, priority: str) -> None:
    """Admin override. High priority counts as an approved boost."""
    job = await get_job(db, job_id)
    is_high = priority == JobPriority.HIGH.value
    job.priority = priority
    job.boost_approved = is_high
    job.boost_approved_at = datetime.now(UTC) if is_high else None
    await db.commit()


async def decide_boost(db: AsyncSession, job_id: int, approved: bool) -> None:
    job = await get_job(db, job_id)
    if approved:
        job.boost_approved = True
        job.boost_approved_at = datetime.now(UTC)
        job.priority = JobPriority.HIGH.value
    else:
        job.boost_approved = False
        job.boost_requested = False
    await db.commit()
