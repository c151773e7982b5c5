"""Back-office operations that span several tables."""

import logging

from fastapi import HTTPException
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.bid import Bid
from app.models.chat import Conversation, Message
from app.models.job import Job
from app.models.user import User
from app.schemas.user import AdminStats

logger = logging.getLogger(__name__)


async def delete_user(db: AsyncSession, user_id: int) -> None:
    """Remove a user with their jobs and every thread they take part in."""
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    uid = user.firebase_uid
    await db.execute(delete(Job).where(Job.user_id == user_id))
    threads = select(Conversation.id).where(
        or_(Conversation.job_owner_uid == uid, Conversation.participant_uid == uid)
    )
    await db.execute(delete(Message).where(Message.conversation_id.in_(threads)))
    await db.execute(
        delete(Conversation).where(
            or_(Conversation.job_owner_uid == uid, Conversation.participant_uid == uid)
        )
    )
    await db.execute(delete(User).where(User.id == user_id))
    await db.commit()
    logger.info("User %s (%s) deleted", user_id, uid)


async def delete_job(db: AsyncSession, job_id: int) -> None:
    """Delete a job together with its bids and conversations."""
    job = await db.get(Job, job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    await db.execute(delete(Bid).where(Bid.job_id == job_id))
    await db.execute(delete(Conversation).where(Conversation.job_id == job_id))
    await db.execute(delete(Job).where(Job.id == job_id))
    await db.commit()
    logger.info("Admin deleted job %s", job_id)


async def get_stats(db: AsyncSession) -> AdminStats:
    async def count(model) -> int:  # type: ignore[no-untyped-def]
        return (await db.execute(select(func.count()).select_from(model))).scalar_one()

    return AdminStats(
        total_users=await count(User),
        total_jobs=await count(Job),
        total_conversations=await count(Conversation),
        total_messages=await count(Message),
    )
