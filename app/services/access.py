"""Admin-reviewed chat access.

Two workflows feed the admin console:

* chat requests: a user asks for chat rights, optionally about one job.
  Approving a request sets ``users.can_chat``.
* chat permissions: a buyer asks to talk to a machinery seller. Approving
  opens (or re-opens) the buyer/seller thread for that listing; revoking
  closes it again.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import HTTPException
from sqlalchemy import select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.models.access import AccessStatus, ChatPermission, ChatRequest
from app.models.job import Job
from app.models.machinery import Machinery, MachineryConversation
from app.models.user import User
from app.schemas.access import ChatPermissionCreate, ChatRequestCreate
from app.services.machinery import get_listing
from app.services.user import get_user_by_uid

logger = logging.getLogger(__name__)

DEFAULT_REVIEWER = "admin"


# --- Chat requests ---

async def create_chat_request(db: AsyncSession, data: ChatRequestCreate) -> int:
    """File a pending request. At most one pending request per user and job."""
    job_match = ChatRequest.job_id.is_(None) if data.job_id is None else ChatRequest.job_id == data.job_id
    existing = await db.execute(
        select(ChatRequest.id).where(
            ChatRequest.user_uid == data.user_uid,
            job_match,
            ChatRequest.status == AccessStatus.PENDING.value,
        )
    )
    if existing.first() is not None:
        raise HTTPException(
            status_code=400, detail="You already have a pending chat request for this job"
        )
    if data.job_id is not None and await db.get(Job, data.job_id) is None:
        raise HTTPException(status_code=404, detail="Job not found")

    request = ChatRequest(**data.model_dump())
    db.add(request)
    await db.commit()
    logger.info("Chat request %s filed by %s", request.id, data.user_uid)
    return request.id


async def list_chat_requests(db: AsyncSession, status: str | None = None) -> list[dict[str, Any]]:
    """Requests newest first, with the job's title and client when there is one."""
    query = select(
        ChatRequest, Job.title.label("job_title"), Job.client.label("job_client")
    ).outerjoin(Job, ChatRequest.job_id == Job.id)
    if status:
        query = query.where(ChatRequest.status == status)
    result = await db.execute(
        query.order_by(ChatRequest.requested_at.desc(), ChatRequest.id.desc())
    )
    rows = []
    for request, job_title, job_client in result.all():
        row = {c.name: getattr(request, c.name) for c in ChatRequest.__table__.columns}
        row["job_title"] = job_title
        row["job_client"] = job_client
        rows.append(row)
    return rows


async def review_chat_request(
    db: AsyncSession, request_id: int, status: str, notes: str | None = None
) -> None:
    request = await db.get(ChatRequest, request_id)
    if request is None:
        raise HTTPException(status_code=404, detail="Chat request not found")

    request.status = status
    request.reviewed_at = datetime.now(UTC)
    request.reviewed_by = DEFAULT_REVIEWER
    request.notes = notes
    if status == AccessStatus.APPROVED.value:
        await db.execute(
            update(User).where(User.firebase_uid == request.user_uid).values(can_chat=True)
        )
    await db.commit()
    logger.info("Chat request %s %s", request_id, status)


# --- Chat permissions for machinery listings ---

async def request_chat_permission(db: AsyncSession, data: ChatPermissionCreate) -> tuple[int, str]:
    """Ask to chat with a listing's seller. Returns (permission id, message).

    Asking again returns the existing permission instead of filing another.
    """
    existing = (
        await db.execute(
            select(ChatPermission).where(
                ChatPermission.requester_uid == data.requester_uid,
                ChatPermission.seller_uid == data.seller_uid,
                ChatPermission.machinery_id == data.machinery_id,
            )
        )
    ).scalar_one_or_none()
    if existing is not None:
        if existing.status == AccessStatus.APPROVED.value:
            return existing.id, "Permission already approved"
        return existing.id, "Request already pending"

    await get_listing(db, data.machinery_id)
    requester = await get_user_by_uid(db, data.requester_uid)
    permission = ChatPermission(
        requester_uid=data.requester_uid,
        requester_name=(requester.display_name if requester else None) or "Unknown",
        seller_uid=data.seller_uid,
        seller_name=data.seller_name,
        machinery_id=data.machinery_id,
    )
    db.add(permission)
    await db.commit()
    logger.info("Chat permission %s requested by %s", permission.id, data.requester_uid)
    return permission.id, "Chat permission request sent to admin"


async def list_chat_permissions(db: AsyncSession, status: str | None = None) -> list[dict[str, Any]]:
    query = select(
        ChatPermission, Machinery.name.label("machinery_name"), Machinery.image.label("machinery_image")
    ).outerjoin(Machinery, ChatPermission.machinery_id == Machinery.id)
    if status:
        query = query.where(ChatPermission.status == status)
    result = await db.execute(
        query.order_by(ChatPermission.requested_at.desc(), ChatPermission.id.desc())
    )
    rows = []
    for permission, name, image in result.all():
        row = {c.name: getattr(permission, c.name) for c in ChatPermission.__table__.columns}
        row["machinery_name"] = name
        row["machinery_image"] = image
        rows.append(row)
    return rows


async def _get_permission(db: AsyncSession, permission_id: int) -> ChatPermission:
    permission = await db.get(ChatPermission, permission_id)
    if permission is None:
        raise HTTPException(status_code=404, detail="Permission request not found")
    return permission


async def decide_chat_permission(
    db: AsyncSession, permission_id: int, approved: bool, admin_uid: str | None = None
) -> None:
    """Approve (opening the listing thread) or reject a permission request."""
    permission = await _get_permission(db, permission_id)
    now = datetime.now(UTC)
    reviewer = admin_uid or DEFAULT_REVIEWER

    if approved:
        permission.status = AccessStatus.APPROVED.value
        permission.approved_at = now
        permission.approved_by = reviewer
        stmt = sqlite_insert(MachineryConversation).values(
            machinery_id=permission.machinery_id,
            seller_uid=permission.seller_uid,
            buyer_uid=permission.requester_uid,
            permission_granted=True,
        )
        await db.execute(
            stmt.on_conflict_do_update(
                index_elements=["machinery_id", "seller_uid", "buyer_uid"],
                set_={"permission_granted": True},
            )
        )
    else:
        permission.status = AccessStatus.REJECTED.value
        permission.revoked_at = now
        permission.revoked_by = reviewer
    await db.commit()
    logger.info("Chat permission %s %s by %s", permission_id, permission.status, reviewer)


async def revoke_chat_permission(
    db: AsyncSession, permission_id: int, admin_uid: str | None = None
) -> None:
    permission = await _get_permission(db, permission_id)
    permission.status = AccessStatus.REVOKED.value
    permission.revoked_at = datetime.now(UTC)
    permission.revoked_by = admin_uid or DEFAULT_REVIEWER
    await db.execute(
        update(MachineryConversation)
        .where(
            MachineryConversation.machinery_id == permission.machinery_id,
            MachineryConversation.seller_uid == permission.seller_uid,
            MachineryConversation.buyer_uid == permission.requester_uid,
        )
        .values(permission_granted=False)
    )
    await db.commit()
    logger.info("Chat permission %s revoked", permission_id)


async def list_machinery_conversations(db: AsyncSession) -> list[dict[str, Any]]:
    """Every listing thread with listing and party names, most recent first."""
    seller = aliased(User)
    buyer = aliased(User)
    result = await db.execute(
        select(
            MachineryConversation,
            Machinery.name,
            Machinery.image,
            seller.display_name,
            buyer.display_name,
        )
        .outerjoin(Machinery, MachineryConversation.machinery_id == Machinery.id)
        .outerjoin(seller, MachineryConversation.seller_uid == seller.firebase_uid)
        .outerjoin(buyer, MachineryConversation.buyer_uid == buyer.firebase_uid)
        .order_by(MachineryConversation.last_message_time.desc(), MachineryConversation.id.desc())
    )
    rows = []
    for conversation, name, image, seller_name, buyer_name in result.all():
        row = {c.name: getattr(conversation, c.name) for c in MachineryConversation.__table__.columns}
        row.update(
            machinery_name=name,
            machinery_image=image,
            seller_name=seller_name,
            buyer_name=buyer_name,
        )
        rows.append(row)
    return rows
