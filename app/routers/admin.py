"""Admin console endpoints. The whole router is rate limited as ``admin``."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rate_limit import check_rate_limit
from app.database import get_db
from app.schemas.access import (
    ChatPermissionDecision,
    ChatPermissionResponse,
    ChatPermissionRevoke,
    ChatRequestResponse,
    ChatRequestReview,
)
from app.schemas.chat import ConversationResponse, MessageResponse
from app.schemas.content import SponsorResponse
from app.schemas.forum import AdminForumCommentResponse, AdminForumPostResponse
from app.schemas.job import AdminJobUpdate, BoostDecision, JobPriorityUpdate, JobResponse
from app.schemas.machinery import (
    AdminMachineryCreate,
    AdminMachineryUpdate,
    MachineryConversationResponse,
    MachineryResponse,
)
from app.schemas.user import AdminStats, AdminUserUpdate, UserResponse
from app.services import access as access_service
from app.services import admin as admin_service
from app.services import chat as chat_service
from app.services import content as content_service
from app.services import forum as forum_service
from app.services import job as job_service
from app.services import machinery as machinery_service
from app.services import user as user_service
from app.services.content import SPONSORS

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(check_rate_limit)])


# --- Users ---

@router.get("/users", response_model=list[UserResponse])
async def list_users(
    search: str | None = Query(None, max_length=200),
    db: AsyncSession = Depends(get_db),
) -> list[UserResponse]:
    users = await user_service.list_users(db, search)
    return [UserResponse.model_validate(u) for u in users]


@router.put("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int, data: AdminUserUpdate, db: AsyncSession = Depends(get_db)
) -> UserResponse:
    """Edit a profile or grant capabilities such as selling rights."""
    user = await user_service.update_user(db, user_id, data)
    return UserResponse.model_validate(user)


@router.delete("/users/{user_id}")
async def delete_user(user_id: int, db: AsyncSession = Depends(get_db)) -> dict:
    """Delete a user along with their jobs and conversations."""
    await admin_service.delete_user(db, user_id)
    return {"success": True}


@router.get("/stats")
async def get_stats(db: AsyncSession = Depends(get_db)) -> dict:
    stats: AdminStats = await admin_service.get_stats(db)
    return stats.model_dump(by_alias=True)


# --- Jobs ---

@router.get("/jobs", response_model=list[JobResponse])
async def list_jobs(
    search: str | None = Query(None, max_length=200),
    db: AsyncSession = Depends(get_db),
) -> list[JobResponse]:
    jobs = await job_service.search_jobs(db, search)
    return [JobResponse.model_validate(j) for j in jobs]


@router.put("/jobs/{job_id}/priority")
async def set_priority(
    job_id: int, data: JobPriorityUpdate, db: AsyncSession = Depends(get_db)
) -> dict:
    await job_service.set_priority(db, job_id, data.priority)
    return {"success": True, "message": f"Job priority set to {data.priority}"}


@router.put("/jobs/{job_id}/boost")
async def decide_boost(job_id: int, data: BoostDecision, db: AsyncSession = Depends(get_db)) -> dict:
    await job_service.decide_boost(db, job_id, data.approved)
    return {"success": True, "message": "Boost approved" if data.approved else "Boost rejected"}


@router.put("/jobs/{job_id}")
async def update_job(job_id: int, data: AdminJobUpdate, db: AsyncSession = Depends(get_db)) -> dict:
    await job_service.update_job(db, job_id, data)
    return {"success": True}


@router.delete("/jobs/{job_id}")
async def delete_job(job_id: int, db: AsyncSession = Depends(get_db)) -> dict:
    await admin_service.delete_job(db, job_id)
    return {"success": True, "message": "Job deleted successfully"}


# --- Conversations ---

@router.get("/conversations", response_model=list[ConversationResponse])
async def list_conversations(db: AsyncSession = Depends(get_db)) -> list[ConversationResponse]:
    conversations = await chat_service.list_all_conversations(db)
    return [ConversationResponse.model_validate(c) for c in conversations]


@router.get("/conversations/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_conversation_messages(
    conversation_id: int, db: AsyncSession = Depends(get_db)
) -> list[MessageResponse]:
    messages = await chat_service.get_messages(db, conversation_id)
    return [MessageResponse.model_validate(m) for m in messages]


# --- Content ---

@router.get("/sponsors", response_model=list[SponsorResponse])
async def list_all_sponsors(db: AsyncSession = Depends(get_db)) -> list[SponsorResponse]:
    """Every sponsor, including inactive ones."""
    items = await content_service.list_items(db, SPONSORS, active_only=False)
    return [SponsorResponse.model_validate(i) for i in items]


# --- Forum moderation ---

@router.get("/forum/posts", response_model=list[AdminForumPostResponse])
async def list_forum_posts(db: AsyncSession = Depends(get_db)) -> list[AdminForumPostResponse]:
    posts = await forum_service.list_all_posts(db)
    return [AdminForumPostResponse.model_validate(p) for p in posts]


@router.delete("/forum/posts/{post_id}")
async def delete_forum_post(post_id: int, db: AsyncSession = Depends(get_db)) -> dict:
    await forum_service.delete_post(db, post_id)
    return {"success": True, "message": "Post deleted successfully"}


@router.get("/forum/comments", response_model=list[AdminForumCommentResponse])
async def list_forum_comments(db: AsyncSession = Depends(get_db)) -> list[AdminForumCommentResponse]:
    comments = await forum_service.list_all_comments(db)
    return [AdminForumCommentResponse.model_validate(c) for c in comments]


@router.delete("/forum/comments/{comment_id}")
async def delete_forum_comment(comment_id: int, db: AsyncSession = Depends(get_db)) -> dict:
    await forum_service.delete_comment(db, comment_id)
    return {"success": True, "message": "Comment deleted successfully"}


# --- Machinery ---

@router.get("/machinery", response_model=list[MachineryResponse])
async def list_machinery(
    search: str | None = Query(None, max_length=200),
    db: AsyncSession = Depends(get_db),
) -> list[MachineryResponse]:
    """Every listing, approved or not."""
    listings = await machinery_service.search_listings(db, search)
    return [MachineryResponse.model_validate(m) for m in listings]


@router.post("/machinery")
async def create_machinery(data: AdminMachineryCreate, db: AsyncSession = Depends(get_db)) -> dict:
    listing = await machinery_service.admin_create_listing(db, data)
    return {"success": True, "id": listing.id}


@router.put("/machinery/{machinery_id}")
async def update_machinery(
    machinery_id: int, data: AdminMachineryUpdate, db: AsyncSession = Depends(get_db)
) -> dict:
    await machinery_service.admin_update_listing(db, machinery_id, data)
    return {"success": True}


@router.delete("/machinery/{machinery_id}")
async def delete_machinery(machinery_id: int, db: AsyncSession = Depends(get_db)) -> dict:
    await machinery_service.admin_delete_listing(db, machinery_id)
    return {"success": True, "message": "Machinery deleted successfully"}


@router.get("/machinery-conversations", response_model=list[MachineryConversationResponse])
async def list_machinery_conversations(
    db: AsyncSession = Depends(get_db),
) -> list[MachineryConversationResponse]:
    rows = await access_service.list_machinery_conversations(db)
    return [MachineryConversationResponse.model_validate(r) for r in rows]


# --- Chat access ---

@router.get("/chat-permissions", response_model=list[ChatPermissionResponse])
async def list_chat_permissions(
    status: str | None = Query(None, pattern=r"^(pending|approved|rejected|revoked)$"),
    db: AsyncSession = Depends(get_db),
) -> list[ChatPermissionResponse]:
    rows = await access_service.list_chat_permissions(db, status)
    return [ChatPermissionResponse.model_validate(r) for r in rows]


@router.put("/chat-permissions/{permission_id}/approve")
async def decide_chat_permission(
    permission_id: int, data: ChatPermissionDecision, db: AsyncSession = Depends(get_db)
) -> dict:
    await access_service.decide_chat_permission(db, permission_id, data.approved, data.admin_uid)
    return {
        "success": True,
        "message": "Permission approved" if data.approved else "Permission rejected",
    }


@router.put("/chat-permissions/{permission_id}/revoke")
async def revoke_chat_permission(
    permission_id: int, data: ChatPermissionRevoke, db: AsyncSession = Depends(get_db)
) -> dict:
    await access_service.revoke_chat_permission(db, permission_id, data.admin_uid)
    return {"success": True, "message": "Permission revoked"}


@router.get("/chat-requests", response_model=list[ChatRequestResponse])
async def list_chat_requests(
    status: str | None = Query(None, pattern=r"^(pending|approved|rejected)$"),
    db: AsyncSession = Depends(get_db),
) -> list[ChatRequestResponse]:
    rows = await access_service.list_chat_requests(db, status)
    return [ChatRequestResponse.model_validate(r) for r in rows]


@router.put("/chat-requests/{request_id}")
async def review_chat_request(
    request_id: int, data: ChatRequestReview, db: AsyncSession = Depends(get_db)
) -> dict:
    """Approve or reject; approval grants the user chat rights."""
    await access_service.review_chat_request(db, request_id, data.status, data.notes)
    return {"success": True}
