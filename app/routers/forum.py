"""Community forum endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rate_limit import check_rate_limit
from app.database import get_db
from app.schemas.forum import (
    ForumCommentCreate,
    ForumCommentResponse,
    ForumPostCreate,
    ForumPostResponse,
)
from app.services import forum as forum_service

router = APIRouter(prefix="/forum", tags=["forum"])


@router.get("/posts", response_model=list[ForumPostResponse])
async def list_posts(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    search: str | None = Query(None, max_length=200),
    db: AsyncSession = Depends(get_db),
) -> list[ForumPostResponse]:
    posts = await forum_service.list_posts(db, page, page_size, search)
    return [ForumPostResponse.model_validate(p) for p in posts]


@router.post("/posts", dependencies=[Depends(check_rate_limit)])
async def create_post(data: ForumPostCreate, db: AsyncSession = Depends(get_db)) -> dict:
    post_id = await forum_service.create_post(db, data)
    return {"success": True, "id": post_id}


@router.get("/posts/{post_id}/comments", response_model=list[ForumCommentResponse])
async def list_comments(post_id: int, db: AsyncSession = Depends(get_db)) -> list[ForumCommentResponse]:
    comments = await forum_service.list_comments(db, post_id)
    return [ForumCommentResponse.model_validate(c) for c in comments]


@router.post("/posts/{post_id}/comments", dependencies=[Depends(check_rate_limit)])
async def create_comment(
    post_id: int, data: ForumCommentCreate, db: AsyncSession = Depends(get_db)
) -> dict:
    comment_id = await forum_service.create_comment(db, post_id, data)
    return {"success": True, "id": comment_id}
