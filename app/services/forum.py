"""Community forum posts and comments."""

import logging
from typing import Any

from fastapi import HTTPException
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.forum import ForumComment, ForumPost
from app.models.user import User
from app.schemas.forum import ForumCommentCreate, ForumPostCreate
from app.services.user import get_or_create_forum_user

logger = logging.getLogger(__name__)

_AUTHOR_COLUMNS = (User.firebase_uid, User.display_name, User.email)


def _with_author(entity: Any, row: Any) -> dict[str, Any]:
    values = {c.key: getattr(entity, c.key) for c in entity.__table__.columns}
    values.update(firebase_uid=row.firebase_uid, display_name=row.display_name, email=row.email)
    return values


async def list_posts(
    db: AsyncSession, page: int = 1, page_size: int = 20, search: str | None = None
) -> list[dict[str, Any]]:
    """Newest first, one page at a time, optionally filtered on title/content."""
    query = select(ForumPost, *_AUTHOR_COLUMNS).outerjoin(User, ForumPost.user_id == User.id)
    if search:
        term = f"%{search.lower()}%"
        query = query.where(or_(ForumPost.title.ilike(term), ForumPost.content.ilike(term)))
    query = (
        query.order_by(ForumPost.created_at.desc(), ForumPost.id.desc())
        .limit(page_size)
        .offset((page - 1) * page_size)
    )
    result = await db.execute(query)
    return [_with_author(row.ForumPost, row) for row in result.all()]


async def create_post(db: AsyncSession, data: ForumPostCreate) -> int:
    user_id = await get_or_create_forum_user(db, data.user_uid)
    post = ForumPost(user_id=user_id, title=data.title, content=data.content)
    db.add(post)
    await db.commit()
    logger.info("Forum post %s created by %s", post.id, data.user_uid)
    return post.id


async def list_comments(db: AsyncSession, post_id: int) -> list[dict[str, Any]]:
    """Comments on a post, oldest first."""
    result = await db.execute(
        select(ForumComment, *_AUTHOR_COLUMNS)
        .outerjoin(User, ForumComment.user_id == User.id)
        .where(ForumComment.post_id == post_id)
        .order_by(ForumComment.created_at.asc(), ForumComment.id.asc())
    )
    return [_with_author(row.ForumComment, row) for row in result.all()]


async def create_comment(db: AsyncSession, post_id: int, data: ForumCommentCreate) -> int:
    post = await db.get(ForumPost, post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    user_id = await get_or_create_forum_user(db, data.user_uid)
    comment = ForumComment(post_id=post_id, user_id=user_id, content=data.content)
    db.add(comment)
    await db.commit()
    return comment.id


async def list_all_posts(db: AsyncSession) -> list[dict[str, Any]]:
    """Every post with its comment count, for moderation."""
    comment_count = (
        select(func.count(ForumComment.id))
        .where(ForumComment.post_id == ForumPost.id)
        .correlate(ForumPost)
        .scalar_subquery()
        .label("comment_count")
    )
    result = await db.execute(
        select(ForumPost, *_AUTHOR_COLUMNS, comment_count)
        .outerjoin(User, ForumPost.user_id == User.id)
        .order_by(ForumPost.created_at.desc(), ForumPost.id.desc())
    )
    rows = []
    for row in result.all():
        values = _with_author(row.ForumPost, row)
        values["comment_count"] = row.comment_count
        rows.append(values)
    return rows


async def list_all_comments(db: AsyncSession) -> list[dict[str, Any]]:
    result = await db.execute(
        select(ForumComment, *_AUTHOR_COLUMNS, ForumPost.title.label("post_title"))
        .outerjoin(User, ForumComment.user_id == User.id)
        .outerjoin(ForumPost, ForumComment.post_id == ForumPost.id)
        .order_by(ForumComment.created_at.desc(), ForumComment.id.desc())
    )
    rows = []
    for row in result.all():
        values = _with_author(row.ForumComment, row)
        values["post_title"] = row.post_title
        rows.append(values)
    return rows


async def delete_post(db: AsyncSession, post_id: int) -> None:
    """Comments go with the post via ON DELETE CASCADE."""
    result = await db.execute(delete(ForumPost).where(ForumPost.id == post_id))
    if result.rowcount == 0:
        await db.rollback()
        raise HTTPException(status_code=404, detail="Post not found")
    await db.commit()


async def delete_comment(db: AsyncSession, comment_id: int) -> None:
    result = await db.execute(delete(ForumComment).where(ForumComment.id == comment_id))
    if result.rowcount == 0:
        await db.rollback()
        raise HTTPException(status_code=404, detail="Comment not found")
    await db.commit()
