"""Users keyed by the external auth uid: upserts, lookups and admin edits."""

import logging
from datetime import UTC, datetime

from fastapi import HTTPException
from sqlalchemy import or_, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.schemas.user import AdminUserUpdate

logger = logging.getLogger(__name__)

FORUM_USER_NAME = "Forum User"


async def upsert_user(
    db: AsyncSession, firebase_uid: str, email: str, display_name: str | None
) -> int:
    """Insert the user or refresh email/display name/last login. Returns users.id.

    Does not commit; the caller's transaction decides.
    """
    now = datetime.now(UTC)
    stmt = sqlite_insert(User).values(
        firebase_uid=firebase_uid,
        email=email,
        display_name=display_name,
        created_at=now,
        updated_at=now,
        last_login=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["firebase_uid"],
        set_={
            "email": stmt.excluded.email,
            "display_name": stmt.excluded.display_name,
            "updated_at": now,
            "last_login": now,
        },
    ).returning(User.id)
    try:
        result = await db.execute(stmt)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Email already belongs to another user")
    return result.scalar_one()


async def get_or_create_forum_user(db: AsyncSession, firebase_uid: str) -> int:
    """Resolve a forum author's users.id, creating a placeholder user if unknown."""
    placeholder_email = f"{firebase_uid}@forum.user"
    result = await db.execute(
        select(User.id)
        .where(or_(User.firebase_uid == firebase_uid, User.email == placeholder_email))
        .order_by((User.firebase_uid == firebase_uid).desc())
        .limit(1)
    )
    user_id = result.scalar_one_or_none()
    if user_id is not None:
        return user_id

    stmt = (
        sqlite_insert(User)
        .values(
            firebase_uid=firebase_uid,
            email=placeholder_email,
            display_name=FORUM_USER_NAME,
        )
        .on_conflict_do_nothing()
    )
    await db.execute(stmt)
    result = await db.execute(select(User.id).where(User.firebase_uid == firebase_uid))
    user_id = result.scalar_one()
    logger.info("Created placeholder forum user %s for uid %s", user_id, firebase_uid)
    return user_id


async def list_users(db: AsyncSession, search: str | None = None) -> list[User]:
    query = select(User)
    if search:
        term = f"%{search.lower()}%"
        query = query.where(
            or_(
                User.email.ilike(term),
                User.display_name.ilike(term),
                User.firebase_uid.ilike(term),
            )
        )
    result = await db.execute(query.order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())


async def get_user_by_uid(db: AsyncSession, firebase_uid: str) -> User | None:
    result = await db.execute(select(User).where(User.firebase_uid == firebase_uid))
    return result.scalar_one_or_none()


async def update_user(db: AsyncSession, user_id: int, data: AdminUserUpdate) -> User:
    """Admin edit of profile fields and granted capabilities."""
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    for name, value in changes.items():
        setattr(user, name, value)
    user.updated_at = datetime.now(UTC)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Email already belongs to another user")
    await db.refresh(user)
    logger.info("User %s updated: %s", user_id, ", ".join(sorted(changes)))
    return user
