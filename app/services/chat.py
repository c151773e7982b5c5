"""Per-job conversations between a job owner and one participant.

Every database failure surfaces as ``ChatOperationError`` so the HTTP layer
can answer with the chat error shape.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import or_, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.errors import ChatOperationError
from app.models.chat import Conversation, Message
from app.models.user import User
from app.schemas.chat import ConversationCreate, MessageCreate

logger = logging.getLogger(__name__)


async def create_or_get_conversation(db: AsyncSession, data: ConversationCreate) -> int:
    """Return the id of the (job, owner, participant) thread, creating it if needed.

    An existing thread is never modified, so repeated calls are idempotent.
    """
    now = datetime.now(UTC)
    stmt = (
        sqlite_insert(Conversation)
        .values(
            job_id=data.job_id,
            job_owner_uid=data.job_owner_uid,
            participant_uid=data.participant_uid,
            job_title=data.job_title,
            last_message_time=now,
            created_at=now,
        )
        .on_conflict_do_nothing(
            index_elements=["job_id", "job_owner_uid", "participant_uid"]
        )
    )
    try:
        await db.execute(stmt)
        await db.commit()
        result = await db.execute(
            select(Conversation.id).where(
                Conversation.job_id == data.job_id,
                Conversation.job_owner_uid == data.job_owner_uid,
                Conversation.participant_uid == data.participant_uid,
            )
        )
        return result.scalar_one()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to create conversation for job %s: %s", data.job_id, e)
        raise ChatOperationError("Failed to create conversation") from e


async def send_message(db: AsyncSession, data: MessageCreate) -> Message:
    """Store a message, then refresh the thread's preview.

    The message is committed first. A failed preview update is logged and
    otherwise ignored: the thread list may show a stale last message.
    """
    message = Message(
        conversation_id=data.conversation_id,
        sender_uid=data.sender_uid,
        sender_name=data.sender_name,
        message=data.message,
        timestamp=datetime.now(UTC),
    )
    try:
        db.add(message)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("Failed to send message to conversation %s: %s", data.conversation_id, e)
        raise ChatOperationError("Failed to send message") from e

    try:
        await db.execute(
            update(Conversation)
            .where(Conversation.id == data.conversation_id)
            .values(last_message=message.message, last_message_time=message.timestamp)
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.warning(
            "Message %s stored but preview of conversation %s not updated: %s",
            message.id, data.conversation_id, e,
        )
    return message


async def get_messages(db: AsyncSession, conversation_id: int) -> list[Message]:
    """Messages oldest first. Unknown conversations have none."""
    try:
        result = await db.execute(
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.timestamp.asc(), Message.id.asc())
        )
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error("Failed to fetch messages for conversation %s: %s", conversation_id, e)
        raise ChatOperationError("Failed to fetch messages") from e


def _conversation_query():  # type: ignore[no-untyped-def]
    owner = aliased(User)
    participant = aliased(User)
    return (
        select(
            Conversation,
            owner.display_name.label("job_owner_name"),
            participant.display_name.label("participant_name"),
        )
        .outerjoin(owner, Conversation.job_owner_uid == owner.firebase_uid)
        .outerjoin(participant, Conversation.participant_uid == participant.firebase_uid)
        .order_by(Conversation.last_message_time.desc(), Conversation.id.desc())
    )


def _conversation_row(conversation: Conversation, owner_name: str | None, participant_name: str | None) -> dict[str, Any]:
    return {
        "id": conversation.id,
        "job_id": conversation.job_id,
        "job_owner_uid": conversation.job_owner_uid,
        "participant_uid": conversation.participant_uid,
        "job_title": conversation.job_title,
        "last_message": conversation.last_message,
        "last_message_time": conversation.last_message_time,
        "created_at": conversation.created_at,
        "job_owner_name": owner_name,
        "participant_name": participant_name,
    }


async def get_conversations(db: AsyncSession, user_uid: str) -> list[dict[str, Any]]:
    """Threads the user owns or participates in, most recent activity first."""
    query = _conversation_query().where(
        or_(Conversation.job_owner_uid == user_uid, Conversation.participant_uid == user_uid)
    )
    try:
        result = await db.execute(query)
        return [_conversation_row(*row) for row in result.all()]
    except SQLAlchemyError as e:
        logger.error("Failed to fetch conversations for %s: %s", user_uid, e)
        raise ChatOperationError("Failed to fetch conversations") from e


async def list_all_conversations(db: AsyncSession) -> list[dict[str, Any]]:
    """Every thread, for the admin console."""
    try:
        result = await db.execute(_conversation_query())
        return [_conversation_row(*row) for row in result.all()]
    except SQLAlchemyError as e:
        logger.error("Failed to fetch conversations: %s", e)
        raise ChatOperationError("Failed to fetch conversations") from e
