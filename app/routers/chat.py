"""Chat endpoints. Failures answer 500 with ``{"success": false, "error": ...}``."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rate_limit import check_rate_limit
from app.database import get_db
from app.schemas.chat import ConversationCreate, ConversationResponse, MessageCreate, MessageResponse
from app.services import chat as chat_service

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/conversations", dependencies=[Depends(check_rate_limit)])
async def create_conversation(data: ConversationCreate, db: AsyncSession = Depends(get_db)) -> dict:
    """Create the thread for (job, owner, participant), or return the existing one."""
    conversation_id = await chat_service.create_or_get_conversation(db, data)
    return {"success": True, "conversationId": conversation_id}


@router.post("/messages", dependencies=[Depends(check_rate_limit)])
async def send_message(data: MessageCreate, db: AsyncSession = Depends(get_db)) -> dict:
    await chat_service.send_message(db, data)
    return {"success": True}


@router.get("/conversations/{user_uid}")
async def get_conversations(user_uid: str, db: AsyncSession = Depends(get_db)) -> dict:
    conversations = await chat_service.get_conversations(db, user_uid)
    return {
        "success": True,
        "conversations": [
            ConversationResponse.model_validate(c).model_dump(mode="json") for c in conversations
        ],
    }


@router.get("/messages/{conversation_id}")
async def get_messages(conversation_id: int, db: AsyncSession = Depends(get_db)) -> dict:
    messages = await chat_service.get_messages(db, conversation_id)
    return {
        "success": True,
        "messages": [MessageResponse.model_validate(m).model_dump(mode="json") for m in messages],
    }
