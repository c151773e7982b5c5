"""Requests for chat access, reviewed in the admin console."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rate_limit import check_rate_limit
from app.database import get_db
from app.schemas.access import ChatPermissionCreate, ChatRequestCreate
from app.services import access as access_service

router = APIRouter(tags=["chat-access"], dependencies=[Depends(check_rate_limit)])


@router.post("/chat/request")
async def request_chat(data: ChatRequestCreate, db: AsyncSession = Depends(get_db)) -> dict:
    request_id = await access_service.create_chat_request(db, data)
    return {"success": True, "id": request_id}


@router.post("/chat-permissions/request")
async def request_chat_permission(
    data: ChatPermissionCreate, db: AsyncSession = Depends(get_db)
) -> dict:
    """Ask to chat with a listing's seller; repeats return the existing request."""
    permission_id, message = await access_service.request_chat_permission(db, data)
    return {"success": True, "permission_id": permission_id, "message": message}
