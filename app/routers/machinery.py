"""Machinery listing endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rate_limit import check_rate_limit
from app.database import get_db
from app.schemas.machinery import MachineryCreate, MachineryResponse, MachineryUpdate
from app.services import machinery as machinery_service

router = APIRouter(tags=["machinery"])


@router.get("/machinery", response_model=list[MachineryResponse])
async def list_machinery(db: AsyncSession = Depends(get_db)) -> list[MachineryResponse]:
    """Approved listings only."""
    listings = await machinery_service.list_approved(db)
    return [MachineryResponse.model_validate(m) for m in listings]


@router.post("/machinery", dependencies=[Depends(check_rate_limit)])
async def create_machinery(data: MachineryCreate, db: AsyncSession = Depends(get_db)) -> dict:
    listing = await machinery_service.create_listing(db, data)
    return {
        "success": True,
        "id": listing.id,
        "message": "Machinery listing created. Pending admin approval.",
    }


@router.get("/users/{firebase_uid}/machinery", response_model=list[MachineryResponse])
async def list_user_machinery(
    firebase_uid: str, db: AsyncSession = Depends(get_db)
) -> list[MachineryResponse]:
    listings = await machinery_service.list_for_user(db, firebase_uid)
    return [MachineryResponse.model_validate(m) for m in listings]


@router.put("/machinery/{machinery_id}", dependencies=[Depends(check_rate_limit)])
async def update_machinery(
    machinery_id: int, data: MachineryUpdate, db: AsyncSession = Depends(get_db)
) -> dict:
    await machinery_service.update_listing(db, machinery_id, data)
    return {"success": True}


@router.delete("/machinery/{machinery_id}", dependencies=[Depends(check_rate_limit)])
async def delete_machinery(
    machinery_id: int,
    firebase_uid: str = Query(..., min_length=1, max_length=128),
    db: AsyncSession = Depends(get_db),
) -> dict:
    await machinery_service.delete_listing(db, machinery_id, firebase_uid)
    return {"success": True}
