"""Bid endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rate_limit import check_rate_limit
from app.database import get_db
from app.schemas.bid import BidCreate, BidResponse, BidStatusUpdate
from app.services import bid as bid_service

router = APIRouter(tags=["bids"])


@router.post("/jobs/{job_id}/bids", dependencies=[Depends(check_rate_limit)])
async def place_bid(job_id: int, data: BidCreate, db: AsyncSession = Depends(get_db)) -> dict:
    """Place a bid, or overwrite the caller's existing bid on this job."""
    result = await bid_service.place_bid(db, job_id, data)
    return {"success": True, "bidId": result.bid_id, "updated": result.updated}


@router.get("/jobs/{job_id}/bids", response_model=list[BidResponse])
async def list_bids(job_id: int, db: AsyncSession = Depends(get_db)) -> list[BidResponse]:
    bids = await bid_service.list_bids(db, job_id)
    return [BidResponse.model_validate(b) for b in bids]


@router.get("/jobs/{job_id}/bids/{bidder_uid}", response_model=BidResponse)
async def get_my_bid(job_id: int, bidder_uid: str, db: AsyncSession = Depends(get_db)) -> BidResponse:
    bid = await bid_service.get_my_bid(db, job_id, bidder_uid)
    if bid is None:
        raise HTTPException(status_code=404, detail="Bid not found")
    return BidResponse.model_validate(bid)


@router.put("/bids/{bid_id}/status", dependencies=[Depends(check_rate_limit)])
async def update_bid_status(
    bid_id: int, data: BidStatusUpdate, db: AsyncSession = Depends(get_db)
) -> dict:
    await bid_service.update_bid_status(db, bid_id, data.status)
    return {"success": True}
