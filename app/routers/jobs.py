"""Job listing endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rate_limit import check_rate_limit
from app.database import get_db
from app.schemas.job import BoostRequest, JobCreate, JobResponse, JobUpdate
from app.services import job as job_service

router = APIRouter(tags=["jobs"])


@router.get("/jobs", response_model=list[JobResponse])
async def list_jobs(db: AsyncSession = Depends(get_db)) -> list[JobResponse]:
    """All jobs, boosted first."""
    jobs = await job_service.list_jobs(db)
    return [JobResponse.model_validate(j) for j in jobs]


@router.post("/jobs", dependencies=[Depends(check_rate_limit)])
async def create_job(data: JobCreate, db: AsyncSession = Depends(get_db)) -> dict:
    job = await job_service.create_job(db, data)
    return {"success": True, "jobId": job.id}


@router.get("/jobs/{job_id}", response_model=JobResponse)
async def get_job(job_id: int, db: AsyncSession = Depends(get_db)) -> JobResponse:
    job = await job_service.get_job(db, job_id)
    return JobResponse.model_validate(job)


@router.put("/jobs/{job_id}", dependencies=[Depends(check_rate_limit)])
async def update_job(job_id: int, data: JobUpdate, db: AsyncSession = Depends(get_db)) -> dict:
    await job_service.update_job(db, job_id, data)
    return {"success": True}


@router.delete("/jobs/{job_id}", dependencies=[Depends(check_rate_limit)])
async def delete_job(job_id: int, db: AsyncSession = Depends(get_db)) -> dict:
    await job_service.delete_job(db, job_id)
    return {"success": True}


@router.get("/users/{firebase_uid}/jobs", response_model=list[JobResponse])
async def list_user_jobs(firebase_uid: str, db: AsyncSession = Depends(get_db)) -> list[JobResponse]:
    jobs = await job_service.list_jobs_for_user(db, firebase_uid)
    return [JobResponse.model_validate(j) for j in jobs]


@router.post("/jobs/{job_id}/boost", dependencies=[Depends(check_rate_limit)])
async def request_boost(job_id: int, data: BoostRequest, db: AsyncSession = Depends(get_db)) -> dict:
    """Ask an admin to promote this job to high priority."""
    await job_service.request_boost(db, job_id, data.user_uid)
    return {"success": True, "message": "Boost request submitted. Waiting for admin approval."}
