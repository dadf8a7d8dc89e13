"""
Job endpoints for the authenticated user

**Auth**: Bearer token. The user is taken from the token, never from the
request. Without a valid token every route answers 200 with
``{"user": null, "error": "Unauthorized"}``.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from jobtracker.api.deps import get_current_identity, get_service
from jobtracker.schemas.auth import AuthPayload, TokenClaims
from jobtracker.schemas.user import Job
from jobtracker.services.job_tracker_service import JobTrackerService

router = APIRouter()


@router.post("", response_model=AuthPayload)
async def create_job(
    job: Job,
    identity: Optional[TokenClaims] = Depends(get_current_identity),
    service: JobTrackerService = Depends(get_service),
):
    """Add a job to the caller's list."""
    return await service.create_job(job, identity)


@router.put("/{title:path}", response_model=AuthPayload)
async def update_job(
    title: str,
    job: Job,
    identity: Optional[TokenClaims] = Depends(get_current_identity),
    service: JobTrackerService = Depends(get_service),
):
    """Replace the caller's first job with this title."""
    return await service.update_job(title, job, identity)


@router.delete("/{title:path}", response_model=AuthPayload)
async def delete_job(
    title: str,
    identity: Optional[TokenClaims] = Depends(get_current_identity),
    service: JobTrackerService = Depends(get_service),
):
    """Delete the caller's first job with this title."""
    return await service.delete_job(title, identity)
