"""User endpoints. No authentication: the caller names the user."""

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from jobtracker.api.deps import get_service
from jobtracker.schemas.user import AddJobRequest, User, UserInput
from jobtracker.services.job_tracker_service import JobTrackerService

router = APIRouter()


@router.get("", response_model=List[User])
async def list_users(service: JobTrackerService = Depends(get_service)):
    """List every user with their jobs."""
    return await service.list_users()


@router.get("/{username:path}", response_model=Optional[User])
async def get_user(username: str, service: JobTrackerService = Depends(get_service)):
    """Get one user by username, or null."""
    return await service.get_user(username)


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
async def add_user(user_in: UserInput, service: JobTrackerService = Depends(get_service)):
    """
    Add a user directly.

    Intended for testing: the password is stored as given, so users created
    here cannot log in. Use /auth/register for real accounts.

    Returns 409 if the username is taken.
    """
    return await service.add_user(user_in)


@router.post("/jobs", response_model=User)
async def add_job(
    request: AddJobRequest,
    service: JobTrackerService = Depends(get_service),
):
    """Append a job to a user by username. Returns 404 if the user does not exist."""
    return await service.add_job(request.username, request.job)
