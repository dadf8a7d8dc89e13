"""Authentication endpoints."""

from fastapi import APIRouter, Depends

from jobtracker.api.deps import get_service
from jobtracker.schemas.auth import AuthPayload, LoginRequest
from jobtracker.schemas.user import UserInput
from jobtracker.services.job_tracker_service import JobTrackerService

router = APIRouter()


@router.post("/register", response_model=AuthPayload)
async def register(user_in: UserInput, service: JobTrackerService = Depends(get_service)):
    """Register a new user. A taken username or email is reported in ``error``."""
    return await service.register(user_in)


@router.post("/login", response_model=AuthPayload)
async def login(request: LoginRequest, service: JobTrackerService = Depends(get_service)):
    """Login with username or email and password; returns an access token."""
    return await service.login(request.identifier, request.password)
