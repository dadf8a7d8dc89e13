"""
API Dependencies
Common dependencies for API endpoints (service access, caller identity)
"""

from typing import Optional

from fastapi import Depends, Header, Request

from jobtracker.core.security import TokenService, resolve_identity
from jobtracker.schemas.auth import TokenClaims
from jobtracker.services.job_tracker_service import JobTrackerService


def get_service(request: Request) -> JobTrackerService:
    """The service instance created with the app."""
    return request.app.state.service


def get_token_service(service: JobTrackerService = Depends(get_service)) -> TokenService:
    return service.token_service


async def get_current_identity(
    authorization: Optional[str] = Header(None),
    token_service: TokenService = Depends(get_token_service),
) -> Optional[TokenClaims]:
    """
    Resolve the caller from the Authorization header.

    Unlike a required-auth dependency this never raises 401: a missing,
    invalid or expired token yields None and the route reports it.
    """
    return resolve_identity(authorization, token_service)
