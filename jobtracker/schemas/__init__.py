"""Pydantic schemas."""

from jobtracker.schemas.auth import AuthPayload, LoginRequest, TokenClaims
from jobtracker.schemas.user import AddJobRequest, Job, User, UserInput

__all__ = [
    "AddJobRequest",
    "AuthPayload",
    "Job",
    "LoginRequest",
    "TokenClaims",
    "User",
    "UserInput",
]
