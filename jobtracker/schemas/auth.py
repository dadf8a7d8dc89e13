"""Authentication schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from jobtracker.schemas.user import User


class LoginRequest(BaseModel):
    """Login request schema. ``identifier`` is a username or an email."""

    identifier: str
    password: str


class AuthPayload(BaseModel):
    """Envelope returned by register, login and the token-protected job routes.

    Failures are reported in ``error`` with ``user`` set to None.
    """

    user: Optional[User] = None
    message: Optional[str] = None
    error: Optional[str] = None
    token: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "AuthPayload":
        return cls(user=None, error=error)


class TokenClaims(BaseModel):
    """Verified identity carried by an access token."""

    model_config = ConfigDict(frozen=True)

    username: str
    email: str
    issued_at: datetime
    expires_at: datetime
