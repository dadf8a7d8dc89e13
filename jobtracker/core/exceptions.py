"""Exception hierarchy shared by the store, security and service layers."""


class JobTrackerError(Exception):
    """Base error. ``message`` is what the API reports to callers."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DuplicateError(JobTrackerError):
    """A user with the same username (or email) already exists."""


class NotFoundError(JobTrackerError):
    """The requested user or job does not exist."""


class StoreParseError(JobTrackerError):
    """The data file does not hold a valid list of users."""


class InvalidTokenError(JobTrackerError):
    """Token signature, format or claims are invalid."""


class ExpiredTokenError(InvalidTokenError):
    """Token is past its expiration time."""
