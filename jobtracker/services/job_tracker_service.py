"""
Job tracker service

Queries and mutations over the user store. Two families:
- unprotected add_user / add_job take the username from the caller and raise
  DuplicateError / NotFoundError
- register, login and the token-protected job operations return an
  AuthPayload envelope, with failures reported in its ``error`` field
"""

from typing import Callable, List, Optional

import structlog
from starlette.concurrency import run_in_threadpool

from jobtracker.core.exceptions import DuplicateError, NotFoundError
from jobtracker.core.security import PasswordHasher, TokenService
from jobtracker.schemas.auth import AuthPayload, TokenClaims
from jobtracker.schemas.user import Job, User, UserInput
from jobtracker.services.user_store import JsonUserStore

logger = structlog.get_logger(__name__)

USER_EXISTS = "User already exists"
USER_NOT_FOUND = "User not found"
JOB_NOT_FOUND = "Job not found"
INVALID_PASSWORD = "Invalid password"
UNAUTHORIZED = "Unauthorized"


def _find_user(users: List[User], username: str) -> Optional[User]:
    return next((u for u in users if u.username == username), None)


def _find_by_identifier(users: List[User], identifier: str) -> Optional[User]:
    return next(
        (u for u in users if u.username == identifier or u.email == identifier),
        None,
    )


def _is_registered(users: List[User], user_in: UserInput) -> bool:
    return any(
        u.username == user_in.username or u.email == user_in.email for u in users
    )


class JobTrackerService:
    """Domain operations for users and their jobs."""

    def __init__(
        self,
        store: JsonUserStore,
        hasher: PasswordHasher,
        token_service: TokenService,
    ):
        self.store = store
        self.hasher = hasher
        self.token_service = token_service

    # ==================== Queries ====================

    async def list_users(self) -> List[User]:
        """All users, in store order."""
        return await run_in_threadpool(self.store.load)

    async def get_user(self, username: str) -> Optional[User]:
        users = await run_in_threadpool(self.store.load)
        return _find_user(users, username)

    # ==================== Unprotected mutations ====================

    async def add_user(self, user_in: UserInput) -> User:
        """
        Append a user as given, with an empty job list.

        The password is stored as supplied and email is not checked for
        uniqueness. Only register() hashes passwords.

        Raises:
            DuplicateError: username already taken
        """

        def mutator(users: List[User]) -> User:
            if _find_user(users, user_in.username):
                raise DuplicateError(USER_EXISTS)
            new_user = User(**user_in.model_dump())
            users.append(new_user)
            return new_user

        user = await run_in_threadpool(self.store.update, mutator)
        logger.info("user_added", username=user.username)
        return user

    async def add_job(self, username: str, job: Job) -> User:
        """
        Append a job to the named user's list.

        Raises:
            NotFoundError: no user with that username
        """

        def mutator(users: List[User]) -> User:
            user = _find_user(users, username)
            if user is None:
                raise NotFoundError(USER_NOT_FOUND)
            user.jobs.append(job)
            return user

        user = await run_in_threadpool(self.store.update, mutator)
        logger.info("job_added", username=username, title=job.title)
        return user

    # ==================== Authentication ====================

    async def register(self, user_in: UserInput) -> AuthPayload:
        """Create a user with a hashed password, unless username or email is taken."""
        users = await run_in_threadpool(self.store.load)
        if _is_registered(users, user_in):
            logger.info("registration_rejected", username=user_in.username, reason=USER_EXISTS)
            return AuthPayload.failure(USER_EXISTS)

        hashed_password = await run_in_threadpool(self.hasher.hash, user_in.password)

        def mutator(users: List[User]) -> User:
            # Checked again: another registration may have landed while hashing
            if _is_registered(users, user_in):
                raise DuplicateError(USER_EXISTS)
            new_user = User(**{**user_in.model_dump(), "password": hashed_password})
            users.append(new_user)
            return new_user

        try:
            user = await run_in_threadpool(self.store.update, mutator)
        except DuplicateError as e:
            logger.info("registration_rejected", username=user_in.username, reason=e.message)
            return AuthPayload.failure(e.message)

        logger.info("user_registered", username=user.username)
        return AuthPayload(user=user, message="Registration successful")

    async def login(self, identifier: str, password: str) -> AuthPayload:
        """Check credentials; ``identifier`` is matched against username and email."""
        users = await run_in_threadpool(self.store.load)
        user = _find_by_identifier(users, identifier)
        if user is None:
            logger.info("login_failed", identifier=identifier, reason=USER_NOT_FOUND)
            return AuthPayload.failure(USER_NOT_FOUND)

        is_valid = await run_in_threadpool(self.hasher.compare, password, user.password)
        if not is_valid:
            logger.info("login_failed", identifier=identifier, reason=INVALID_PASSWORD)
            return AuthPayload.failure(INVALID_PASSWORD)

        token = self.token_service.issue(user.username, user.email)
        logger.info("login_succeeded", username=user.username)
        return AuthPayload(user=user, message="Login successful", token=token)

    # ==================== Token-protected job mutations ====================

    async def _mutate_own_jobs(
        self,
        identity: Optional[TokenClaims],
        change: Callable[[User], None],
        message: str,
    ) -> AuthPayload:
        if identity is None:
            return AuthPayload.failure(UNAUTHORIZED)

        def mutator(users: List[User]) -> User:
            user = _find_user(users, identity.username)
            if user is None:
                raise NotFoundError(USER_NOT_FOUND)
            change(user)
            return user

        try:
            user = await run_in_threadpool(self.store.update, mutator)
        except NotFoundError as e:
            logger.info("job_change_rejected", username=identity.username, reason=e.message)
            return AuthPayload.failure(e.message)

        return AuthPayload(user=user, message=message)

    async def create_job(self, job: Job, identity: Optional[TokenClaims]) -> AuthPayload:
        """Append a job to the caller's list. Not idempotent."""

        def change(user: User) -> None:
            user.jobs.append(job)

        result = await self._mutate_own_jobs(identity, change, "Job added successfully")
        if result.user is not None:
            logger.info("job_created", username=identity.username, title=job.title)
        return result

    async def update_job(
        self,
        title: str,
        job: Job,
        identity: Optional[TokenClaims],
    ) -> AuthPayload:
        """Replace the first of the caller's jobs with this title."""

        def change(user: User) -> None:
            index = user.find_job_index(title)
            if index == -1:
                raise NotFoundError(JOB_NOT_FOUND)
            user.jobs[index] = job

        result = await self._mutate_own_jobs(identity, change, "Job updated successfully")
        if result.user is not None:
            logger.info("job_updated", username=identity.username, title=title)
        return result

    async def delete_job(self, title: str, identity: Optional[TokenClaims]) -> AuthPayload:
        """Remove the first of the caller's jobs with this title."""

        def change(user: User) -> None:
            index = user.find_job_index(title)
            if index == -1:
                raise NotFoundError(JOB_NOT_FOUND)
            del user.jobs[index]

        result = await self._mutate_own_jobs(identity, change, "Job deleted successfully")
        if result.user is not None:
            logger.info("job_deleted", username=identity.username, title=title)
        return result
