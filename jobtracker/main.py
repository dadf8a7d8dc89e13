"""Main FastAPI application."""

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

import sentry_sdk
import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from starlette.concurrency import run_in_threadpool

from jobtracker.api.v1 import api_router
from jobtracker.config import Settings, get_settings
from jobtracker.core.exceptions import DuplicateError, NotFoundError, StoreParseError
from jobtracker.core.logging import setup_logging
from jobtracker.core.security import PasswordHasher, TokenService
from jobtracker.services.job_tracker_service import JobTrackerService
from jobtracker.services.user_store import JsonUserStore

logger = structlog.get_logger(__name__)


def init_sentry(settings: Settings) -> None:
    """Initialize Sentry for error tracking (only if DSN is properly configured)."""
    if not (settings.SENTRY_DSN and settings.SENTRY_DSN.startswith("https://")):
        logger.info("sentry_disabled")
        return

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(
                level=None,  # Capture all logs
                event_level="ERROR",  # Only send ERROR and above as events
            ),
        ],
        release=settings.APP_VERSION,
        attach_stacktrace=True,
        send_default_pii=False,  # Don't send personally identifiable info
    )


def build_service(settings: Settings) -> JobTrackerService:
    """Wire the store, hasher and token service from settings."""
    return JobTrackerService(
        store=JsonUserStore(settings.DATA_FILE),
        hasher=PasswordHasher(rounds=settings.BCRYPT_ROUNDS),
        token_service=TokenService(
            secret_key=settings.SECRET_KEY.get_secret_value(),
            algorithm=settings.ALGORITHM,
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        ),
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create the FastAPI app. Uses get_settings() when no settings are given."""
    settings = settings or get_settings()

    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    init_sentry(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        logger.info(
            "startup",
            app=settings.APP_NAME,
            version=settings.APP_VERSION,
            data_file=settings.DATA_FILE,
        )
        yield
        logger.info("shutdown")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Multi-user job tracking with JWT authentication",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings
    app.state.service = build_service(settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure properly in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API router
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint."""
        return {
            "message": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "operational",
        }

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint with store status."""
        store = request.app.state.service.store
        user_count = await run_in_threadpool(store.get_user_count)
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "data_file": store.file_path,
            "users": user_count,
        }

    @app.exception_handler(DuplicateError)
    async def duplicate_exception_handler(request: Request, exc: DuplicateError):
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": exc.message})

    @app.exception_handler(NotFoundError)
    async def not_found_exception_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.message})

    @app.exception_handler(StoreParseError)
    async def store_exception_handler(request: Request, exc: StoreParseError):
        logger.error("store_unreadable", error=exc.message)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal server error",
                "message": exc.message if settings.DEBUG else "Data store is unreadable",
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.exception("unhandled_exception", path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal server error",
                "message": str(exc) if settings.DEBUG else "An error occurred",
            },
        )

    return app


# ── Dev runner ────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "jobtracker.main:create_app",
        factory=True,
        host=_settings.HOST,
        port=_settings.PORT,
        reload=_settings.RELOAD,
    )
