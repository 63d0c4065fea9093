from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from app.core.config import DEV_SESSION_SECRET, Settings, settings as default_settings
from app.core.database import Database
from app.core.exceptions import (
    StorageError,
    StudentRecordsError,
    ValidationError,
    error_response,
)
from app.core.logging_config import logger
from app.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from app.core.rate_limiter import limiter, rate_limit_exceeded_handler
from app.api.endpoints import health
from app.api.router import api_router
from app.services.credential_store import CredentialStore
from app.services.session_store import SessionStore
from app.services.student_store import StudentStore


APP_VERSION = "1.0.0"


def validate_critical_config(settings: Settings) -> bool:
    """Validate critical configuration at startup - fail fast if missing"""
    errors = []
    warnings = []

    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")

    if not settings.SESSION_SECRET:
        errors.append("SESSION_SECRET is not set")
    elif settings.SESSION_SECRET == DEV_SESSION_SECRET:
        if settings.is_production:
            errors.append("SESSION_SECRET is using the development default")
        else:
            warnings.append("SESSION_SECRET is using the development default")

    if settings.is_production and not settings.SESSION_COOKIE_SECURE:
        warnings.append("SESSION_COOKIE_SECURE is off - cookies will be sent over plain HTTP")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    for warn in warnings:
        logger.warning(f"[Startup] WARNING: {warn}")

    logger.info("[Startup] Critical configuration validated")
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the database and stores, bootstrap the admin, run the prune loop"""
    settings: Settings = app.state.settings

    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info("=" * 60)

    validate_critical_config(settings)

    database = Database(settings)
    await database.create_all()
    logger.info("[Startup] Database tables ready")

    app.state.database = database
    app.state.credential_store = CredentialStore(database, settings)
    app.state.session_store = SessionStore(database, settings)
    app.state.student_store = StudentStore(database)

    admin = await app.state.credential_store.ensure_default_admin()
    logger.info(f"[Startup] Default user '{admin.username}' available")

    await app.state.session_store.start_prune_task()

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await app.state.session_store.stop_prune_task()
    await database.dispose()


def register_exception_handlers(app: FastAPI) -> None:
    settings: Settings = app.state.settings

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        error = ValidationError.from_pydantic(exc)
        logger.info(f"[Validation] {request.method} {request.url.path}: {len(error.errors)} field error(s)")
        return JSONResponse(status_code=error.status_code, content=error_response(error))

    @app.exception_handler(StudentRecordsError)
    async def student_records_error_handler(request: Request, exc: StudentRecordsError):
        if exc.status_code >= 500:
            logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
            message = exc.message if settings.DEBUG and not isinstance(exc, StorageError) else "Internal server error"
            return JSONResponse(status_code=exc.status_code, content={"message": message})
        return JSONResponse(status_code=exc.status_code, content=error_response(exc))

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return await rate_limit_exceeded_handler(request, exc)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Global exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"message": str(exc) if settings.DEBUG else "Internal server error"}
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Application factory; tests pass their own Settings"""
    settings = settings or default_settings

    app = FastAPI(
        title=settings.APP_NAME,
        description="Student records management API",
        version=APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        redirect_slashes=False
    )
    app.state.settings = settings
    app.state.limiter = limiter

    # Middleware (order matters - last added runs first)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE_MB * 1024 * 1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
    )

    register_exception_handlers(app)

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "app_name": settings.APP_NAME,
            "version": APP_VERSION,
            "environment": settings.ENVIRONMENT
        }

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "version": APP_VERSION,
            "docs": "/docs",
            "health": "/health"
        }

    app.include_router(health.router)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    return app


app = create_app()


def run():
    """Serve the app with uvicorn"""
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=default_settings.SERVER_HOST,
        port=default_settings.SERVER_PORT,
        reload=default_settings.DEBUG
    )


if __name__ == "__main__":
    run()
