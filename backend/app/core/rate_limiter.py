"""
Rate Limiting for the Student Records API
=========================================
slowapi with in-process memory storage by default (RATE_LIMIT_STORAGE_URI
can point at Redis when several workers share limits).

Only the login endpoint is limited (LOGIN_RATE_LIMIT, default 10/minute per
client address) to slow down password guessing.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging_config import logger


def get_client_identifier(request: Request) -> str:
    """Rate limit key: client IP address"""
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
    strategy="fixed-window",
)


def login_rate_limit():
    """Rate limit for the login endpoint"""
    return limiter.limit(settings.LOGIN_RATE_LIMIT, key_func=get_client_identifier)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Return 429 with a Retry-After hint"""
    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)}: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "message": "Too many requests. Please slow down.",
            "detail": str(exc.detail),
        },
        headers={"Retry-After": "60"},
    )
