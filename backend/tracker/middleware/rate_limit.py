# backend/tracker/middleware/rate_limit.py
"""
Rate limiting for API protection.

Every market data request ends up at Yahoo Finance, which throttles
aggressive clients for everyone sharing the server's IP. Per-client
limits (slowapi) keep one browser tab from exhausting that budget.

Key by: Client IP address
Storage: In-memory (single-instance deployments)

Usage:
    from tracker.middleware.rate_limit import limiter, RATE_LIMIT_MARKET_DATA

    @router.get("/historical")
    @limiter.limit(RATE_LIMIT_MARKET_DATA)
    def get_historical(request: Request, ...):
        ...
"""

import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from tracker.config import settings
from tracker.schemas.errors import ErrorDetail
from tracker.services.constants import (
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_HEALTH,
    RATE_LIMIT_MARKET_DATA,
    RATE_LIMIT_TIMELINE,
)

logger = logging.getLogger(__name__)

# Seconds clients are told to wait; slowapi does not expose the window reset
RETRY_AFTER_SECONDS = 60


# =============================================================================
# LIMITER INSTANCE
# =============================================================================

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[RATE_LIMIT_DEFAULT],
    enabled=settings.rate_limit_enabled,
)


# =============================================================================
# RATE LIMIT EXCEEDED HANDLER
# =============================================================================

async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """
    Render a 429 in the standard ErrorDetail shape with a Retry-After header.
    """
    limit_info = str(exc.detail) if exc.detail else "Rate limit exceeded"

    logger.warning(
        f"Rate limit exceeded for {get_remote_address(request)}: {limit_info}"
    )

    return JSONResponse(
        status_code=429,
        content=ErrorDetail(
            error="RateLimitError",
            message=f"Too many requests. {limit_info}",
            details={"retry_after": RETRY_AFTER_SECONDS},
        ).model_dump(),
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


__all__ = [
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_DEFAULT",
    "RATE_LIMIT_HEALTH",
    "RATE_LIMIT_MARKET_DATA",
    "RATE_LIMIT_TIMELINE",
]
