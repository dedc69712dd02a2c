# backend/tracker/main.py
"""
FastAPI application entry point.

This file:
- Configures application-wide logging
- Creates the FastAPI application
- Registers global exception handlers
- Registers all routers
- Defines global endpoints (health checks)

Run with:
    uvicorn tracker.main:app --app-dir backend --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from tracker.config import settings
from tracker.middleware import (
    CorrelationIdMiddleware,
    limiter,
    rate_limit_exceeded_handler,
    SlowAPIMiddleware,
    RATE_LIMIT_HEALTH,
)
from tracker.routers import market_data_router, portfolio_router
from tracker.schemas.errors import ErrorDetail, FieldError, ValidationErrorDetail
from tracker.services.exceptions import (
    ServiceError,
    ValidationError,
    InvalidSnapshotIndexError,
    MarketDataError,
    ProviderUnavailableError,
    TickerNotFoundError,
    RateLimitError,
    UnsupportedAssetClassError,
    FXRateError,
    FXProviderError,
    UnsupportedCurrencyPairError,
)
from tracker.utils import setup_logging

logger = logging.getLogger(__name__)

# =============================================================================
# LOGGING SETUP (must be before app creation)
# =============================================================================

setup_logging()

# =============================================================================
# APPLICATION SETUP
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Historical portfolio valuation in TWD from daily prices and USD/TWD rates",
    version="0.1.0",
    debug=settings.debug,
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================
# Origins are configured via CORS_ORIGINS environment variable

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID"],
)


# =============================================================================
# MIDDLEWARE (order matters: last added = first executed)
# =============================================================================

# Attach limiter to app state (required by slowapi)
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================
# These handlers catch service-layer exceptions and convert them to
# consistent HTTP responses. Starlette picks the handler registered for the
# closest class in the exception's MRO, so specific handlers win over the
# ServiceError catch-all.
# =============================================================================

app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.exception_handler(TickerNotFoundError)
async def ticker_not_found_handler(request: Request, exc: TickerNotFoundError) -> JSONResponse:
    """Handle symbol without data on the provider (404)."""
    logger.warning(f"Ticker not found on provider: {exc.ticker}")
    return JSONResponse(
        status_code=404,
        content=ErrorDetail(
            error="TickerNotFoundError",
            message=str(exc),
            details={"ticker": exc.ticker, "asset_class": exc.asset_class},
        ).model_dump(),
    )


@app.exception_handler(UnsupportedAssetClassError)
async def unsupported_asset_class_handler(
    request: Request, exc: UnsupportedAssetClassError
) -> JSONResponse:
    """Handle price requests for unknown or unpriced asset types (400)."""
    logger.warning(f"Unsupported asset type: {exc.asset_class}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="UnsupportedAssetClassError",
            message=str(exc),
            details={
                "asset_class": exc.asset_class,
                "valid_options": ["equity_us", "equity_tw", "crypto"],
            },
        ).model_dump(),
    )


@app.exception_handler(ProviderUnavailableError)
async def provider_unavailable_handler(request: Request, exc: ProviderUnavailableError) -> JSONResponse:
    """Handle market data provider unavailable (503)."""
    logger.error(f"Provider unavailable: {exc}")
    return JSONResponse(
        status_code=503,
        content=ErrorDetail(
            error="ProviderUnavailableError",
            message=str(exc),
            details=None,
        ).model_dump(),
    )


@app.exception_handler(RateLimitError)
async def rate_limit_handler(request: Request, exc: RateLimitError) -> JSONResponse:
    """Handle upstream rate limit exceeded (429)."""
    logger.warning(f"Rate limit exceeded: {exc}")
    return JSONResponse(
        status_code=429,
        content=ErrorDetail(
            error="RateLimitError",
            message=str(exc),
            details={"retry_after": exc.retry_after} if exc.retry_after else None,
        ).model_dump(),
    )


@app.exception_handler(MarketDataError)
async def market_data_error_handler(request: Request, exc: MarketDataError) -> JSONResponse:
    """Handle generic market data errors (500)."""
    logger.error(f"Market data error: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorDetail(
            error="MarketDataError",
            message=str(exc),
            details=None,
        ).model_dump(),
    )


@app.exception_handler(UnsupportedCurrencyPairError)
async def unsupported_currency_pair_handler(
    request: Request, exc: UnsupportedCurrencyPairError
) -> JSONResponse:
    """Handle FX requests for anything but USD→TWD (400)."""
    logger.warning(f"Unsupported currency pair: {exc.base_currency}/{exc.quote_currency}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="UnsupportedCurrencyPairError",
            message=str(exc),
            details={
                "base_currency": exc.base_currency,
                "quote_currency": exc.quote_currency,
            },
        ).model_dump(),
    )


@app.exception_handler(FXProviderError)
async def fx_provider_error_handler(request: Request, exc: FXProviderError) -> JSONResponse:
    """Handle FX provider failures (503)."""
    logger.error(f"FX provider error: {exc}")
    return JSONResponse(
        status_code=503,
        content=ErrorDetail(
            error="FXProviderError",
            message=str(exc),
            details={"provider": exc.provider},
        ).model_dump(),
    )


@app.exception_handler(FXRateError)
async def fx_rate_error_handler(request: Request, exc: FXRateError) -> JSONResponse:
    """Handle other FX errors (500)."""
    logger.error(f"FX rate error: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorDetail(
            error="FXRateError",
            message=str(exc),
            details=None,
        ).model_dump(),
    )


@app.exception_handler(InvalidSnapshotIndexError)
async def invalid_snapshot_index_handler(
    request: Request, exc: InvalidSnapshotIndexError
) -> JSONResponse:
    """Handle snapshot index outside the timeline (400)."""
    logger.warning(f"Invalid snapshot index: {exc.index} (timeline length {exc.length})")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error="InvalidSnapshotIndexError",
            message=str(exc),
            details={"index": exc.index, "timeline_length": exc.length},
        ).model_dump(),
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Handle validation errors (400)."""
    logger.warning(f"Validation error: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorDetail(
            error=type(exc).__name__,
            message=str(exc),
            details={"field": exc.field} if exc.field else None,
        ).model_dump(),
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle generic service errors (500)."""
    logger.error(f"Service error: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorDetail(
            error="ServiceError",
            message=str(exc),
            details=None,
        ).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors with consistent format.

    Converts the default 422 validation error to our ValidationErrorDetail format.
    """
    errors = []
    for error in exc.errors():
        errors.append(FieldError(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            type=error["type"],
        ))
    return JSONResponse(
        status_code=422,
        content=ValidationErrorDetail(
            error="ValidationError",
            message="Request validation failed",
            details=errors,
        ).model_dump(),
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(market_data_router)  # /market-data/*
app.include_router(portfolio_router)  # /portfolio/*


# =============================================================================
# GLOBAL ENDPOINTS
# =============================================================================

@app.get("/", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def root(request: Request):
    """
    API root - returns basic application info.
    """
    return {
        "message": f"Welcome to {settings.app_name}!",
        "reporting_currency": settings.reporting_currency,
        "docs": "/docs",
    }


@app.get("/health/live", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def liveness(request: Request):
    """
    Liveness probe.

    The server keeps no persistent state, so being able to answer is the
    whole check.
    """
    return {"status": "alive"}
