# backend/tracker/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.

This package contains all Pydantic schemas organized by domain:
- errors: Error response formats
- holdings: Holdings in requests and import results
- market_data: Raw price/FX responses
- portfolio: Timeline requests and responses

Usage:
    from tracker.schemas import TimelineRequest, TimelineResponse
    from tracker.schemas import HoldingIn, HoldingsImportResponse
    from tracker.schemas import ErrorDetail
"""

from tracker.schemas.errors import ErrorDetail, FieldError, ValidationErrorDetail
from tracker.schemas.holdings import (
    HoldingIn,
    HoldingResponse,
    HoldingsImportResponse,
    ImportRowErrorResponse,
)
from tracker.schemas.market_data import FXRatesResponse
from tracker.schemas.portfolio import (
    DaySnapshotResponse,
    DistributionEntryResponse,
    SnapshotResponse,
    TimelineRequest,
    TimelineResponse,
)

__all__ = [
    # Errors
    "ErrorDetail",
    "FieldError",
    "ValidationErrorDetail",
    # Holdings
    "HoldingIn",
    "HoldingResponse",
    "HoldingsImportResponse",
    "ImportRowErrorResponse",
    # Market data
    "FXRatesResponse",
    # Portfolio
    "TimelineRequest",
    "TimelineResponse",
    "DaySnapshotResponse",
    "DistributionEntryResponse",
    "SnapshotResponse",
]
