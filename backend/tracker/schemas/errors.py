# backend/tracker/schemas/errors.py
"""
Pydantic schemas for error responses.

Two bodies are ever returned on failure:
- ErrorDetail: domain errors (400 bad index or currency pair, 404 unknown
  ticker, 503 provider down, 429 throttled)
- ValidationErrorDetail: malformed requests (422), one FieldError per problem

The exception class name doubles as the machine-readable code, so clients
can switch on `error` without parsing messages.
"""

from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    """Body of every handled domain error."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "error": "InvalidSnapshotIndexError",
                    "message": "Snapshot index 5 out of range (0..1)",
                    "details": {"index": 5, "timeline_length": 2},
                },
                {
                    "error": "TickerNotFoundError",
                    "message": "No historical data for equity_tw ticker '9999' from yahoo",
                    "details": {"ticker": "9999", "asset_class": "equity_tw"},
                },
            ]
        }
    )

    error: str = Field(
        ...,
        description="Exception class name (e.g. 'TickerNotFoundError', 'UnsupportedCurrencyPairError')"
    )
    message: str = Field(
        ...,
        description="Human-readable error message"
    )
    details: dict | None = Field(
        default=None,
        description="Structured context such as the ticker, pair or index involved"
    )


class FieldError(BaseModel):
    """One problem found while validating a request."""

    field: str = Field(
        ...,
        description="Dotted location, e.g. 'body.holdings.0.quantity'"
    )
    message: str
    type: str = Field(
        ...,
        description="Pydantic error type, e.g. 'greater_than' or 'date_from_datetime_parsing'"
    )


class ValidationErrorDetail(BaseModel):
    """Body of a 422: the request never reached the valuation engine."""

    error: str = Field(default="ValidationError")
    message: str = Field(default="Request validation failed")
    details: list[FieldError] = Field(
        ...,
        description="Every field that failed validation"
    )
