# backend/tracker/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
The router layer is responsible for mapping these to appropriate HTTP responses.

The valuation engine itself raises none of these for missing data: an
absent price or FX rate is an expected state and is valued at zero.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   ├── InvalidSnapshotIndexError
    │   ├── InvalidDateRangeError
    │   └── HoldingsImportError
    ├── MarketDataError
    │   ├── ProviderUnavailableError
    │   ├── TickerNotFoundError
    │   ├── RateLimitError
    │   └── UnsupportedAssetClassError
    └── FXRateError
        ├── FXProviderError
        └── UnsupportedCurrencyPairError
"""

from datetime import date


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when input validation fails.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidSnapshotIndexError(ValidationError):
    """Raised when a snapshot index falls outside the timeline."""

    def __init__(self, index: int, length: int) -> None:
        self.index = index
        self.length = length
        if length == 0:
            message = f"Snapshot index {index} requested but the timeline is empty"
        else:
            message = f"Snapshot index {index} out of range (0..{length - 1})"
        super().__init__(message, field="index")


class InvalidDateRangeError(ValidationError):
    """Raised when a start date falls after its end date."""

    def __init__(self, start_date: date, end_date: date) -> None:
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"Invalid date range: start {start_date} is after end {end_date}",
            field="start",
        )


class HoldingsImportError(ValidationError):
    """
    Raised when an imported holdings payload yields nothing usable.

    Individual malformed rows are dropped with a warning; this is raised
    only when the payload itself is unusable or every row was dropped.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, field="holdings")


# =============================================================================
# MARKET DATA PROVIDER ERRORS
# =============================================================================


class MarketDataError(ServiceError):
    """
    Base exception for market data provider failures.

    Attributes:
        provider: Name of the provider that failed
    """

    def __init__(self, message: str, provider: str | None = None) -> None:
        self.provider = provider
        super().__init__(message)


class ProviderUnavailableError(MarketDataError):
    """
    Raised when a market data provider is temporarily unavailable.

    Examples:
    - Network timeout
    - Server errors (500, 502, 503)

    This is a retryable error.
    """

    def __init__(self, provider: str, reason: str) -> None:
        message = f"Provider '{provider}' is unavailable: {reason}"
        super().__init__(message, provider=provider)
        self.reason = reason


class TickerNotFoundError(MarketDataError):
    """
    Raised when a symbol has no data at the provider.

    This is NOT a retryable error.
    """

    def __init__(self, ticker: str, asset_class: str, provider: str) -> None:
        message = f"No historical data for {asset_class} ticker '{ticker}' from {provider}"
        super().__init__(message, provider=provider)
        self.ticker = ticker
        self.asset_class = asset_class


class RateLimitError(MarketDataError):
    """
    Raised when the provider's rate limit has been exceeded.

    This is a retryable error (with backoff).

    Attributes:
        retry_after: Seconds to wait before retrying (if provided by API)
    """

    def __init__(self, provider: str, retry_after: int | None = None) -> None:
        message = f"Rate limit exceeded for provider '{provider}'"
        if retry_after:
            message += f" (retry after {retry_after}s)"
        super().__init__(message, provider=provider)
        self.retry_after = retry_after


class UnsupportedAssetClassError(MarketDataError):
    """Raised when a price series is requested for an unknown asset type."""

    def __init__(self, asset_class: str) -> None:
        self.asset_class = asset_class
        super().__init__(f"Invalid asset type: '{asset_class}'")


# =============================================================================
# FX RATE ERRORS
# =============================================================================


class FXRateError(ServiceError):
    """
    Base exception for FX rate errors.

    Attributes:
        base_currency: The base currency code
        quote_currency: The quote currency code
    """

    def __init__(
            self,
            message: str,
            base_currency: str | None = None,
            quote_currency: str | None = None,
    ) -> None:
        self.base_currency = base_currency
        self.quote_currency = quote_currency
        super().__init__(message)


class FXProviderError(FXRateError):
    """
    Raised when the FX data provider fails.

    Attributes:
        provider: Name of the FX data provider
        reason: Specific reason for failure
    """

    def __init__(self, provider: str, reason: str) -> None:
        self.provider = provider
        self.reason = reason
        super().__init__(f"FX provider '{provider}' error: {reason}")


class UnsupportedCurrencyPairError(FXRateError):
    """Raised for any pair other than USD→TWD."""

    def __init__(self, base_currency: str, quote_currency: str) -> None:
        super().__init__(
            f"Only USD to TWD is supported, got {base_currency} to {quote_currency}",
            base_currency=base_currency,
            quote_currency=quote_currency,
        )


__all__ = [
    # Base
    "ServiceError",
    # Validation
    "ValidationError",
    "InvalidSnapshotIndexError",
    "InvalidDateRangeError",
    "HoldingsImportError",
    # Market Data
    "MarketDataError",
    "ProviderUnavailableError",
    "TickerNotFoundError",
    "RateLimitError",
    "UnsupportedAssetClassError",
    # FX Rate
    "FXRateError",
    "FXProviderError",
    "UnsupportedCurrencyPairError",
]
