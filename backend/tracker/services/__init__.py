# backend/tracker/services/__init__.py
"""
Service layer for business logic.

This package contains the service layer which encapsulates business logic
separate from the API (router) layer. Services:
- Have NO knowledge of HTTP (no HTTPException, no status codes)
- Raise domain-specific exceptions
- Are easily testable via dependency injection

Usage:
    from tracker.services import ValuationService, MarketDataFeed
    from tracker.services import import_holdings
    from tracker.services import (
        TickerNotFoundError,
        InvalidSnapshotIndexError,
        HoldingsImportError,
    )

Architecture:
    services/
    ├── __init__.py                  # This file - main exports
    ├── exceptions.py                # Domain exceptions
    ├── constants.py                 # Business constants
    ├── protocols.py                 # Service interfaces (Protocol classes)
    ├── holdings_import.py           # JSON holdings normalization
    ├── market_data/                 # Market data package
    │   ├── base.py                  # Abstract provider interface
    │   ├── yahoo.py                 # Yahoo Finance implementation
    │   ├── cache.py                 # TTL series cache
    │   └── feed.py                  # Cached, throttled series feed
    └── valuation/                   # Valuation engine + service
        ├── service.py               # Main valuation orchestrator
        ├── types.py                 # Valuation data types
        ├── lookups.py               # Last-known-value lookups
        ├── date_range.py            # Date axis derivation
        ├── calculators.py           # Per-holding valuation
        ├── history_calculator.py    # Timeline calculation
        └── snapshot.py              # Cost/market distributions
"""

# Exceptions
from tracker.services.exceptions import (
    ServiceError,
    ValidationError,
    InvalidSnapshotIndexError,
    InvalidDateRangeError,
    HoldingsImportError,
    MarketDataError,
    ProviderUnavailableError,
    TickerNotFoundError,
    RateLimitError,
    UnsupportedAssetClassError,
    FXRateError,
    FXProviderError,
    UnsupportedCurrencyPairError,
)
# Holdings import
from tracker.services.holdings_import import ImportResult, ImportRowError, import_holdings
# Market data
from tracker.services.market_data import MarketDataFeed, TTLSeriesCache, YahooFinanceProvider
# Valuation
from tracker.services.valuation import ValuationService

__all__ = [
    # Services
    "ValuationService",
    "MarketDataFeed",
    "TTLSeriesCache",
    "YahooFinanceProvider",
    "import_holdings",
    "ImportResult",
    "ImportRowError",
    # Exceptions
    "ServiceError",
    "ValidationError",
    "InvalidSnapshotIndexError",
    "InvalidDateRangeError",
    "HoldingsImportError",
    "MarketDataError",
    "ProviderUnavailableError",
    "TickerNotFoundError",
    "RateLimitError",
    "UnsupportedAssetClassError",
    "FXRateError",
    "FXProviderError",
    "UnsupportedCurrencyPairError",
]
