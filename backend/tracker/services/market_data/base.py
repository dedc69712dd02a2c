# backend/tracker/services/market_data/base.py
"""
Abstract interface for market data providers.

This module defines the contract that all market data providers must follow.
Using an abstract base class allows for:
- Swapping the upstream source without touching the feed or the engine
- Mock implementations for testing
- Consistent retry behavior across all providers

A provider only knows how to talk to its upstream. Caching, throttling,
window arithmetic and the "empty mapping on failure" policy live one level
up, in MarketDataFeed.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import TypeVar, Callable, Any

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from tracker.models import AssetClass
from tracker.services.exceptions import (
    ProviderUnavailableError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

# Type variable for generic return type in retry method
T = TypeVar('T')


# =============================================================================
# DATA CLASSES - PRICE DATA
# =============================================================================

@dataclass
class PriceHistoryResult:
    """
    Result of fetching a daily close series for one symbol.

    Attributes:
        symbol: The symbol requested (as the user entered it)
        asset_class: Asset class requested
        provider_symbol: Symbol the provider actually answered for
            (e.g. "2330.TW" or "BTC-USD")
        prices: date -> close in the asset's native currency
        from_date: Requested start date
        to_date: Requested end date
    """

    symbol: str
    asset_class: AssetClass
    provider_symbol: str | None = None
    prices: dict[date, Decimal] = field(default_factory=dict)
    from_date: date | None = None
    to_date: date | None = None

    @property
    def days_fetched(self) -> int:
        """Number of trading days fetched."""
        return len(self.prices)

    @property
    def actual_from_date(self) -> date | None:
        return min(self.prices) if self.prices else None

    @property
    def actual_to_date(self) -> date | None:
        return max(self.prices) if self.prices else None


# =============================================================================
# ABSTRACT BASE CLASS
# =============================================================================

class MarketDataProvider(ABC):
    """
    Abstract base class for market data providers.

    Retry Behavior:
        The base class provides a `_execute_with_retry` method that implements
        exponential backoff retry logic. Subclasses can override the retry
        configuration by setting class attributes:

        - MAX_RETRY_ATTEMPTS: Total attempts (default: 3)
        - RETRY_MIN_WAIT: Minimum wait in seconds (default: 1)
        - RETRY_MAX_WAIT: Maximum wait in seconds (default: 10)
        - RETRY_MULTIPLIER: Exponential multiplier (default: 1)

    Retryable Exceptions:
        - ProviderUnavailableError: Network issues, timeouts, server errors
        - RateLimitError: API rate limit exceeded

    Non-Retryable Exceptions:
        - TickerNotFoundError: Permanent failure (symbol has no data)
        - UnsupportedAssetClassError: Asset class has no price series
    """

    # =========================================================================
    # RETRY CONFIGURATION (can be overridden by subclasses)
    # =========================================================================

    MAX_RETRY_ATTEMPTS: int = 3
    RETRY_MIN_WAIT: int = 1
    RETRY_MAX_WAIT: int = 10
    RETRY_MULTIPLIER: int = 1

    # =========================================================================
    # ABSTRACT PROPERTIES AND METHODS
    # =========================================================================

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Unique identifier for this provider.

        Used for logging and error messages.
        """
        pass

    @abstractmethod
    def get_price_history(
            self,
            symbol: str,
            asset_class: AssetClass,
            start_date: date,
            end_date: date,
    ) -> PriceHistoryResult:
        """
        Fetch daily closes for a single symbol.

        Args:
            symbol: Symbol as entered by the user (e.g. "TSLA", "2330", "BTC")
            asset_class: Decides how the symbol maps to the provider
            start_date: Start date (inclusive)
            end_date: End date (inclusive)

        Returns:
            PriceHistoryResult with at least one price

        Raises:
            TickerNotFoundError: Symbol has no data
            UnsupportedAssetClassError: Asset class has no price series (cash)
            ProviderUnavailableError: Network or API error (retryable)
            RateLimitError: Rate limit exceeded (retryable)
        """
        pass

    @abstractmethod
    def get_fx_history(
            self,
            start_date: date,
            end_date: date,
    ) -> dict[date, Decimal]:
        """
        Fetch daily USD→TWD closes.

        Args:
            start_date: Start date (inclusive)
            end_date: End date (inclusive)

        Returns:
            date -> rate (empty if the upstream has nothing in the window)

        Raises:
            FXProviderError: Upstream failure after retries
        """
        pass

    # =========================================================================
    # RETRY HELPER METHOD
    # =========================================================================

    def _execute_with_retry(
            self,
            func: Callable[..., T],
            *args: Any,
            **kwargs: Any,
    ) -> T:
        """
        Execute a function with retry logic for transient failures.

        Uses exponential backoff for retryable exceptions:
        - ProviderUnavailableError
        - RateLimitError

        Args:
            func: Function to execute
            *args: Positional arguments for func
            **kwargs: Keyword arguments for func

        Returns:
            Return value of func

        Raises:
            The last exception if all retries fail
        """

        @retry(
            stop=stop_after_attempt(self.MAX_RETRY_ATTEMPTS),
            wait=wait_exponential(
                multiplier=self.RETRY_MULTIPLIER,
                min=self.RETRY_MIN_WAIT,
                max=self.RETRY_MAX_WAIT,
            ),
            retry=retry_if_exception_type((ProviderUnavailableError, RateLimitError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        def _inner() -> T:
            return func(*args, **kwargs)

        return _inner()
