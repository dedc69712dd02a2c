# backend/tracker/services/market_data/feed.py
"""
Market data feed: the series supplier for the valuation engine.

MarketDataFeed sits between a MarketDataProvider and its two callers:

- The valuation path (get_price_series / get_fx_series) never raises on
  upstream failure. It logs, records a warning, and returns an empty
  mapping so the engine's zero-value rule applies.
- The raw market data endpoints (fetch_price_series / fetch_fx_series)
  let provider errors propagate to the API's exception handlers.

Both paths share window arithmetic, the TTL cache and the throttle that
spaces consecutive upstream requests.
"""

import logging
import threading
import time
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable

from tracker.models import AssetClass
from tracker.services.constants import FX_BASE_CURRENCY, FX_QUOTE_CURRENCY
from tracker.services.exceptions import (
    FXRateError,
    InvalidDateRangeError,
    MarketDataError,
    UnsupportedCurrencyPairError,
)
from tracker.services.market_data.base import MarketDataProvider
from tracker.services.market_data.cache import TTLSeriesCache
from tracker.utils.date_utils import clamp_date

logger = logging.getLogger(__name__)


class MarketDataFeed:
    """
    Cached, throttled access to price and FX series.

    Attributes:
        _provider: Upstream market data provider
        _cache: Fetched series keyed by request
        _throttle_seconds: Minimum spacing between upstream requests
    """

    def __init__(
            self,
            provider: MarketDataProvider,
            cache: TTLSeriesCache | None = None,
            lookback_days: int = 365,
            fx_padding_days: int = 30,
            fx_fallback_days: int = 7,
            throttle_seconds: float = 0.0,
            sleep: Callable[[float], None] = time.sleep,
            clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._provider = provider
        self._cache = cache if cache is not None else TTLSeriesCache()
        self._lookback_days = lookback_days
        self._fx_padding_days = fx_padding_days
        self._fx_fallback_days = fx_fallback_days
        self._throttle_seconds = throttle_seconds
        self._sleep = sleep
        self._clock = clock
        self._throttle_lock = threading.Lock()
        self._last_request_at: float | None = None

    @property
    def provider_name(self) -> str:
        return self._provider.name

    # =========================================================================
    # VALUATION PATH (never raises on upstream failure)
    # =========================================================================

    def get_price_series(
            self,
            symbol: str,
            asset_class: AssetClass,
            today: date | None = None,
            warnings: list[str] | None = None,
    ) -> dict[date, Decimal]:
        """
        Native daily closes for roughly the last year.

        Cash classes have no series and return an empty mapping.

        Args:
            symbol: Symbol as entered
            asset_class: Asset class of the symbol
            today: End of the lookback window (default: date.today())
            warnings: If given, failures are appended here

        Returns:
            date -> close (empty on any failure)
        """
        if asset_class.is_cash:
            return {}
        try:
            return self.fetch_price_series(symbol, asset_class, today=today)
        except MarketDataError as e:
            logger.warning(f"Price series unavailable for {symbol} ({asset_class.value}): {e}")
            if warnings is not None:
                warnings.append(str(e))
            return {}

    def get_fx_series(
            self,
            start_date: date,
            end_date: date,
            today: date | None = None,
            warnings: list[str] | None = None,
    ) -> dict[date, Decimal]:
        """
        USD→TWD rates covering [start_date, end_date].

        Returns:
            date -> rate (empty on any failure)
        """
        try:
            return self.fetch_fx_series(start_date, end_date, today=today)
        except (FXRateError, MarketDataError, InvalidDateRangeError) as e:
            logger.warning(f"FX series unavailable for {start_date}..{end_date}: {e}")
            if warnings is not None:
                warnings.append(str(e))
            return {}

    # =========================================================================
    # RAW PATH (errors propagate)
    # =========================================================================

    def fetch_price_series(
            self,
            symbol: str,
            asset_class: AssetClass,
            today: date | None = None,
    ) -> dict[date, Decimal]:
        """
        Native daily closes for the lookback window ending today.

        Raises:
            TickerNotFoundError: Symbol has no data
            UnsupportedAssetClassError: Cash classes
            ProviderUnavailableError: Upstream failure after retries
        """
        symbol = symbol.strip().upper()
        today = today or date.today()
        start_date = today - timedelta(days=self._lookback_days)

        key = ("price", asset_class.value, symbol, start_date, today)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for {symbol} ({asset_class.value})")
            return dict(cached)

        self._throttle()
        result = self._provider.get_price_history(symbol, asset_class, start_date, today)
        logger.info(
            f"Fetched {result.days_fetched} prices for {symbol} "
            f"as {result.provider_symbol} from {self._provider.name}"
        )

        self._cache.set(key, dict(result.prices))
        return dict(result.prices)

    def fetch_fx_series(
            self,
            start_date: date,
            end_date: date,
            base_currency: str = FX_BASE_CURRENCY,
            quote_currency: str = FX_QUOTE_CURRENCY,
            today: date | None = None,
    ) -> dict[date, Decimal]:
        """
        USD→TWD rates for a date range.

        The end is clamped to today and the start to the end. The request
        window is widened backwards by the padding so the first days of
        the range can resolve to an earlier rate. If the padded window is
        empty, a short lookback picks the latest rate on or before the
        start and returns it keyed at the start.

        Raises:
            UnsupportedCurrencyPairError: For anything but USD→TWD
            InvalidDateRangeError: If start_date is after end_date
            FXProviderError: Upstream failure after retries
        """
        if (base_currency.upper(), quote_currency.upper()) != (FX_BASE_CURRENCY, FX_QUOTE_CURRENCY):
            raise UnsupportedCurrencyPairError(base_currency, quote_currency)
        if start_date > end_date:
            raise InvalidDateRangeError(start_date, end_date)

        today = today or date.today()
        end_date = clamp_date(end_date, today)
        start_date = clamp_date(start_date, end_date)
        window_start = start_date - timedelta(days=self._fx_padding_days)

        key = ("fx", window_start, end_date)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit for FX {window_start}..{end_date}")
            return dict(cached)

        self._throttle()
        rates = {
            d: rate
            for d, rate in self._provider.get_fx_history(window_start, end_date).items()
            if window_start <= d <= end_date
        }

        if not rates:
            rates = self._fallback_rate(start_date, end_date)

        logger.info(f"Fetched {len(rates)} FX rates for {start_date}..{end_date}")
        if rates:
            self._cache.set(key, dict(rates))
        return rates

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _fallback_rate(self, start_date: date, end_date: date) -> dict[date, Decimal]:
        """Latest rate on or before start_date within the short lookback."""
        fallback_start = start_date - timedelta(days=self._fx_fallback_days)
        logger.debug(f"No FX rates in padded window; retrying from {fallback_start}")

        self._throttle()
        candidates = {
            d: rate
            for d, rate in self._provider.get_fx_history(fallback_start, end_date).items()
            if d <= start_date
        }
        if not candidates:
            return {}
        return {start_date: candidates[max(candidates)]}

    def _throttle(self) -> None:
        """Block until the throttle interval has passed since the last upstream request."""
        if self._throttle_seconds <= 0:
            return
        with self._throttle_lock:
            now = self._clock()
            if self._last_request_at is not None:
                wait = self._throttle_seconds - (now - self._last_request_at)
                if wait > 0:
                    self._sleep(wait)
                    now = self._clock()
            self._last_request_at = now
