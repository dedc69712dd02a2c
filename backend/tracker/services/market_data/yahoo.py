# backend/tracker/services/market_data/yahoo.py
"""
Yahoo Finance market data provider implementation.

This module implements the MarketDataProvider interface using the yfinance library.
Yahoo Finance is a free data source suitable for personal/educational use.

Key features:
- Symbol mapping per asset class (our symbols → Yahoo's format)
- Taiwan listed/OTC board fallback (.TW, then .TWO)
- USD→TWD rates from the TWD=X currency pair
- Comprehensive error handling
- Retry mechanism inherited from base class

Limitations:
- Rate limits (not officially documented, but exist)
- Closes for the current day may still move until the market closes
"""

import logging
import math
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

import yfinance as yf

from tracker.models import AssetClass
from tracker.services.constants import (
    CRYPTO_QUOTE_SUFFIX,
    FX_SYMBOL,
    TW_LISTED_SUFFIX,
    TW_OTC_SUFFIX,
)
from tracker.services.exceptions import (
    MarketDataError,
    FXProviderError,
    ProviderUnavailableError,
    TickerNotFoundError,
    RateLimitError,
    UnsupportedAssetClassError,
)
from tracker.services.market_data.base import (
    MarketDataProvider,
    PriceHistoryResult,
)

logger = logging.getLogger(__name__)


class YahooFinanceProvider(MarketDataProvider):
    """
    Yahoo Finance implementation of MarketDataProvider.

    Configuration:
        timeout: API request timeout in seconds (default: 10)

    Symbol mapping:
        equity_us   TSLA   -> TSLA
        equity_tw   2330   -> 2330.TW, then 2330.TWO when the listed board is empty
        equity_tw   6488.TWO -> used as-is (already qualified)
        crypto      BTC    -> BTC-USD

    Retry Behavior (inherited from MarketDataProvider):
        - Retries on ProviderUnavailableError and RateLimitError
        - Does NOT retry on TickerNotFoundError (permanent failure)
        - Uses exponential backoff: 1s → 2s → 4s
        - Maximum 3 attempts (configurable via class attributes)

    Example:
        provider = YahooFinanceProvider(timeout=15)

        result = provider.get_price_history(
            "2330", AssetClass.EQUITY_TW,
            date(2024, 1, 1), date(2024, 12, 31)
        )
        print(f"{result.provider_symbol}: {result.days_fetched} days")
    """

    # =========================================================================
    # INITIALIZATION
    # =========================================================================

    def __init__(self, timeout: int = 10) -> None:
        """
        Initialize the Yahoo Finance provider.

        Args:
            timeout: Request timeout in seconds
        """
        self._timeout = timeout
        logger.info(f"YahooFinanceProvider initialized (timeout={timeout}s)")

    @property
    def name(self) -> str:
        return "yahoo"

    # =========================================================================
    # PRICE HISTORY
    # =========================================================================

    def get_price_history(
            self,
            symbol: str,
            asset_class: AssetClass,
            start_date: date,
            end_date: date,
    ) -> PriceHistoryResult:
        """
        Fetch daily closes from Yahoo Finance.

        Args:
            symbol: Symbol as entered (e.g. "TSLA", "2330", "BTC")
            asset_class: Asset class of the symbol
            start_date: Start date (inclusive)
            end_date: End date (inclusive)

        Returns:
            PriceHistoryResult with native-currency closes

        Raises:
            TickerNotFoundError: If no candidate symbol has data
            UnsupportedAssetClassError: For cash classes
            ProviderUnavailableError: If Yahoo Finance unavailable
        """
        return self._execute_with_retry(
            self._fetch_price_history,
            symbol,
            asset_class,
            start_date,
            end_date,
        )

    def _fetch_price_history(
            self,
            symbol: str,
            asset_class: AssetClass,
            start_date: date,
            end_date: date,
    ) -> PriceHistoryResult:
        """Internal method to fetch a price series (called by retry wrapper)."""
        symbol = symbol.strip().upper()

        for yahoo_symbol in self._candidate_symbols(symbol, asset_class):
            logger.debug(
                f"Fetching price history for {yahoo_symbol}: "
                f"{start_date} to {end_date}"
            )
            try:
                prices = self._dataframe_to_series(
                    self._history(yahoo_symbol, start_date, end_date)
                )
            except TickerNotFoundError:
                prices = {}

            if prices:
                logger.debug(f"Fetched {len(prices)} days for {yahoo_symbol}")
                return PriceHistoryResult(
                    symbol=symbol,
                    asset_class=asset_class,
                    provider_symbol=yahoo_symbol,
                    prices=prices,
                    from_date=start_date,
                    to_date=end_date,
                )

            logger.debug(f"No price data for {yahoo_symbol}")

        raise TickerNotFoundError(
            ticker=symbol,
            asset_class=asset_class.value,
            provider=self.name,
        )

    # =========================================================================
    # FX HISTORY
    # =========================================================================

    def get_fx_history(
            self,
            start_date: date,
            end_date: date,
    ) -> dict[date, Decimal]:
        """
        Fetch daily USD→TWD closes from the TWD=X pair.

        An empty window is not an error (weekends, holidays, or a range
        that ends before Yahoo has data); the caller decides how to fall
        back.

        Raises:
            FXProviderError: If Yahoo Finance stays unavailable after retries
        """
        try:
            return self._execute_with_retry(
                self._fetch_fx_history,
                start_date,
                end_date,
            )
        except MarketDataError as e:
            raise FXProviderError(provider=self.name, reason=str(e)) from e

    def _fetch_fx_history(self, start_date: date, end_date: date) -> dict[date, Decimal]:
        """Internal method to fetch FX rates (called by retry wrapper)."""
        logger.debug(f"Fetching {FX_SYMBOL} rates: {start_date} to {end_date}")
        try:
            df = self._history(FX_SYMBOL, start_date, end_date)
        except TickerNotFoundError:
            return {}
        rates = self._dataframe_to_series(df)
        logger.debug(f"Fetched {len(rates)} {FX_SYMBOL} rates")
        return rates

    # =========================================================================
    # YAHOO ACCESS
    # =========================================================================

    def _history(self, yahoo_symbol: str, start_date: date, end_date: date):
        """
        Call yfinance and map its failures onto our exceptions.

        Returns:
            DataFrame indexed by timestamp (may be empty)
        """
        try:
            yf_ticker = yf.Ticker(yahoo_symbol)

            # Yahoo Finance end date is exclusive, so add 1 day
            yahoo_end = end_date + timedelta(days=1)

            return yf_ticker.history(
                start=start_date.isoformat(),
                end=yahoo_end.isoformat(),
                interval="1d",
                auto_adjust=False,  # Raw closes; adjusted closes rewrite history on dividends
                timeout=self._timeout,
            )

        except Exception as e:
            error_str = str(e).lower()

            if "not found" in error_str or "no data" in error_str or "delisted" in error_str:
                raise TickerNotFoundError(
                    ticker=yahoo_symbol,
                    asset_class="unknown",
                    provider=self.name,
                )

            if "rate limit" in error_str or "too many requests" in error_str:
                raise RateLimitError(provider=self.name)

            logger.error(f"Yahoo Finance error for {yahoo_symbol}: {e}")
            raise ProviderUnavailableError(
                provider=self.name,
                reason=str(e),
            )

    def _dataframe_to_series(self, df) -> dict[date, Decimal]:
        """
        Convert a yfinance DataFrame to a date -> close mapping.

        Rows with a missing or non-positive close are skipped.

        Args:
            df: DataFrame with (at least) a Close column

        Returns:
            Mapping of trading date to Decimal close
        """
        series: dict[date, Decimal] = {}
        if df is None or df.empty or "Close" not in df.columns:
            return series

        for idx, row in df.iterrows():
            # idx is a Timestamp
            price_date = idx.date() if hasattr(idx, 'date') else idx
            close_price = self._to_decimal(row.get('Close'))

            if close_price is None or close_price <= 0:
                logger.debug(f"Skipping {price_date}: missing close price")
                continue

            series[price_date] = close_price

        return series

    @staticmethod
    def _to_decimal(value: Any) -> Decimal | None:
        """Convert a value to Decimal, returning None for NaN/None."""
        if value is None:
            return None
        try:
            if math.isnan(float(value)):
                return None
            return Decimal(str(value)).quantize(Decimal("0.00000001"))
        except (TypeError, ValueError):
            return None

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    def _candidate_symbols(self, symbol: str, asset_class: AssetClass) -> list[str]:
        """
        Yahoo symbols to try, in order, for one of our symbols.

        Raises:
            UnsupportedAssetClassError: For cash classes
        """
        if asset_class == AssetClass.EQUITY_US:
            return [symbol]

        if asset_class == AssetClass.EQUITY_TW:
            if "." in symbol:
                return [symbol]
            return [f"{symbol}{TW_LISTED_SUFFIX}", f"{symbol}{TW_OTC_SUFFIX}"]

        if asset_class == AssetClass.CRYPTO:
            if symbol.endswith(CRYPTO_QUOTE_SUFFIX):
                return [symbol]
            return [f"{symbol}{CRYPTO_QUOTE_SUFFIX}"]

        raise UnsupportedAssetClassError(asset_class.value)
