# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Test-mode settings (no throttling, no rate limiting)
- Mock provider fixtures
- Sample series and holdings
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("APP_NAME", "Test App")

from datetime import date
from decimal import Decimal

import pytest

from tracker.models import AssetClass, Holding
from tracker.services.exceptions import (
    TickerNotFoundError,
    UnsupportedAssetClassError,
)
from tracker.services.market_data.base import MarketDataProvider, PriceHistoryResult
from tracker.services.market_data.cache import TTLSeriesCache
from tracker.services.market_data.feed import MarketDataFeed


# =============================================================================
# MOCK MARKET DATA PROVIDER
# =============================================================================

class MockMarketDataProvider(MarketDataProvider):
    """
    Mock implementation of MarketDataProvider for testing.

    Serves configured series (filtered to the requested window) and can
    simulate errors per symbol or for FX.
    """

    def __init__(self):
        self._prices: dict[tuple[str, AssetClass], dict[date, Decimal]] = {}
        self._errors: dict[str, Exception] = {}
        self._fx: dict[date, Decimal] = {}
        self._fx_error: Exception | None = None
        self.price_calls: list[tuple[str, AssetClass, date, date]] = []
        self.fx_calls: list[tuple[date, date]] = []

    @property
    def name(self) -> str:
        return "mock"

    def set_prices(self, symbol: str, asset_class: AssetClass, prices: dict[date, Decimal]) -> None:
        """Configure the series served for a symbol."""
        self._prices[(symbol.upper(), asset_class)] = dict(prices)

    def add_error(self, symbol: str, error: Exception) -> None:
        """Configure an error raised for a symbol."""
        self._errors[symbol.upper()] = error

    def set_fx(self, rates: dict[date, Decimal]) -> None:
        self._fx = dict(rates)

    def set_fx_error(self, error: Exception | None) -> None:
        self._fx_error = error

    def get_price_history(
            self,
            symbol: str,
            asset_class: AssetClass,
            start_date: date,
            end_date: date,
    ) -> PriceHistoryResult:
        symbol = symbol.upper()
        self.price_calls.append((symbol, asset_class, start_date, end_date))

        if asset_class.is_cash:
            raise UnsupportedAssetClassError(asset_class.value)
        if symbol in self._errors:
            raise self._errors[symbol]

        prices = {
            d: p
            for d, p in self._prices.get((symbol, asset_class), {}).items()
            if start_date <= d <= end_date
        }
        if not prices:
            raise TickerNotFoundError(
                ticker=symbol,
                asset_class=asset_class.value,
                provider=self.name,
            )

        return PriceHistoryResult(
            symbol=symbol,
            asset_class=asset_class,
            provider_symbol=symbol,
            prices=prices,
            from_date=start_date,
            to_date=end_date,
        )

    def get_fx_history(self, start_date: date, end_date: date) -> dict[date, Decimal]:
        self.fx_calls.append((start_date, end_date))
        if self._fx_error is not None:
            raise self._fx_error
        return {d: r for d, r in self._fx.items() if start_date <= d <= end_date}


# =============================================================================
# PROVIDER / FEED FIXTURES
# =============================================================================

@pytest.fixture
def mock_provider() -> MockMarketDataProvider:
    """Fresh mock provider per test."""
    return MockMarketDataProvider()


@pytest.fixture
def feed(mock_provider) -> MarketDataFeed:
    """Feed over the mock provider with an isolated cache and no throttle."""
    return MarketDataFeed(
        provider=mock_provider,
        cache=TTLSeriesCache(maxsize=64, ttl_seconds=3600),
        lookback_days=365,
        fx_padding_days=30,
        fx_fallback_days=7,
        throttle_seconds=0.0,
    )


# =============================================================================
# SAMPLE DATA
# =============================================================================

TODAY = date(2024, 1, 10)


@pytest.fixture
def today() -> date:
    """Fixed 'today' so synthesized axes and fetch windows are deterministic."""
    return TODAY


@pytest.fixture
def tsla_prices() -> dict[date, Decimal]:
    """TSLA closes on two trading days."""
    return {
        date(2024, 1, 2): Decimal("100"),
        date(2024, 1, 5): Decimal("110"),
    }


@pytest.fixture
def usd_twd_rates() -> dict[date, Decimal]:
    """USD→TWD on the same two days."""
    return {
        date(2024, 1, 2): Decimal("31.5"),
        date(2024, 1, 5): Decimal("32.0"),
    }


@pytest.fixture
def tsla_holding() -> Holding:
    return Holding(
        asset_class=AssetClass.EQUITY_US,
        symbol="TSLA",
        quantity=Decimal("10"),
        acquisition_date=date(2024, 1, 2),
        id="tsla-1",
    )


@pytest.fixture
def cash_twd_holding() -> Holding:
    return Holding(
        asset_class=AssetClass.CASH_TWD,
        symbol="",
        quantity=Decimal("5000"),
        acquisition_date=date(2024, 1, 1),
        id="cash-twd-1",
    )
