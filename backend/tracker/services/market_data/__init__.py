# backend/tracker/services/market_data/__init__.py
"""
Market data services package.

This package contains:
- Abstract interface for market data providers (base.py)
- Yahoo Finance implementation (yahoo.py)
- TTL series cache (cache.py)
- Feed used by the valuation service and the market data API (feed.py)

Usage:
    from tracker.services.market_data import (
        MarketDataFeed,
        YahooFinanceProvider,
        TTLSeriesCache,
    )

    feed = MarketDataFeed(YahooFinanceProvider(), TTLSeriesCache())
    prices = feed.get_price_series("TSLA", AssetClass.EQUITY_US)

Architecture:
    MarketDataProvider (ABC)
    └── YahooFinanceProvider (concrete)

    MarketDataFeed
    └── Wraps a provider with caching, throttling and FX windowing
"""

# Base provider interface and data classes
from tracker.services.market_data.base import (
    MarketDataProvider,
    PriceHistoryResult,
)
from tracker.services.market_data.cache import TTLSeriesCache
from tracker.services.market_data.feed import MarketDataFeed
# Concrete implementations
from tracker.services.market_data.yahoo import YahooFinanceProvider

__all__ = [
    # Abstract interface
    "MarketDataProvider",
    "PriceHistoryResult",
    # Concrete implementations
    "YahooFinanceProvider",
    # Feed
    "MarketDataFeed",
    "TTLSeriesCache",
]
