# backend/tracker/dependencies.py
"""
Dependency injection module for FastAPI services.

This module provides singleton service instances that are shared across
all requests. Sharing matters here: the series cache and the upstream
throttle only work if every request goes through the same feed.

Services are lazily initialized on first use to avoid import-time side effects.

Usage in routers:
    from tracker.dependencies import get_valuation_service

    @router.post("/timeline")
    def build_timeline(
        service: ValuationService = Depends(get_valuation_service),
    ):
        ...

Tests replace these with app.dependency_overrides.
"""

import logging
from functools import lru_cache

from tracker.config import settings
from tracker.services.market_data import (
    MarketDataFeed,
    TTLSeriesCache,
    YahooFinanceProvider,
)
from tracker.services.valuation import ValuationService

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON SERVICE INSTANCES
# =============================================================================
# Order matters: define dependencies before dependents
# 1. get_market_data_provider (no deps)
# 2. get_market_data_feed (depends on provider)
# 3. get_valuation_service (depends on feed)


@lru_cache(maxsize=1)
def get_market_data_provider() -> YahooFinanceProvider:
    """Get the singleton market data provider instance."""
    logger.debug("Initializing singleton YahooFinanceProvider")
    return YahooFinanceProvider(timeout=settings.provider_timeout_seconds)


@lru_cache(maxsize=1)
def get_market_data_feed() -> MarketDataFeed:
    """
    Get the singleton MarketDataFeed instance.

    Owns the series cache and the upstream throttle for the whole process.
    """
    logger.debug("Initializing singleton MarketDataFeed")
    return MarketDataFeed(
        provider=get_market_data_provider(),
        cache=TTLSeriesCache(
            maxsize=settings.series_cache_max_size,
            ttl_seconds=settings.series_cache_ttl_seconds,
        ),
        lookback_days=settings.price_lookback_days,
        fx_padding_days=settings.fx_window_padding_days,
        fx_fallback_days=settings.fx_fallback_days,
        throttle_seconds=settings.fetch_throttle_seconds,
    )


@lru_cache(maxsize=1)
def get_valuation_service() -> ValuationService:
    """Get the singleton ValuationService instance."""
    logger.debug("Initializing singleton ValuationService")
    return ValuationService(feed=get_market_data_feed())
