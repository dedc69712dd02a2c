# backend/tracker/routers/__init__.py
"""
API routers for the Portfolio Time Machine.

Each router handles a specific domain:
- market_data: Raw price and FX series
- portfolio: Timeline valuation and holdings import
"""

from tracker.routers.market_data import router as market_data_router
from tracker.routers.portfolio import router as portfolio_router

__all__ = [
    "market_data_router",
    "portfolio_router",
]
