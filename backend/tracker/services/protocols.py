# backend/tracker/services/protocols.py
"""
Protocol interfaces for service dependency injection.

Using typing.Protocol enables structural subtyping:
- Existing classes satisfy protocols without modification
- Test mocks work without explicit inheritance
- Clear documentation of required interfaces
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from tracker.models import AssetClass


class MarketDataFeedProtocol(Protocol):
    """Interface required by ValuationService."""

    def get_price_series(
        self,
        symbol: str,
        asset_class: AssetClass,
        today: date | None = None,
        warnings: list[str] | None = None,
    ) -> dict[date, Decimal]:
        ...

    def get_fx_series(
        self,
        start_date: date,
        end_date: date,
        today: date | None = None,
        warnings: list[str] | None = None,
    ) -> dict[date, Decimal]:
        ...
