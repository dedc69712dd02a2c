# backend/tracker/services/valuation/service.py
"""
Valuation Service - Main orchestrator for portfolio valuation.

This is the single entry point from holdings to a full valuation result:
- build(): fetch series, compute the timeline, project one snapshot

Flow:
    holdings
      → price series per distinct (asset class, symbol), fetched one at a time
      → date axis (DateRangeDeriver)
      → USD→TWD series for the axis window (only if anything is USD-denominated)
      → Timeline (TimelineCalculator)
      → SnapshotProjection at the selected index (SnapshotProjector)

Design Principles:
- Dependency Injection: the market data feed is injected via constructor
- No HTTP Knowledge: Raises domain exceptions, not HTTPException
- Composable: the engine pieces stay pure; all I/O happens here

Usage:
    from tracker.services.valuation import ValuationService

    service = ValuationService(feed)
    result = service.build(holdings, snapshot_index=0)
    result.timeline[-1].total_value
    result.warnings  # failed fetches, if any
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Iterable

from tracker.models import AssetClass, Holding
from tracker.services.valuation.date_range import DateRangeDeriver
from tracker.services.valuation.history_calculator import TimelineCalculator
from tracker.services.valuation.snapshot import SnapshotProjector
from tracker.services.valuation.types import PortfolioTimeline, Series

if TYPE_CHECKING:
    from tracker.services.protocols import MarketDataFeedProtocol

logger = logging.getLogger(__name__)


class ValuationService:
    """
    Main service for portfolio valuation.

    Attributes:
        _feed: Injected market data feed
        _date_deriver: Date axis derivation
        _timeline_calc: Day-by-day valuation
        _projector: Cost and market distributions
    """

    def __init__(
            self,
            feed: MarketDataFeedProtocol,
            date_deriver: DateRangeDeriver | None = None,
    ) -> None:
        """
        Initialize the valuation service.

        Args:
            feed: Supplier of price and FX series
            date_deriver: Date axis derivation (default: daily fallback)
        """
        self._feed = feed
        self._date_deriver = date_deriver or DateRangeDeriver()
        self._timeline_calc = TimelineCalculator(date_deriver=self._date_deriver)

        # Projector shares the timeline's per-holding rules for cost basis
        self._projector = SnapshotProjector(self._timeline_calc.value_calculator)

        logger.info("ValuationService initialized")

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def build(
            self,
            holdings: Iterable[Holding],
            as_of_date: date | None = None,
            snapshot_index: int | None = None,
            today: date | None = None,
    ) -> PortfolioTimeline:
        """
        Value a holding set over time.

        Args:
            holdings: Holding set
            as_of_date: Date to force onto the axis
            snapshot_index: Timeline index to project (default: last day)
            today: Reference date for fetch windows and synthesized axes

        Returns:
            PortfolioTimeline (projection is None if the timeline is empty
            and no index was requested)

        Raises:
            InvalidSnapshotIndexError: If snapshot_index is outside the timeline
        """
        holdings = list(holdings)
        today = today or date.today()
        warnings: list[str] = []

        price_series = self._fetch_price_series(holdings, today, warnings)

        axis = self._date_deriver.derive(
            holdings,
            price_series.values(),
            as_of_date=as_of_date,
            today=today,
        )

        fx_series: Series = {}
        if axis and any(h.asset_class.is_usd_denominated for h in holdings):
            fx_series = self._feed.get_fx_series(
                axis[0],
                axis[-1],
                today=today,
                warnings=warnings,
            )

        timeline = self._timeline_calc.calculate(
            holdings,
            price_series,
            fx_series,
            as_of_date=as_of_date,
            today=today,
        )

        projection = None
        if snapshot_index is not None:
            projection = self._projector.project(
                timeline, snapshot_index, holdings, price_series, fx_series
            )
        elif not timeline.is_empty:
            projection = self._projector.project(
                timeline, len(timeline) - 1, holdings, price_series, fx_series
            )

        logger.info(
            f"Built timeline: {len(holdings)} holdings, {len(timeline)} days, "
            f"{len(warnings)} warnings"
        )

        return PortfolioTimeline(
            timeline=timeline,
            projection=projection,
            price_series=price_series,
            fx_series=fx_series,
            warnings=warnings,
        )

    # =========================================================================
    # PRIVATE HELPERS
    # =========================================================================

    def _fetch_price_series(
            self,
            holdings: list[Holding],
            today: date,
            warnings: list[str],
    ) -> dict[str, Series]:
        """
        Fetch each distinct priced (asset class, symbol) once, in order.

        Requests are sequential; the feed spaces upstream calls.
        """
        requests: list[tuple[AssetClass, str]] = []
        for holding in holdings:
            key = (holding.asset_class, holding.symbol)
            if not holding.asset_class.is_cash and key not in requests:
                requests.append(key)

        price_series: dict[str, Series] = {}
        for asset_class, symbol in requests:
            series = self._feed.get_price_series(
                symbol,
                asset_class,
                today=today,
                warnings=warnings,
            )
            # Series are keyed by symbol; the first non-empty one wins
            if series and not price_series.get(symbol):
                price_series[symbol] = series

        return price_series
