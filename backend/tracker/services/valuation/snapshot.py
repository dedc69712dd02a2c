# backend/tracker/services/valuation/snapshot.py
"""
Point-in-time cost and market views of a timeline.

Two distributions are projected at a selected timeline index:

- Cost: one entry per holding, valued at its acquisition date. Holdings
  that share a display name stay separate entries.
- Market: one entry per display name, valued at the selected date. The
  timeline already sums holdings that share a symbol, so each distinct
  symbol is counted exactly once.

Both views drop entries whose value is zero or negative.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Mapping

from tracker.models import Holding
from tracker.services.constants import ZERO
from tracker.services.exceptions import InvalidSnapshotIndexError
from tracker.services.valuation.calculators import HoldingValueCalculator
from tracker.services.valuation.lookups import SeriesIndex
from tracker.services.valuation.types import (
    DistributionEntry,
    Series,
    SnapshotProjection,
    Timeline,
)

logger = logging.getLogger(__name__)


class SnapshotProjector:
    """Projects cost and market distributions for one timeline index."""

    def __init__(self, value_calc: HoldingValueCalculator | None = None) -> None:
        self._value_calc = value_calc or HoldingValueCalculator()

    def project(
            self,
            timeline: Timeline,
            index: int,
            holdings: Iterable[Holding],
            price_series_by_symbol: Mapping[str, Series],
            fx_series: Series,
    ) -> SnapshotProjection:
        """
        Build both distributions at timeline[index].

        Raises:
            InvalidSnapshotIndexError: If index is outside 0..len(timeline)-1
        """
        if index < 0 or index >= len(timeline):
            raise InvalidSnapshotIndexError(index, len(timeline))

        holdings = list(holdings)
        snapshot = timeline[index]

        cost = self._cost_distribution(holdings, price_series_by_symbol, fx_series)
        market = self._market_distribution(holdings, snapshot.per_holding)

        logger.debug(
            f"Projected snapshot {index} ({snapshot.date}): "
            f"{len(cost)} cost entries, {len(market)} market entries"
        )

        return SnapshotProjection(
            index=index,
            date=snapshot.date,
            cost_distribution=cost,
            market_distribution=market,
        )

    def _cost_distribution(
            self,
            holdings: list[Holding],
            price_series_by_symbol: Mapping[str, Series],
            fx_series: Series,
    ) -> list[DistributionEntry]:
        fx_index = SeriesIndex(fx_series)
        price_indexes: dict[str, SeriesIndex] = {}

        entries = []
        for holding in holdings:
            price_index = None
            if not holding.asset_class.is_cash and holding.symbol in price_series_by_symbol:
                if holding.symbol not in price_indexes:
                    price_indexes[holding.symbol] = SeriesIndex(
                        price_series_by_symbol[holding.symbol]
                    )
                price_index = price_indexes[holding.symbol]

            cost = self._value_calc.cost_basis(holding, price_index, fx_index)
            if cost.value > ZERO:
                entries.append(
                    DistributionEntry(
                        name=holding.display_name,
                        value=cost.value,
                        holding_id=holding.id,
                    )
                )
        return entries

    @staticmethod
    def _market_distribution(
            holdings: list[Holding],
            per_holding: Mapping[str, Decimal],
    ) -> list[DistributionEntry]:
        # Distinct symbols in first-seen order, each mapped to its display name
        names_by_symbol: dict[str, str] = {}
        for holding in holdings:
            names_by_symbol.setdefault(holding.symbol, holding.display_name)

        merged: dict[str, Decimal] = {}
        for symbol, name in names_by_symbol.items():
            merged[name] = merged.get(name, ZERO) + per_holding.get(symbol, ZERO)

        return [
            DistributionEntry(name=name, value=value)
            for name, value in merged.items()
            if value > ZERO
        ]


def project_snapshots(
        timeline: Timeline,
        index: int,
        holdings: Iterable[Holding],
        price_series_by_symbol: Mapping[str, Series],
        fx_series: Series,
) -> SnapshotProjection:
    """Project cost and market distributions with the default calculator."""
    return SnapshotProjector().project(
        timeline,
        index,
        holdings,
        price_series_by_symbol,
        fx_series,
    )
