# backend/tracker/services/valuation/history_calculator.py
"""
Timeline calculator for day-by-day portfolio valuation.

This calculator turns a holding set, per-symbol price series and the
USD→TWD series into a Timeline:
1. Derive the date axis (DateRangeDeriver)
2. Index every series once for O(log n) last-known-value lookups
3. For each date, value each holding and aggregate per symbol
4. Annotate each day with allocation percentages

Design Principles:
- Pure: identical inputs give identical output, no hidden state
- Missing data is valued at zero, never raised
- Totals are exact Decimal sums of the per-symbol values
- Reuses HoldingValueCalculator so cost basis and timeline agree
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping

from tracker.models import Holding
from tracker.services.constants import PERCENT_SCALE, ZERO
from tracker.services.valuation.calculators import HoldingValueCalculator
from tracker.services.valuation.date_range import DateRangeDeriver
from tracker.services.valuation.lookups import SeriesIndex
from tracker.services.valuation.types import DaySnapshot, Series, Timeline

logger = logging.getLogger(__name__)


class TimelineCalculator:
    """
    Calculates the valuation timeline.

    Attributes:
        _value_calc: Per-holding valuation rules
        _date_deriver: Date axis derivation (with its fallback strategy)
    """

    def __init__(
            self,
            value_calc: HoldingValueCalculator | None = None,
            date_deriver: DateRangeDeriver | None = None,
    ) -> None:
        self._value_calc = value_calc or HoldingValueCalculator()
        self._date_deriver = date_deriver or DateRangeDeriver()

    @property
    def value_calculator(self) -> HoldingValueCalculator:
        return self._value_calc

    def calculate(
            self,
            holdings: Iterable[Holding],
            price_series_by_symbol: Mapping[str, Series],
            fx_series: Series,
            as_of_date: date | None = None,
            today: date | None = None,
    ) -> Timeline:
        """
        Build the timeline.

        Args:
            holdings: Holding set
            price_series_by_symbol: symbol -> native price series
            fx_series: USD→TWD series
            as_of_date: Selected date to force onto the axis
            today: End of any synthesized axis (default: date.today())

        Returns:
            Timeline (empty if no date can anchor the axis)
        """
        holdings = list(holdings)
        if not holdings:
            return Timeline()

        consulted = {
            h.symbol: price_series_by_symbol[h.symbol]
            for h in holdings
            if not h.asset_class.is_cash and h.symbol in price_series_by_symbol
        }
        axis = self._date_deriver.derive(
            holdings,
            consulted.values(),
            as_of_date=as_of_date,
            today=today,
        )

        price_indexes = {symbol: SeriesIndex(series) for symbol, series in consulted.items()}
        fx_index = SeriesIndex(fx_series)

        snapshots = tuple(
            self._snapshot(day, holdings, price_indexes, fx_index)
            for day in axis
        )

        logger.debug(
            f"Calculated timeline: {len(snapshots)} days, {len(holdings)} holdings"
        )
        return Timeline(snapshots=snapshots)

    def _snapshot(
            self,
            day: date,
            holdings: list[Holding],
            price_indexes: dict[str, SeriesIndex],
            fx_index: SeriesIndex,
    ) -> DaySnapshot:
        """Value every holding on one day and aggregate by symbol."""
        per_holding: dict[str, Decimal] = {}

        for holding in holdings:
            result = self._value_calc.value_on(
                holding,
                day,
                price_indexes.get(holding.symbol),
                fx_index,
            )
            per_holding[holding.symbol] = per_holding.get(holding.symbol, ZERO) + result.value

        total_value = sum(per_holding.values(), ZERO)

        return DaySnapshot(
            date=day,
            per_holding=per_holding,
            per_holding_percent=allocation_percentages(per_holding, total_value),
            total_value=total_value,
        )


def allocation_percentages(
        values: Mapping[str, Decimal],
        total_value: Decimal,
) -> dict[str, Decimal]:
    """
    Each value's share of total_value, out of 100.

    All shares are 0 when the total is not positive.
    """
    if total_value <= ZERO:
        return {key: ZERO for key in values}
    return {key: value / total_value * PERCENT_SCALE for key, value in values.items()}


def compute_timeline(
        holdings: Iterable[Holding],
        price_series_by_symbol: Mapping[str, Series],
        fx_series: Series,
        as_of_date: date | None = None,
        today: date | None = None,
) -> Timeline:
    """
    Build a timeline with the default calculators.

    Example:
        timeline = compute_timeline(
            [Holding(AssetClass.EQUITY_US, "TSLA", Decimal("10"), date(2024, 1, 2))],
            {"TSLA": {date(2024, 1, 2): Decimal("100")}},
            {date(2024, 1, 2): Decimal("31.5")},
        )
        timeline[0].total_value  # Decimal("31500.0")
    """
    return TimelineCalculator().calculate(
        holdings,
        price_series_by_symbol,
        fx_series,
        as_of_date=as_of_date,
        today=today,
    )
