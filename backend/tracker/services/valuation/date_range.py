# backend/tracker/services/valuation/date_range.py
"""
Date axis derivation for the valuation timeline.

The axis is the set of dates the timeline has a point for. It comes from
the price data itself (every date any consulted series has a close for),
plus an explicitly selected "as of" date. Portfolios without price data
(cash only) have no natural axis, so one is synthesized from the earliest
acquisition date through today by a pluggable fallback strategy.

Algorithm:
    1. Union of all price-series dates, plus as_of_date if given
    2. Empty? -> synthesize earliest acquisition .. today
    3. Drop dates before the earliest acquisition date
       Emptied? -> synthesize again
    4. Sort ascending
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping, Protocol

from tracker.models import Holding
from tracker.utils.date_utils import calendar_days, stepped_days

logger = logging.getLogger(__name__)


class DateFallbackStrategy(Protocol):
    """Produces a synthetic date axis when price data gives none."""

    def generate(self, start_date: date, end_date: date) -> list[date]:
        ...


class DailyFallback:
    """One date per calendar day."""

    def generate(self, start_date: date, end_date: date) -> list[date]:
        return calendar_days(start_date, end_date)


class WeeklyFallback:
    """Every seventh day from the start, always including the end date."""

    def generate(self, start_date: date, end_date: date) -> list[date]:
        return stepped_days(start_date, end_date, step_days=7)


def earliest_acquisition_date(holdings: Iterable[Holding]) -> date | None:
    """Earliest acquisition date among dated holdings (None if none are dated)."""
    dates = [h.acquisition_date for h in holdings if h.acquisition_date is not None]
    return min(dates) if dates else None


class DateRangeDeriver:
    """
    Derives the sorted, duplicate-free date axis for a timeline.

    Attributes:
        _fallback: Strategy used when no price dates survive
    """

    def __init__(self, fallback: DateFallbackStrategy | None = None) -> None:
        self._fallback = fallback or DailyFallback()

    def derive(
            self,
            holdings: Iterable[Holding],
            price_series: Iterable[Mapping[date, Decimal]],
            as_of_date: date | None = None,
            today: date | None = None,
    ) -> list[date]:
        """
        Compute the timeline's date axis.

        Args:
            holdings: Holding set (only acquisition dates are consulted)
            price_series: The price series in use
            as_of_date: Explicitly selected date to include on the axis
            today: End of any synthesized range (default: date.today())

        Returns:
            Sorted list of unique dates (empty if nothing can anchor the axis)
        """
        holdings = list(holdings)
        today = today or date.today()
        earliest = earliest_acquisition_date(holdings)

        axis: set[date] = set()
        for series in price_series:
            axis.update(series.keys())
        if as_of_date is not None:
            axis.add(as_of_date)

        if not axis:
            logger.debug("No price dates available; synthesizing date axis")
            return self._synthesize(earliest, today)

        if earliest is not None:
            axis = {d for d in axis if d >= earliest}
            if not axis:
                logger.debug(
                    f"All price dates precede earliest acquisition {earliest}; "
                    f"synthesizing date axis"
                )
                return self._synthesize(earliest, today)

        return sorted(axis)

    def _synthesize(self, earliest: date | None, today: date) -> list[date]:
        if earliest is None:
            return []
        return self._fallback.generate(earliest, today)
