# backend/tracker/services/valuation/lookups.py
"""
Last-known-value lookups over sparse date series.

Price and FX series have gaps (weekends, holidays, data that starts late).
Every lookup answers "what was the most recent value on or before this
date, and which date was it recorded on?". The recorded date matters:
USD-priced assets must be converted with the FX rate of the *price date*,
not of the valuation date.

Usage:
    index = SeriesIndex(price_series)
    lookup = index.at_or_before(date(2024, 1, 7))
    if lookup is not None:
        lookup.value, lookup.used_date
"""

from __future__ import annotations

from bisect import bisect_right
from datetime import date
from decimal import Decimal
from typing import Mapping

from tracker.services.valuation.types import SeriesLookup


class SeriesIndex:
    """
    Sorted view over a date-keyed series for O(log n) lookups.

    The wrapped mapping is never modified.
    """

    def __init__(self, series: Mapping[date, Decimal] | None) -> None:
        self._series = series or {}
        self._dates = sorted(self._series)

    def __len__(self) -> int:
        return len(self._dates)

    @property
    def dates(self) -> list[date]:
        return list(self._dates)

    def at_or_before(self, target: date) -> SeriesLookup | None:
        """
        Find the latest entry dated on or before target.

        Returns:
            SeriesLookup, or None if the series has nothing that early
        """
        pos = bisect_right(self._dates, target)
        if pos == 0:
            return None
        used_date = self._dates[pos - 1]
        return SeriesLookup(value=self._series[used_date], used_date=used_date)


def value_at_or_before(
        series: Mapping[date, Decimal] | None,
        target: date,
) -> SeriesLookup | None:
    """One-off lookup; build a SeriesIndex instead when querying repeatedly."""
    return SeriesIndex(series).at_or_before(target)
