# backend/tracker/services/valuation/__init__.py
"""
Valuation Service Package.

This package turns holdings, price series and the USD→TWD series into a
day-by-day valuation timeline plus point-in-time cost/market views.

Usage:
    from tracker.services.valuation import compute_timeline, project_snapshots

    timeline = compute_timeline(holdings, prices_by_symbol, fx_series)
    projection = project_snapshots(timeline, len(timeline) - 1, holdings,
                                   prices_by_symbol, fx_series)

    # Or, with fetching included
    from tracker.services.valuation import ValuationService
    result = ValuationService(feed).build(holdings)

Architecture:
    valuation/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Internal data classes
    ├── lookups.py               # Last-known-value lookups
    ├── date_range.py            # Date axis derivation + fallback strategies
    ├── calculators.py           # Per-holding, per-date valuation
    ├── history_calculator.py    # Timeline calculator
    ├── snapshot.py              # Cost/market distributions
    └── service.py               # ValuationService (orchestrator)

Data Flow:
    Holdings + PriceSeries → DateRangeDeriver → date axis
    Axis + Holdings + PriceSeries + FxSeries → TimelineCalculator → Timeline
    Timeline[I] + Holdings → SnapshotProjector → SnapshotProjection
"""

from tracker.services.valuation.calculators import HoldingValueCalculator
from tracker.services.valuation.date_range import (
    DailyFallback,
    DateFallbackStrategy,
    DateRangeDeriver,
    WeeklyFallback,
)
from tracker.services.valuation.history_calculator import (
    TimelineCalculator,
    allocation_percentages,
    compute_timeline,
)
from tracker.services.valuation.lookups import SeriesIndex, value_at_or_before
# Main service
from tracker.services.valuation.service import ValuationService
from tracker.services.valuation.snapshot import SnapshotProjector, project_snapshots
# Internal types (for advanced usage / testing)
from tracker.services.valuation.types import (
    DaySnapshot,
    DistributionEntry,
    HoldingValue,
    PortfolioTimeline,
    Series,
    SeriesLookup,
    SnapshotProjection,
    Timeline,
)

__all__ = [
    # Service
    "ValuationService",
    # Engine
    "compute_timeline",
    "project_snapshots",
    "allocation_percentages",
    "TimelineCalculator",
    "SnapshotProjector",
    "HoldingValueCalculator",
    # Date axis
    "DateRangeDeriver",
    "DateFallbackStrategy",
    "DailyFallback",
    "WeeklyFallback",
    # Lookups
    "SeriesIndex",
    "value_at_or_before",
    # Types
    "Series",
    "SeriesLookup",
    "HoldingValue",
    "DaySnapshot",
    "Timeline",
    "DistributionEntry",
    "SnapshotProjection",
    "PortfolioTimeline",
]
