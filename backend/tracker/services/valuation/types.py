# backend/tracker/services/valuation/types.py
"""
Internal data types for the valuation engine.

These dataclasses are used internally by the engine and service.
They are NOT Pydantic schemas - those are defined in tracker/schemas/portfolio.py
for API serialization.

Design Principles:
- Immutable where possible (frozen=True for value objects)
- Use Decimal for ALL financial values (never float)
- Use date (not datetime) for valuation dates
- Missing data is valued at zero, never None

Type Hierarchy:
    SeriesLookup        - Result of a last-known-value lookup
    HoldingValue        - One holding valued on one date
    DaySnapshot         - Portfolio valuation for one date
    Timeline            - Ordered DaySnapshots
    DistributionEntry   - One slice of a cost or market distribution
    SnapshotProjection  - Cost and market distributions at one index
    PortfolioTimeline   - Service-level result (timeline + projection + warnings)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterator

# date -> native price, or date -> USD/TWD rate
Series = dict[date, Decimal]


@dataclass(frozen=True)
class SeriesLookup:
    """
    A value found by a last-known-value lookup.

    Attributes:
        value: The series value
        used_date: The date the value was recorded on (<= the queried date)
    """

    value: Decimal
    used_date: date


@dataclass(frozen=True)
class HoldingValue:
    """
    One holding valued on one date, in TWD.

    Attributes:
        value: Value in TWD (zero when not held or data is missing)
        price: Native price used (None for cash or when no price exists)
        price_date: Date of the price used (None for cash or when no price exists)
        fx_rate: USD→TWD rate applied (None when no conversion happened)
    """

    value: Decimal
    price: Decimal | None = None
    price_date: date | None = None
    fx_rate: Decimal | None = None


@dataclass(frozen=True)
class DaySnapshot:
    """
    Portfolio valuation for a single calendar date.

    Attributes:
        date: The valuation date
        per_holding: symbol -> TWD value (holdings sharing a symbol are summed)
        per_holding_percent: symbol -> share of total_value, out of 100
        total_value: Sum of per_holding values (exact)
    """

    date: date
    per_holding: dict[str, Decimal]
    per_holding_percent: dict[str, Decimal]
    total_value: Decimal


@dataclass(frozen=True)
class Timeline:
    """
    Ordered, duplicate-free sequence of DaySnapshots.

    Supports len(), iteration, indexing and lookup by date.
    """

    snapshots: tuple[DaySnapshot, ...] = ()

    def __len__(self) -> int:
        return len(self.snapshots)

    def __iter__(self) -> Iterator[DaySnapshot]:
        return iter(self.snapshots)

    def __getitem__(self, index: int) -> DaySnapshot:
        return self.snapshots[index]

    @property
    def dates(self) -> list[date]:
        return [s.date for s in self.snapshots]

    def on(self, d: date) -> DaySnapshot | None:
        """Snapshot for a date, or None if the date is not on the axis."""
        for snapshot in self.snapshots:
            if snapshot.date == d:
                return snapshot
        return None

    @property
    def is_empty(self) -> bool:
        return not self.snapshots


@dataclass(frozen=True)
class DistributionEntry:
    """
    One slice of a cost or market distribution.

    Attributes:
        name: Display name (symbol, or fixed cash label)
        value: TWD value (always > 0 once projected)
        holding_id: Source holding (cost view only; None in the market view)
    """

    name: str
    value: Decimal
    holding_id: str | None = None


@dataclass(frozen=True)
class SnapshotProjection:
    """
    Point-in-time views of the portfolio at one timeline index.

    Attributes:
        index: Timeline index the market view was taken at
        date: Date at that index
        cost_distribution: One entry per holding, valued at acquisition
        market_distribution: One entry per display name, valued at `date`

    Note:
        The cost view never merges holdings; the market view merges every
        holding that resolves to the same display name.
    """

    index: int
    date: date
    cost_distribution: list[DistributionEntry]
    market_distribution: list[DistributionEntry]

    @property
    def total_cost(self) -> Decimal:
        return sum((e.value for e in self.cost_distribution), Decimal("0"))

    @property
    def total_market(self) -> Decimal:
        return sum((e.value for e in self.market_distribution), Decimal("0"))


@dataclass
class PortfolioTimeline:
    """
    Full result of a valuation request.

    Attributes:
        timeline: Day-by-day valuation
        projection: Distributions at the selected index (None if timeline empty)
        price_series: Series used, keyed by symbol
        fx_series: USD→TWD series used
        warnings: Data problems encountered (failed fetches, etc.)
    """

    timeline: Timeline
    projection: SnapshotProjection | None
    price_series: dict[str, Series] = field(default_factory=dict)
    fx_series: Series = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def current_value(self) -> Decimal:
        """Total value at the projected index (0 if nothing to project)."""
        if self.projection is None:
            return Decimal("0")
        return self.timeline[self.projection.index].total_value
