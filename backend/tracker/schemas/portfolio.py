# backend/tracker/schemas/portfolio.py
"""
Pydantic schemas for the portfolio timeline.

These schemas handle:
- Timeline requests (holdings + selected date/index)
- Day-by-day valuation with allocation percentages
- Cost and market distributions at the selected index

All monetary values are in the reporting currency (TWD).
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tracker.schemas.holdings import HoldingIn
from tracker.services.valuation.types import PortfolioTimeline, SnapshotProjection


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class TimelineRequest(BaseModel):
    """Holdings to value, plus an optional selected date and index."""

    holdings: list[HoldingIn] = Field(
        default_factory=list,
        description="Holding set (owned by the client, never stored)"
    )
    as_of_date: dt.date | None = Field(
        default=None,
        description="Date to force onto the timeline axis"
    )
    index: int | None = Field(
        default=None,
        description="Timeline index to project distributions at (default: last)"
    )

    @field_validator('holdings')
    @classmethod
    def unique_holding_ids(cls, v: list[HoldingIn]) -> list[HoldingIn]:
        seen: set[str] = set()
        for holding in v:
            if holding.id is None:
                continue
            if holding.id in seen:
                raise ValueError(f"duplicate holding id '{holding.id}'")
            seen.add(holding.id)
        return v


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class DaySnapshotResponse(BaseModel):
    """Portfolio valuation for one date."""

    model_config = ConfigDict(from_attributes=True)

    date: dt.date
    total_value: Decimal
    per_holding: dict[str, Decimal] = Field(
        ...,
        description="Symbol -> value (holdings sharing a symbol are summed)"
    )
    per_holding_percent: dict[str, Decimal] = Field(
        ...,
        description="Symbol -> share of total_value, out of 100"
    )


class DistributionEntryResponse(BaseModel):
    """One slice of a distribution."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    value: Decimal
    holding_id: str | None = None


class SnapshotResponse(BaseModel):
    """Cost and market distributions at one timeline index."""

    index: int
    date: dt.date
    cost_distribution: list[DistributionEntryResponse] = Field(
        ...,
        description="One entry per holding, valued at acquisition"
    )
    market_distribution: list[DistributionEntryResponse] = Field(
        ...,
        description="One entry per display name, valued at `date`"
    )
    total_cost: Decimal
    total_market: Decimal

    @classmethod
    def from_projection(cls, projection: SnapshotProjection) -> 'SnapshotResponse':
        return cls(
            index=projection.index,
            date=projection.date,
            cost_distribution=[
                DistributionEntryResponse.model_validate(e)
                for e in projection.cost_distribution
            ],
            market_distribution=[
                DistributionEntryResponse.model_validate(e)
                for e in projection.market_distribution
            ],
            total_cost=projection.total_cost,
            total_market=projection.total_market,
        )


class TimelineResponse(BaseModel):
    """Full valuation result."""

    reporting_currency: str = "TWD"
    timeline: list[DaySnapshotResponse]
    snapshot: SnapshotResponse | None = Field(
        default=None,
        description="Distributions at the selected index (null for an empty timeline)"
    )
    current_value: Decimal = Field(
        ...,
        description="Total value at the selected index"
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Data problems encountered (failed fetches, etc.)"
    )

    @classmethod
    def from_result(
            cls,
            result: PortfolioTimeline,
            reporting_currency: str = "TWD",
    ) -> 'TimelineResponse':
        return cls(
            reporting_currency=reporting_currency,
            timeline=[DaySnapshotResponse.model_validate(s) for s in result.timeline],
            snapshot=(
                SnapshotResponse.from_projection(result.projection)
                if result.projection is not None
                else None
            ),
            current_value=result.current_value,
            warnings=list(result.warnings),
        )
