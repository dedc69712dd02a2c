# backend/tracker/schemas/market_data.py
"""
Pydantic schemas for raw market data responses.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field


class FXRatesResponse(BaseModel):
    """USD→TWD rates keyed by date."""

    base: str = Field(default="USD", description="Base currency")
    rates: dict[dt.date, dict[str, Decimal]] = Field(
        default_factory=dict,
        description="Date -> {quote currency: rate}"
    )

    @classmethod
    def from_series(
            cls,
            series: dict[dt.date, Decimal],
            base: str,
            quote: str,
    ) -> 'FXRatesResponse':
        return cls(
            base=base,
            rates={d: {quote: rate} for d, rate in sorted(series.items())},
        )
