# backend/tracker/schemas/holdings.py
"""
Pydantic schemas for holdings.

These schemas handle:
- Holdings sent along with valuation requests
- Holdings returned by the import endpoint
"""

import datetime as dt
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tracker.models import (
    MAX_QUANTITY,
    AssetClass,
    Holding,
    new_holding_id,
    resolve_asset_class,
)
from tracker.services.holdings_import import ImportResult


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class HoldingIn(BaseModel):
    """A holding as sent by the client."""

    id: str | None = Field(
        default=None,
        max_length=64,
        description="Opaque identifier (generated when omitted)"
    )
    asset_class: AssetClass = Field(
        default=AssetClass.EQUITY_US,
        description="equity_us, equity_tw, crypto, cash_usd or cash_twd"
    )
    symbol: str = Field(
        default="",
        max_length=20,
        description="Ticker (ignored for cash classes)"
    )
    quantity: Decimal = Field(
        ...,
        gt=0,
        le=MAX_QUANTITY,
        allow_inf_nan=False,
        description="Units held (shares, coins, or cash amount)"
    )
    acquisition_date: dt.date | None = Field(
        default=None,
        description="Date acquired (holding is valued at 0 while unset)"
    )

    @field_validator('asset_class', mode='before')
    @classmethod
    def resolve_legacy_asset_class(cls, v: Any) -> Any:
        if isinstance(v, str):
            try:
                return resolve_asset_class(v)
            except ValueError:
                return v  # Let enum validation report it
        return v

    @field_validator('symbol')
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode='after')
    def symbol_required_for_priced_assets(self) -> 'HoldingIn':
        if not self.asset_class.is_cash and not self.symbol:
            raise ValueError(f"symbol is required for {self.asset_class.value} holdings")
        return self

    def to_domain(self) -> Holding:
        return Holding(
            asset_class=self.asset_class,
            symbol=self.symbol,
            quantity=self.quantity,
            acquisition_date=self.acquisition_date,
            id=self.id or new_holding_id(),
        )


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class HoldingResponse(BaseModel):
    """A normalized holding."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    asset_class: AssetClass
    symbol: str
    display_name: str
    quantity: Decimal
    acquisition_date: dt.date | None


class ImportRowErrorResponse(BaseModel):
    """A row skipped during import."""

    model_config = ConfigDict(from_attributes=True)

    row_number: int = Field(..., description="1-based position in the array")
    error_type: str
    message: str
    field: str | None = None


class HoldingsImportResponse(BaseModel):
    """Result of importing a holdings file."""

    holdings: list[HoldingResponse]
    total_rows: int = Field(..., description="Rows in the payload")
    imported: int = Field(..., description="Rows turned into holdings")
    skipped: int = Field(..., description="Rows dropped")
    errors: list[ImportRowErrorResponse] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ImportResult) -> 'HoldingsImportResponse':
        return cls(
            holdings=[HoldingResponse.model_validate(h) for h in result.holdings],
            total_rows=result.total_rows,
            imported=result.imported_count,
            skipped=result.skipped_count,
            errors=[ImportRowErrorResponse.model_validate(e) for e in result.errors],
        )
