# backend/tracker/services/holdings_import.py
"""
Holdings import: raw JSON rows to Holding objects.

A holdings file is a JSON array of objects. Both the short field names
used by exported files and the API field names are accepted:

    ticker | symbol            -> symbol (upper-cased, required for non-cash)
    type   | asset_class       -> asset class (default: equity_us; legacy
                                  names us_stock/stock/tw_stock accepted)
    amount | quantity          -> quantity (finite, > 0, at most MAX_QUANTITY)
    date   | acquisition_date  -> acquisition date (ISO date or timestamp, optional)
    id                         -> kept if present, generated otherwise; a
                                  repeated id skips the later row

Rows that cannot become a Holding are skipped and reported; the import as
a whole fails only when the payload is not an array or nothing survives.

Design Principles:
- Single Responsibility: only normalizes, never values or stores
- Partial success: one bad row never sinks the rest
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from tracker.models import (
    MAX_QUANTITY,
    AssetClass,
    Holding,
    new_holding_id,
    resolve_asset_class,
)
from tracker.services.exceptions import HoldingsImportError

logger = logging.getLogger(__name__)

DEFAULT_ASSET_CLASS = AssetClass.EQUITY_US


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class ImportRowError:
    """
    A row that was skipped during import.

    Attributes:
        row_number: 1-based position in the array
        error_type: Category (e.g. "missing_field", "invalid_amount")
        message: Human-readable description
        field: Offending field, when there is one
    """

    row_number: int
    error_type: str
    message: str
    field: str | None = None


@dataclass
class ImportResult:
    """
    Outcome of an import.

    Attributes:
        holdings: Normalized holdings, in input order
        errors: Rows that were skipped
        total_rows: Number of rows in the payload
    """

    holdings: list[Holding] = field(default_factory=list)
    errors: list[ImportRowError] = field(default_factory=list)
    total_rows: int = 0

    @property
    def imported_count(self) -> int:
        return len(self.holdings)

    @property
    def skipped_count(self) -> int:
        return len(self.errors)


class _SkipRow(Exception):
    """Internal signal: the current row cannot be imported."""

    def __init__(self, error_type: str, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.message = message
        self.field = field


# =============================================================================
# IMPORT
# =============================================================================

def import_holdings(payload: Any) -> ImportResult:
    """
    Normalize a decoded JSON payload into holdings.

    Args:
        payload: Decoded JSON (must be a list)

    Returns:
        ImportResult with at least one holding

    Raises:
        HoldingsImportError: If payload is not a list or no row is importable
    """
    if not isinstance(payload, list):
        raise HoldingsImportError("Holdings file must contain a JSON array")

    result = ImportResult(total_rows=len(payload))
    seen_ids: set[str] = set()

    for row_number, row in enumerate(payload, start=1):
        try:
            holding = _parse_row(row)
            if holding.id in seen_ids:
                raise _SkipRow(
                    "duplicate_id", f"Holding id '{holding.id}' already imported", field="id"
                )
            seen_ids.add(holding.id)
            result.holdings.append(holding)
        except _SkipRow as skip:
            logger.debug(f"Skipping holdings row {row_number}: {skip.message}")
            result.errors.append(
                ImportRowError(
                    row_number=row_number,
                    error_type=skip.error_type,
                    message=skip.message,
                    field=skip.field,
                )
            )

    if not result.holdings:
        raise HoldingsImportError(
            f"No importable holdings found ({result.total_rows} rows, all skipped)"
        )

    logger.info(
        f"Imported {result.imported_count} holdings, skipped {result.skipped_count}"
    )
    return result


def _parse_row(row: Any) -> Holding:
    if not isinstance(row, dict):
        raise _SkipRow("invalid_row", "Row is not an object")

    asset_class = _parse_asset_class(_first(row, "type", "asset_class"))
    symbol = str(_first(row, "ticker", "symbol") or "").strip().upper()
    if not symbol and not asset_class.is_cash:
        raise _SkipRow("missing_field", "Ticker is required", field="ticker")

    quantity = _parse_amount(_first(row, "amount", "quantity"))
    acquisition_date = _parse_date(_first(row, "date", "acquisition_date"))

    holding_id = row.get("id")
    holding_id = str(holding_id) if holding_id not in (None, "") else new_holding_id()

    return Holding(
        asset_class=asset_class,
        symbol=symbol,
        quantity=quantity,
        acquisition_date=acquisition_date,
        id=holding_id,
    )


def _first(row: dict, *keys: str) -> Any:
    """Value of the first key present with a non-None value."""
    for key in keys:
        if row.get(key) is not None:
            return row[key]
    return None


def _parse_asset_class(value: Any) -> AssetClass:
    if value is None or value == "":
        return DEFAULT_ASSET_CLASS
    try:
        return resolve_asset_class(str(value))
    except ValueError:
        raise _SkipRow("invalid_type", f"Unknown asset type '{value}'", field="type")


def _parse_amount(value: Any) -> Decimal:
    # bool is an int subclass; true/false is never an amount
    if value is None or isinstance(value, bool):
        raise _SkipRow("invalid_amount", "Amount is required", field="amount")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise _SkipRow("invalid_amount", f"Amount '{value}' is not a number", field="amount")
    if not amount.is_finite() or amount <= 0:
        raise _SkipRow("invalid_amount", f"Amount must be positive, got '{value}'", field="amount")
    if amount > MAX_QUANTITY:
        raise _SkipRow(
            "invalid_amount", f"Amount must not exceed {MAX_QUANTITY}, got '{value}'", field="amount"
        )
    return amount


def _parse_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    # Timestamps keep their date part
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise _SkipRow("invalid_date", f"Date '{value}' is not an ISO date", field="date")
