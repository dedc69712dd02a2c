# backend/tracker/models.py
"""
Domain models for the Portfolio Time Machine.

Holdings are plain value objects: the server never stores them. A caller
(browser, script, test) owns the holding set and sends it along with
every request that needs a valuation.

Models:
- AssetClass: What kind of asset a holding is and which currency it is priced in
- Holding: One user-recorded quantity of one asset acquired on one date
"""

import enum
import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


class Currency(str, enum.Enum):
    USD = "USD"
    TWD = "TWD"


class AssetClass(str, enum.Enum):
    EQUITY_US = "equity_us"
    EQUITY_TW = "equity_tw"
    CRYPTO = "crypto"
    CASH_USD = "cash_usd"
    CASH_TWD = "cash_twd"

    @property
    def is_cash(self) -> bool:
        return self in (AssetClass.CASH_USD, AssetClass.CASH_TWD)

    @property
    def native_currency(self) -> Currency:
        """Currency prices (or cash amounts) of this class are quoted in."""
        if self in (AssetClass.EQUITY_TW, AssetClass.CASH_TWD):
            return Currency.TWD
        return Currency.USD

    @property
    def is_usd_denominated(self) -> bool:
        return self.native_currency == Currency.USD


# Synthetic symbols for cash holdings (cash has no ticker)
CASH_SYMBOLS: dict[AssetClass, str] = {
    AssetClass.CASH_USD: "CASH_USD",
    AssetClass.CASH_TWD: "CASH_TWD",
}

# Fixed labels used in place of a symbol when cash is displayed
CASH_DISPLAY_NAMES: dict[AssetClass, str] = {
    AssetClass.CASH_USD: "Cash (USD)",
    AssetClass.CASH_TWD: "Cash (TWD)",
}

# Type names accepted on import in addition to the enum values
ASSET_CLASS_ALIASES: dict[str, AssetClass] = {
    "stock": AssetClass.EQUITY_US,
    "us_stock": AssetClass.EQUITY_US,
    "tw_stock": AssetClass.EQUITY_TW,
}

# Largest quantity a holding may carry; keeps every TWD product within Decimal range
MAX_QUANTITY = Decimal("1e15")


def resolve_asset_class(value: str | AssetClass) -> AssetClass:
    """
    Resolve an asset class from its enum value or a legacy alias.

    Raises:
        ValueError: If the value names no known asset class
    """
    if isinstance(value, AssetClass):
        return value
    normalized = value.strip().lower()
    if normalized in ASSET_CLASS_ALIASES:
        return ASSET_CLASS_ALIASES[normalized]
    return AssetClass(normalized)


def new_holding_id() -> str:
    """Generate a short opaque holding identifier."""
    return uuid.uuid4().hex[:9]


@dataclass(frozen=True)
class Holding:
    """
    A quantity of one asset acquired on one date.

    Attributes:
        asset_class: Kind of asset (decides pricing and currency)
        symbol: Ticker (e.g. "TSLA", "2330", "BTC"); synthetic for cash
        quantity: Units held (shares, coins, or cash amount); 0 < quantity <= MAX_QUANTITY
        acquisition_date: Date acquired, or None while unset
        id: Opaque unique identifier

    Note:
        A holding with acquisition_date=None is valued at zero everywhere
        until a date is assigned.
    """

    asset_class: AssetClass
    symbol: str
    quantity: Decimal
    acquisition_date: date | None = None
    id: str = field(default_factory=new_holding_id)

    def __post_init__(self) -> None:
        if self.quantity <= Decimal("0"):
            raise ValueError(f"quantity must be positive, got {self.quantity}")
        if self.quantity > MAX_QUANTITY:
            raise ValueError(f"quantity must not exceed {MAX_QUANTITY}, got {self.quantity}")
        if self.asset_class.is_cash:
            # Cash symbols are fixed per class regardless of input
            object.__setattr__(self, "symbol", CASH_SYMBOLS[self.asset_class])
        elif not self.symbol:
            raise ValueError("symbol is required")

    @property
    def display_name(self) -> str:
        """Label used to group holdings in distributions."""
        if self.asset_class.is_cash:
            return CASH_DISPLAY_NAMES[self.asset_class]
        return self.symbol

    def is_held_on(self, d: date) -> bool:
        """True once the holding has been acquired (never when undated)."""
        return self.acquisition_date is not None and d >= self.acquisition_date
