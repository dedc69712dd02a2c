# backend/tracker/services/constants.py
"""
Centralized constants for the Portfolio Time Machine services.

Usage:
    from tracker.services.constants import PERCENT_SCALE, FX_SYMBOL
"""

from decimal import Decimal


# =============================================================================
# VALUATION
# =============================================================================

ZERO: Decimal = Decimal("0")

# Allocation percentages are expressed out of 100
PERCENT_SCALE: Decimal = Decimal("100")

# Tolerance used when asserting that day percentages sum to 100
PERCENT_SUM_TOLERANCE: Decimal = Decimal("0.000001")


# =============================================================================
# MARKET DATA
# =============================================================================

# Yahoo Finance symbol for the USD→TWD rate
FX_SYMBOL: str = "TWD=X"

# Only supported FX pair
FX_BASE_CURRENCY: str = "USD"
FX_QUOTE_CURRENCY: str = "TWD"

# Yahoo suffixes for Taiwanese listings, tried in order (TWSE, then TPEx)
TW_LISTED_SUFFIX: str = ".TW"
TW_OTC_SUFFIX: str = ".TWO"

# Quote currency appended to crypto symbols on Yahoo (e.g. BTC-USD)
CRYPTO_QUOTE_SUFFIX: str = "-USD"


# =============================================================================
# RATE LIMITS (slowapi format: "count/period")
# =============================================================================

# Applied to every endpoint without an explicit limit
RATE_LIMIT_DEFAULT: str = "100/minute"

# Endpoints that hit the upstream market data provider directly
RATE_LIMIT_MARKET_DATA: str = "30/minute"

# Timeline builds fan out into one upstream request per distinct asset
RATE_LIMIT_TIMELINE: str = "20/minute"

# Liveness probes
RATE_LIMIT_HEALTH: str = "300/minute"
