# backend/tracker/routers/market_data.py
"""
Raw market data endpoints.

Thin pass-throughs to the market data feed for clients that want the
series themselves (charts, debugging):
- GET /market-data/historical - Daily closes for one symbol
- GET /market-data/fx-rates   - USD→TWD rates for a date range

Unlike the valuation path, failures here are NOT converted to empty
results: unknown tickers are 404 and provider outages 503, via the global
exception handlers.
"""

import datetime as dt
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, Request

from tracker.dependencies import get_market_data_feed
from tracker.middleware.rate_limit import limiter, RATE_LIMIT_MARKET_DATA
from tracker.models import resolve_asset_class
from tracker.schemas.market_data import FXRatesResponse
from tracker.services.exceptions import UnsupportedAssetClassError, ValidationError
from tracker.services.market_data import MarketDataFeed

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/market-data",
    tags=["Market Data"],
)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/historical",
    response_model=dict[dt.date, Decimal],
    summary="Get daily closes for a symbol",
    response_description="Date -> close in the asset's native currency",
)
@limiter.limit(RATE_LIMIT_MARKET_DATA)
def get_historical_prices(
        request: Request,
        ticker: str | None = Query(default=None, max_length=20, description="Symbol, e.g. TSLA, 2330, BTC"),
        asset_type: str | None = Query(
            default=None,
            alias="type",
            description="equity_us, equity_tw or crypto (legacy: us_stock, stock, tw_stock)",
        ),
        feed: MarketDataFeed = Depends(get_market_data_feed),
) -> dict[dt.date, Decimal]:
    """
    Get roughly one year of daily closes.

    Taiwanese symbols are tried on the listed board first (.TW) and then
    on the OTC board (.TWO). Crypto is quoted in USD.
    """
    if not ticker or not asset_type:
        raise ValidationError("Ticker and type are required", field="ticker" if not ticker else "type")

    try:
        asset_class = resolve_asset_class(asset_type)
    except ValueError:
        raise UnsupportedAssetClassError(asset_type)

    if asset_class.is_cash:
        raise UnsupportedAssetClassError(asset_type)

    return feed.fetch_price_series(ticker, asset_class)


@router.get(
    "/fx-rates",
    response_model=FXRatesResponse,
    summary="Get USD→TWD rates",
    response_description="Rates keyed by date",
)
@limiter.limit(RATE_LIMIT_MARKET_DATA)
def get_fx_rates(
        request: Request,
        start: dt.date | None = Query(default=None, description="First date (inclusive)"),
        end: dt.date | None = Query(default=None, description="Last date (inclusive, clamped to today)"),
        base: str = Query(default="USD", alias="from", description="Base currency"),
        quote: str = Query(default="TWD", alias="to", description="Quote currency"),
        feed: MarketDataFeed = Depends(get_market_data_feed),
) -> FXRatesResponse:
    """
    Get USD→TWD rates for a range.

    The response may start up to 30 days before `start` so the first days
    of the range can resolve to an earlier rate. When that window is
    empty, the closest earlier rate is returned keyed at `start`.
    """
    if start is None or end is None:
        raise ValidationError("Start and end dates are required", field="start" if start is None else "end")

    series = feed.fetch_fx_series(start, end, base_currency=base, quote_currency=quote)
    return FXRatesResponse.from_series(series, base=base.upper(), quote=quote.upper())
