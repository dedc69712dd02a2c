# backend/tracker/routers/portfolio.py
"""
Portfolio timeline endpoints.

The server never stores holdings: every request carries the full holding
set and gets back a freshly computed result.
- POST /portfolio/timeline        - Day-by-day valuation + distributions
- POST /portfolio/holdings/import - Normalize a holdings JSON file
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from tracker.config import settings
from tracker.dependencies import get_valuation_service
from tracker.middleware.rate_limit import limiter, RATE_LIMIT_TIMELINE
from tracker.schemas.holdings import HoldingsImportResponse
from tracker.schemas.portfolio import TimelineRequest, TimelineResponse
from tracker.services.holdings_import import import_holdings
from tracker.services.valuation import ValuationService

logger = logging.getLogger(__name__)

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/portfolio",
    tags=["Portfolio"],
)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post(
    "/timeline",
    response_model=TimelineResponse,
    summary="Value a holding set over time",
    response_description="Timeline with allocation percentages and distributions",
)
@limiter.limit(RATE_LIMIT_TIMELINE)
def build_timeline(
        request: Request,
        payload: TimelineRequest,
        service: ValuationService = Depends(get_valuation_service),
) -> TimelineResponse:
    """
    Build the valuation timeline for the submitted holdings.

    Returns:
    - **timeline**: One entry per date with per-symbol values and percentages
    - **snapshot**: Cost and market distributions at `index` (default: last date)
    - **warnings**: Series that could not be fetched (valued at 0)

    **Note:** Missing price or FX data never fails the request; affected
    holdings are valued at 0 and a warning is returned instead.
    """
    holdings = [h.to_domain() for h in payload.holdings]

    result = service.build(
        holdings,
        as_of_date=payload.as_of_date,
        snapshot_index=payload.index,
    )

    return TimelineResponse.from_result(
        result,
        reporting_currency=settings.reporting_currency,
    )


@router.post(
    "/holdings/import",
    response_model=HoldingsImportResponse,
    summary="Import holdings from JSON",
    response_description="Normalized holdings plus any skipped rows",
)
def import_holdings_file(
        payload: Any = Body(..., description="JSON array of holdings"),
) -> HoldingsImportResponse:
    """
    Normalize an exported holdings file.

    Each row may use either the short names (`ticker`, `type`, `amount`,
    `date`) or the API names (`symbol`, `asset_class`, `quantity`,
    `acquisition_date`). Bad rows are skipped and listed in `errors`;
    the request fails only when nothing is importable.
    """
    result = import_holdings(payload)
    return HoldingsImportResponse.from_result(result)
