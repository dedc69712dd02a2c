# backend/tests/routers/test_market_data_api.py
"""
Integration tests for the raw market data endpoints.

These tests verify:
- GET /market-data/historical returns closes and maps provider errors
- GET /market-data/fx-rates returns rates and rejects bad requests
- Missing parameters are a 400, malformed ones a 422
- Consistent ErrorDetail shape and correlation ID headers
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from tracker.dependencies import get_market_data_feed
from tracker.main import app
from tracker.models import AssetClass
from tracker.services.exceptions import (
    FXProviderError,
    ProviderUnavailableError,
    RateLimitError,
)


@pytest.fixture
def client(feed):
    """TestClient with the feed wired to the mock provider."""
    app.dependency_overrides[get_market_data_feed] = lambda: feed

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def recent_day():
    """A date inside the price lookback window for the real today."""
    return date.today() - timedelta(days=3)


# =============================================================================
# HISTORICAL PRICES
# =============================================================================

class TestHistorical:
    """Tests for GET /market-data/historical."""

    def test_prices(self, client, mock_provider, recent_day):
        """Closes are keyed by ISO date."""
        mock_provider.set_prices("TSLA", AssetClass.EQUITY_US, {recent_day: Decimal("250.5")})

        response = client.get("/market-data/historical", params={"ticker": "tsla", "type": "equity_us"})

        assert response.status_code == 200
        body = response.json()
        assert list(body) == [recent_day.isoformat()]
        assert Decimal(body[recent_day.isoformat()]) == Decimal("250.5")

    def test_legacy_type(self, client, mock_provider, recent_day):
        """Legacy type names are accepted."""
        mock_provider.set_prices("2330", AssetClass.EQUITY_TW, {recent_day: Decimal("600")})

        response = client.get("/market-data/historical", params={"ticker": "2330", "type": "tw_stock"})

        assert response.status_code == 200
        assert mock_provider.price_calls[0][1] == AssetClass.EQUITY_TW

    @pytest.mark.parametrize("params,field", [
        ({"type": "equity_us"}, "ticker"),
        ({"ticker": "TSLA"}, "type"),
        ({}, "ticker"),
    ])
    def test_missing_params(self, client, params, field):
        """Missing ticker or type is a 400."""
        response = client.get("/market-data/historical", params=params)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "ValidationError"
        assert body["message"] == "Ticker and type are required"
        assert body["details"] == {"field": field}

    @pytest.mark.parametrize("asset_type", ["bonds", "cash_twd", "cash_usd"])
    def test_unsupported_type(self, client, asset_type):
        """Unknown and cash types are a 400."""
        response = client.get("/market-data/historical", params={"ticker": "X", "type": asset_type})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "UnsupportedAssetClassError"
        assert body["details"]["asset_class"] == asset_type

    def test_unknown_ticker(self, client):
        """A symbol without data is a 404."""
        response = client.get("/market-data/historical", params={"ticker": "ZZZZ", "type": "equity_us"})

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "TickerNotFoundError"
        assert body["details"] == {"ticker": "ZZZZ", "asset_class": "equity_us"}

    def test_provider_unavailable(self, client, mock_provider):
        """Upstream outage is a 503."""
        mock_provider.add_error("TSLA", ProviderUnavailableError("mock", "timeout"))

        response = client.get("/market-data/historical", params={"ticker": "TSLA", "type": "equity_us"})

        assert response.status_code == 503
        assert response.json()["error"] == "ProviderUnavailableError"

    def test_upstream_rate_limit(self, client, mock_provider):
        """Upstream rate limiting is a 429."""
        mock_provider.add_error("TSLA", RateLimitError("mock", retry_after=30))

        response = client.get("/market-data/historical", params={"ticker": "TSLA", "type": "equity_us"})

        assert response.status_code == 429
        assert response.json()["details"] == {"retry_after": 30}


# =============================================================================
# FX RATES
# =============================================================================

class TestFxRates:
    """Tests for GET /market-data/fx-rates."""

    def test_rates(self, client, mock_provider, usd_twd_rates):
        """Rates are keyed by date then quote currency."""
        mock_provider.set_fx(usd_twd_rates)

        response = client.get("/market-data/fx-rates", params={"start": "2024-01-02", "end": "2024-01-05"})

        assert response.status_code == 200
        body = response.json()
        assert body["base"] == "USD"
        assert list(body["rates"]) == ["2024-01-02", "2024-01-05"]
        assert Decimal(body["rates"]["2024-01-02"]["TWD"]) == Decimal("31.5")

    def test_explicit_pair(self, client, mock_provider, usd_twd_rates):
        """from/to may be given explicitly (any case)."""
        mock_provider.set_fx(usd_twd_rates)

        response = client.get(
            "/market-data/fx-rates",
            params={"start": "2024-01-02", "end": "2024-01-05", "from": "usd", "to": "twd"},
        )

        assert response.status_code == 200
        assert "TWD" in response.json()["rates"]["2024-01-05"]

    def test_no_rates_in_window(self, client, mock_provider):
        """Rates older than the padded window are not returned."""
        mock_provider.set_fx({date(2023, 11, 28): Decimal("32.1")})

        response = client.get("/market-data/fx-rates", params={"start": "2024-01-02", "end": "2024-01-05"})

        assert response.status_code == 200
        assert response.json()["rates"] == {}

    @pytest.mark.parametrize("params,field", [
        ({"end": "2024-01-05"}, "start"),
        ({"start": "2024-01-02"}, "end"),
    ])
    def test_missing_dates(self, client, params, field):
        """Missing start or end is a 400."""
        response = client.get("/market-data/fx-rates", params=params)

        assert response.status_code == 400
        assert response.json()["details"] == {"field": field}

    def test_malformed_date(self, client):
        """A date that does not parse is a 422."""
        response = client.get("/market-data/fx-rates", params={"start": "yesterday", "end": "2024-01-05"})

        assert response.status_code == 422
        assert response.json()["error"] == "ValidationError"

    def test_inverted_range(self, client):
        """Start after end is a 400."""
        response = client.get("/market-data/fx-rates", params={"start": "2024-01-05", "end": "2024-01-02"})

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidDateRangeError"

    def test_unsupported_pair(self, client):
        """Anything but USD→TWD is a 400."""
        response = client.get(
            "/market-data/fx-rates",
            params={"start": "2024-01-02", "end": "2024-01-05", "from": "EUR"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "UnsupportedCurrencyPairError"
        assert body["details"] == {"base_currency": "EUR", "quote_currency": "TWD"}

    def test_provider_error(self, client, mock_provider):
        """FX provider failures are a 503."""
        mock_provider.set_fx_error(FXProviderError("mock", "down"))

        response = client.get("/market-data/fx-rates", params={"start": "2024-01-02", "end": "2024-01-05"})

        assert response.status_code == 503
        assert response.json()["details"] == {"provider": "mock"}


# =============================================================================
# GLOBAL ENDPOINTS
# =============================================================================

class TestGlobalEndpoints:
    """Tests for root and health endpoints."""

    def test_root(self, client):
        """Root describes the service."""
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["reporting_currency"] == "TWD"

    def test_liveness(self, client):
        """Liveness answers whenever the process is up."""
        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    def test_error_responses_carry_correlation_id(self, client):
        """Error responses echo the caller's correlation ID."""
        response = client.get(
            "/market-data/historical",
            params={"type": "equity_us"},
            headers={"X-Correlation-ID": "err-123"},
        )

        assert response.status_code == 400
        assert response.headers["X-Correlation-ID"] == "err-123"
