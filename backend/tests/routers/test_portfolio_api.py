# backend/tests/routers/test_portfolio_api.py
"""
Integration tests for the portfolio endpoints.

These tests verify:
- POST /portfolio/timeline returns the timeline, snapshot and warnings
- Index selection and out-of-range handling
- Request validation (422) vs domain validation (400)
- POST /portfolio/holdings/import normalizes and reports rows
"""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from tracker.dependencies import get_valuation_service
from tracker.main import app
from tracker.models import AssetClass
from tracker.services.valuation import ValuationService


class StubFeed:
    """Feed serving fixed series regardless of the fetch window."""

    def __init__(self, prices_by_symbol, fx_series, failing=()):
        self.prices_by_symbol = prices_by_symbol
        self.fx_series = fx_series
        self.failing = set(failing)
        self.price_requests = []

    def get_price_series(self, symbol, asset_class, today=None, warnings=None):
        self.price_requests.append((symbol, asset_class))
        if symbol in self.failing:
            if warnings is not None:
                warnings.append(f"No historical data for {asset_class.value} ticker '{symbol}'")
            return {}
        return dict(self.prices_by_symbol.get(symbol, {}))

    def get_fx_series(self, start_date, end_date, today=None, warnings=None):
        return dict(self.fx_series)


@pytest.fixture
def stub_feed(tsla_prices, usd_twd_rates):
    return StubFeed({"TSLA": tsla_prices}, usd_twd_rates, failing={"ZZZZ"})


@pytest.fixture
def client(stub_feed):
    """TestClient with the valuation service wired to the stub feed."""
    app.dependency_overrides[get_valuation_service] = lambda: ValuationService(stub_feed)

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


TSLA_ROW = {
    "id": "tsla-1",
    "asset_class": "equity_us",
    "symbol": "tsla",
    "quantity": "10",
    "acquisition_date": "2024-01-02",
}

CASH_ROW = {
    "id": "cash-1",
    "asset_class": "cash_twd",
    "quantity": "5000",
    "acquisition_date": "2024-01-01",
}


# =============================================================================
# TIMELINE
# =============================================================================

class TestTimeline:
    """Tests for POST /portfolio/timeline."""

    def test_timeline(self, client):
        """Timeline values TSLA plus cash on each price date."""
        response = client.post("/portfolio/timeline", json={"holdings": [TSLA_ROW, CASH_ROW]})

        assert response.status_code == 200
        body = response.json()
        assert body["reporting_currency"] == "TWD"
        assert [d["date"] for d in body["timeline"]] == ["2024-01-02", "2024-01-05"]
        assert [Decimal(d["total_value"]) for d in body["timeline"]] == [
            Decimal("36500"),
            Decimal("40200"),
        ]
        assert Decimal(body["timeline"][0]["per_holding"]["TSLA"]) == Decimal("31500")
        assert Decimal(body["timeline"][0]["per_holding"]["CASH_TWD"]) == Decimal("5000")
        assert body["warnings"] == []

    def test_default_snapshot_is_last_day(self, client):
        """Without an index the snapshot is taken on the last date."""
        response = client.post("/portfolio/timeline", json={"holdings": [TSLA_ROW, CASH_ROW]})

        body = response.json()
        assert body["snapshot"]["index"] == 1
        assert body["snapshot"]["date"] == "2024-01-05"
        assert Decimal(body["current_value"]) == Decimal("40200")

    def test_snapshot_distributions(self, client):
        """Cost view per holding, market view per display name."""
        response = client.post(
            "/portfolio/timeline",
            json={"holdings": [TSLA_ROW, CASH_ROW], "index": 1},
        )

        snapshot = response.json()["snapshot"]
        cost = {e["holding_id"]: Decimal(e["value"]) for e in snapshot["cost_distribution"]}
        market = {e["name"]: Decimal(e["value"]) for e in snapshot["market_distribution"]}
        assert cost == {"tsla-1": Decimal("31500"), "cash-1": Decimal("5000")}
        assert market == {"TSLA": Decimal("35200"), "Cash (TWD)": Decimal("5000")}
        assert Decimal(snapshot["total_cost"]) == Decimal("36500")
        assert Decimal(snapshot["total_market"]) == Decimal("40200")

    def test_selected_index(self, client):
        """current_value follows the selected index."""
        response = client.post(
            "/portfolio/timeline",
            json={"holdings": [TSLA_ROW, CASH_ROW], "index": 0},
        )

        assert Decimal(response.json()["current_value"]) == Decimal("36500")

    def test_as_of_date(self, client):
        """A selected date is added to the axis."""
        response = client.post(
            "/portfolio/timeline",
            json={"holdings": [TSLA_ROW], "as_of_date": "2024-01-07"},
        )

        body = response.json()
        assert body["timeline"][-1]["date"] == "2024-01-07"
        assert Decimal(body["current_value"]) == Decimal("35200")

    def test_failed_symbol_warns(self, client):
        """A symbol without data is valued at zero and reported."""
        bad = {"asset_class": "equity_us", "symbol": "ZZZZ", "quantity": "1", "acquisition_date": "2024-01-02"}

        response = client.post("/portfolio/timeline", json={"holdings": [TSLA_ROW, bad]})

        assert response.status_code == 200
        body = response.json()
        assert len(body["warnings"]) == 1
        assert all(Decimal(d["per_holding"]["ZZZZ"]) == Decimal("0") for d in body["timeline"])

    def test_empty_holdings(self, client):
        """No holdings gives an empty result, not an error."""
        response = client.post("/portfolio/timeline", json={"holdings": []})

        assert response.status_code == 200
        body = response.json()
        assert body["timeline"] == []
        assert body["snapshot"] is None
        assert Decimal(body["current_value"]) == Decimal("0")

    def test_legacy_asset_class(self, client, stub_feed):
        """Legacy type names are accepted."""
        row = dict(TSLA_ROW, asset_class="us_stock")

        response = client.post("/portfolio/timeline", json={"holdings": [row]})

        assert response.status_code == 200
        assert stub_feed.price_requests == [("TSLA", AssetClass.EQUITY_US)]


class TestTimelineErrors:
    """Tests for timeline error responses."""

    @pytest.mark.parametrize("index", [2, -1])
    def test_index_out_of_range(self, client, index):
        """Indexes outside the timeline are a 400."""
        response = client.post(
            "/portfolio/timeline",
            json={"holdings": [TSLA_ROW], "index": index},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "InvalidSnapshotIndexError"
        assert body["details"] == {"index": index, "timeline_length": 2}

    def test_index_on_empty_timeline(self, client):
        """Any index on an empty timeline is a 400."""
        response = client.post("/portfolio/timeline", json={"holdings": [], "index": 0})

        assert response.status_code == 400
        assert response.json()["details"]["timeline_length"] == 0

    @pytest.mark.parametrize("change", [
        {"quantity": "0"},
        {"quantity": "-1"},
        {"quantity": "abc"},
        {"quantity": "1e999999"},
        {"quantity": "1000000000000001"},
        {"asset_class": "bonds"},
        {"symbol": ""},
        {"acquisition_date": "not-a-date"},
    ])
    def test_invalid_holding(self, client, change):
        """Malformed holdings are rejected with the standard 422 shape."""
        row = dict(TSLA_ROW, **change)

        response = client.post("/portfolio/timeline", json={"holdings": [row]})

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "ValidationError"
        assert body["message"] == "Request validation failed"
        assert body["details"]

    def test_oversized_quantity(self, client):
        """A quantity too large to value is a 422 on the quantity field."""
        row = dict(CASH_ROW, asset_class="cash_usd", quantity="1e999999")

        response = client.post("/portfolio/timeline", json={"holdings": [row]})

        assert response.status_code == 422
        [detail] = response.json()["details"]
        assert detail["field"] == "body.holdings.0.quantity"
        assert detail["type"] == "less_than_equal"

    def test_duplicate_holding_ids(self, client):
        """Two holdings with the same id are a 422."""
        response = client.post(
            "/portfolio/timeline",
            json={"holdings": [TSLA_ROW, dict(TSLA_ROW, quantity="2")]},
        )

        assert response.status_code == 422
        [detail] = response.json()["details"]
        assert detail["field"] == "body.holdings"
        assert "tsla-1" in detail["message"]

    def test_holdings_without_ids_accepted(self, client):
        """Omitted ids are generated, never reported as duplicates."""
        row = {k: v for k, v in TSLA_ROW.items() if k != "id"}

        response = client.post("/portfolio/timeline", json={"holdings": [row, row]})

        assert response.status_code == 200

    def test_cash_without_symbol_accepted(self, client):
        """Cash rows need no symbol."""
        response = client.post("/portfolio/timeline", json={"holdings": [CASH_ROW]})

        assert response.status_code == 200


# =============================================================================
# HOLDINGS IMPORT
# =============================================================================

class TestHoldingsImport:
    """Tests for POST /portfolio/holdings/import."""

    def test_import(self, client):
        """Rows are normalized and bad rows reported."""
        payload = [
            {"ticker": "btc", "type": "crypto", "amount": 0.5, "date": "2024-01-02", "id": "b1"},
            {"ticker": "2330", "type": "tw_stock", "amount": "1000"},
            {"ticker": "TSLA", "amount": 0},
        ]

        response = client.post("/portfolio/holdings/import", json=payload)

        assert response.status_code == 200
        body = response.json()
        assert body["total_rows"] == 3
        assert body["imported"] == 2
        assert body["skipped"] == 1
        assert body["holdings"][0]["id"] == "b1"
        assert body["holdings"][0]["symbol"] == "BTC"
        assert body["holdings"][0]["display_name"] == "BTC"
        assert body["holdings"][0]["acquisition_date"] == "2024-01-02"
        assert body["holdings"][1]["asset_class"] == "equity_tw"
        assert body["holdings"][1]["acquisition_date"] is None
        assert body["errors"] == [{
            "row_number": 3,
            "error_type": "invalid_amount",
            "message": "Amount must be positive, got '0'",
            "field": "amount",
        }]

    def test_duplicate_id_reported(self, client):
        """A repeated id is reported as a skipped row."""
        response = client.post(
            "/portfolio/holdings/import",
            json=[
                {"id": "x", "ticker": "TSLA", "amount": 1},
                {"id": "x", "ticker": "NVDA", "amount": 1},
            ],
        )

        assert response.status_code == 200
        body = response.json()
        assert [h["symbol"] for h in body["holdings"]] == ["TSLA"]
        assert body["errors"][0]["error_type"] == "duplicate_id"

    def test_not_an_array(self, client):
        """Objects are rejected with a 400."""
        response = client.post("/portfolio/holdings/import", json={"ticker": "TSLA"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "HoldingsImportError"
        assert body["details"] == {"field": "holdings"}

    def test_nothing_importable(self, client):
        """All rows bad is a 400."""
        response = client.post("/portfolio/holdings/import", json=[{"amount": 1}])

        assert response.status_code == 400
        assert "No importable holdings" in response.json()["message"]

    def test_imported_holdings_round_trip(self, client):
        """Imported holdings can be sent straight to the timeline."""
        imported = client.post(
            "/portfolio/holdings/import",
            json=[{"ticker": "TSLA", "amount": 10, "date": "2024-01-02"}],
        ).json()["holdings"]

        response = client.post("/portfolio/timeline", json={"holdings": imported})

        assert response.status_code == 200
        assert Decimal(response.json()["current_value"]) == Decimal("35200")
