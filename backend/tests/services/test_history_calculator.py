# backend/tests/services/test_history_calculator.py
"""
Unit tests for TimelineCalculator.

Key Properties Tested:
1. Per-day totals are exact sums of per-symbol values
2. Allocation percentages sum to 100 (or are all 0 on empty days)
3. A day's value never depends on data dated after it
4. Holdings sharing a symbol are summed under that symbol
5. Identical inputs give identical timelines
"""

from datetime import date
from decimal import Decimal

import pytest

from tracker.models import AssetClass, Holding
from tracker.services.constants import PERCENT_SUM_TOLERANCE
from tracker.services.valuation.history_calculator import (
    TimelineCalculator,
    allocation_percentages,
    compute_timeline,
)


@pytest.fixture
def calculator():
    return TimelineCalculator()


# =============================================================================
# SCENARIO
# =============================================================================

class TestTslaAndCashScenario:
    """
    TSLA bought on 2024-01-02 plus TWD cash held since 2024-01-01.

    TSLA closes: 100 (01-02), 110 (01-05)
    USD/TWD:     31.5 (01-02), 32.0 (01-05)
    """

    @pytest.fixture
    def timeline(self, calculator, tsla_holding, cash_twd_holding, tsla_prices, usd_twd_rates, today):
        return calculator.calculate(
            [tsla_holding, cash_twd_holding],
            {"TSLA": tsla_prices},
            usd_twd_rates,
            today=today,
        )

    def test_axis_is_price_dates(self, timeline):
        """Only dates with a close appear (cash adds none)."""
        assert timeline.dates == [date(2024, 1, 2), date(2024, 1, 5)]

    def test_tsla_values(self, timeline):
        """10 × 100 × 31.5 and 10 × 110 × 32.0."""
        assert timeline[0].per_holding["TSLA"] == Decimal("31500")
        assert timeline[1].per_holding["TSLA"] == Decimal("35200")

    def test_cash_constant(self, timeline):
        """TWD cash is 5000 on every day."""
        for snapshot in timeline:
            assert snapshot.per_holding["CASH_TWD"] == Decimal("5000")

    def test_totals(self, timeline):
        """Totals include cash."""
        assert timeline[0].total_value == Decimal("36500")
        assert timeline[1].total_value == Decimal("40200")

    def test_total_is_sum_of_parts(self, timeline):
        """total_value is the exact sum of per_holding."""
        for snapshot in timeline:
            assert snapshot.total_value == sum(snapshot.per_holding.values(), Decimal("0"))

    def test_percentages_sum_to_100(self, timeline):
        """Allocation shares add up to 100."""
        for snapshot in timeline:
            total = sum(snapshot.per_holding_percent.values(), Decimal("0"))
            assert abs(total - Decimal("100")) < PERCENT_SUM_TOLERANCE

    def test_keys_match(self, timeline):
        """Every valued symbol has a percentage and vice versa."""
        for snapshot in timeline:
            assert snapshot.per_holding.keys() == snapshot.per_holding_percent.keys()


# =============================================================================
# INVARIANTS
# =============================================================================

class TestTimelineInvariants:
    """Tests for properties that hold for any input."""

    def test_empty_holdings(self, calculator, tsla_prices):
        """No holdings, no timeline."""
        assert calculator.calculate([], {"TSLA": tsla_prices}, {}).is_empty

    def test_idempotent(self, calculator, tsla_holding, tsla_prices, usd_twd_rates, today):
        """Same inputs, same output."""
        args = ([tsla_holding], {"TSLA": tsla_prices}, usd_twd_rates)

        first = calculator.calculate(*args, today=today)
        second = calculator.calculate(*args, today=today)

        assert first == second

    def test_no_look_ahead(self, calculator, tsla_holding, tsla_prices, usd_twd_rates, today):
        """Adding later data never changes earlier days."""
        base = calculator.calculate(
            [tsla_holding], {"TSLA": tsla_prices}, usd_twd_rates, today=today
        )

        extended_prices = dict(tsla_prices)
        extended_prices[date(2024, 1, 8)] = Decimal("500")
        extended_fx = dict(usd_twd_rates)
        extended_fx[date(2024, 1, 8)] = Decimal("40")
        extended = calculator.calculate(
            [tsla_holding], {"TSLA": extended_prices}, extended_fx, today=today
        )

        for snapshot in base:
            assert extended.on(snapshot.date) == snapshot

    def test_zero_day_percentages(self, calculator, tsla_holding, tsla_prices):
        """With no FX data every value and share is zero."""
        timeline = calculator.calculate([tsla_holding], {"TSLA": tsla_prices}, {})

        for snapshot in timeline:
            assert snapshot.total_value == Decimal("0")
            assert all(p == Decimal("0") for p in snapshot.per_holding_percent.values())

    def test_as_of_date_on_axis(self, calculator, tsla_holding, tsla_prices, usd_twd_rates, today):
        """A selected weekend date is valued with Friday's data."""
        timeline = calculator.calculate(
            [tsla_holding],
            {"TSLA": tsla_prices},
            usd_twd_rates,
            as_of_date=date(2024, 1, 7),
            today=today,
        )

        assert timeline.dates[-1] == date(2024, 1, 7)
        assert timeline[-1].total_value == Decimal("35200")


# =============================================================================
# AGGREGATION
# =============================================================================

class TestSymbolAggregation:
    """Tests for holdings that share a symbol."""

    def test_same_symbol_summed(self, calculator, tsla_prices, usd_twd_rates, today):
        """Two TSLA lots appear as one TSLA entry."""
        holdings = [
            Holding(AssetClass.EQUITY_US, "TSLA", Decimal("10"), date(2024, 1, 2)),
            Holding(AssetClass.EQUITY_US, "TSLA", Decimal("5"), date(2024, 1, 5)),
        ]

        timeline = calculator.calculate(holdings, {"TSLA": tsla_prices}, usd_twd_rates, today=today)

        assert list(timeline[0].per_holding) == ["TSLA"]
        assert timeline[0].per_holding["TSLA"] == Decimal("31500")
        assert timeline[1].per_holding["TSLA"] == Decimal("52800")

    def test_not_yet_held_still_listed(self, calculator, cash_twd_holding, tsla_prices, usd_twd_rates, today):
        """A holding acquired later is listed at zero on earlier days."""
        late = Holding(AssetClass.EQUITY_US, "TSLA", Decimal("1"), date(2024, 1, 5))

        timeline = calculator.calculate(
            [cash_twd_holding, late], {"TSLA": tsla_prices}, usd_twd_rates, today=today
        )

        assert timeline[0].per_holding["TSLA"] == Decimal("0")
        assert timeline[0].per_holding_percent["CASH_TWD"] == Decimal("100")

    def test_cash_only_synthesized(self, calculator, cash_twd_holding, today):
        """Cash-only timelines run daily from acquisition to today."""
        timeline = calculator.calculate([cash_twd_holding], {}, {}, today=today)

        assert len(timeline) == 10
        assert all(s.total_value == Decimal("5000") for s in timeline)


class TestAllocationPercentages:
    """Tests for allocation_percentages."""

    def test_shares(self):
        """Shares are value / total × 100."""
        result = allocation_percentages(
            {"A": Decimal("25"), "B": Decimal("75")}, Decimal("100")
        )
        assert result == {"A": Decimal("25"), "B": Decimal("75")}

    def test_zero_total(self):
        """A zero total gives zero shares, never a division error."""
        result = allocation_percentages({"A": Decimal("0")}, Decimal("0"))
        assert result == {"A": Decimal("0")}


class TestComputeTimeline:
    """Tests for the module-level convenience function."""

    def test_matches_calculator(self, tsla_holding, tsla_prices, usd_twd_rates, today):
        """Wrapper gives the same result as a default calculator."""
        args = ([tsla_holding], {"TSLA": tsla_prices}, usd_twd_rates)

        assert compute_timeline(*args, today=today) == TimelineCalculator().calculate(*args, today=today)
