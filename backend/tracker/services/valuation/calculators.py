# backend/tracker/services/valuation/calculators.py
"""
Point-in-time calculators for the valuation engine.

HoldingValueCalculator values one holding on one date in TWD. The
timeline calculator calls it for every (date, holding) pair, and the
snapshot projector calls it at the acquisition date to get cost basis.

Valuation rules (value is 0 whenever the holding is not yet held):
    cash_twd    quantity
    cash_usd    quantity × fx(D)
    equity_tw   quantity × price(D)
    equity_us   quantity × price(D) × fx(price_date)
    crypto      quantity × price(D) × fx(price_date)

Where price(D) / fx(D) are last-known values on or before D, and
price_date is the date the price was actually recorded on. Missing price
or FX data values the holding at 0 rather than raising.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from tracker.models import AssetClass, Holding
from tracker.services.constants import ZERO
from tracker.services.valuation.lookups import SeriesIndex
from tracker.services.valuation.types import HoldingValue

logger = logging.getLogger(__name__)

_NOT_HELD = HoldingValue(value=ZERO)


class HoldingValueCalculator:
    """
    Values a single holding on a single date.

    Stateless: all data arrives through arguments, so one instance can be
    shared freely across threads.
    """

    def value_on(
            self,
            holding: Holding,
            target_date: date,
            price_index: SeriesIndex | None,
            fx_index: SeriesIndex,
    ) -> HoldingValue:
        """
        Value a holding on target_date in TWD.

        Args:
            holding: The holding to value
            target_date: Valuation date
            price_index: Native price series for the holding's symbol (None for cash
                or when no series was fetched)
            fx_index: USD→TWD series

        Returns:
            HoldingValue (value 0 if not held yet or data is missing)
        """
        if not holding.is_held_on(target_date):
            return _NOT_HELD

        if holding.asset_class == AssetClass.CASH_TWD:
            return HoldingValue(value=holding.quantity)

        if holding.asset_class == AssetClass.CASH_USD:
            fx = fx_index.at_or_before(target_date)
            if fx is None:
                return _NOT_HELD
            return HoldingValue(value=holding.quantity * fx.value, fx_rate=fx.value)

        return self._value_priced(holding, target_date, price_index, fx_index)

    def cost_basis(
            self,
            holding: Holding,
            price_index: SeriesIndex | None,
            fx_index: SeriesIndex,
    ) -> HoldingValue:
        """
        Value a holding at its own acquisition date.

        Undated holdings have no cost yet and are valued at 0.
        """
        if holding.acquisition_date is None:
            return _NOT_HELD
        return self.value_on(holding, holding.acquisition_date, price_index, fx_index)

    def _value_priced(
            self,
            holding: Holding,
            target_date: date,
            price_index: SeriesIndex | None,
            fx_index: SeriesIndex,
    ) -> HoldingValue:
        """Value an equity or crypto holding from its price series."""
        if price_index is None:
            return _NOT_HELD

        price = price_index.at_or_before(target_date)
        if price is None:
            return _NOT_HELD

        value_native = holding.quantity * price.value

        if not holding.asset_class.is_usd_denominated:
            return HoldingValue(
                value=value_native,
                price=price.value,
                price_date=price.used_date,
            )

        # FX from the price date, not the valuation date
        fx = fx_index.at_or_before(price.used_date)
        if fx is None:
            logger.debug(
                f"No USD/TWD rate on or before {price.used_date} for {holding.symbol}"
            )
            return HoldingValue(
                value=ZERO,
                price=price.value,
                price_date=price.used_date,
            )

        return HoldingValue(
            value=value_native * fx.value,
            price=price.value,
            price_date=price.used_date,
            fx_rate=fx.value,
        )
