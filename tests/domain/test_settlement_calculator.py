"""
Tests for the Settlement Calculator.

All tests are pure -- no database, no session.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from mileage_kernel.domain.dtos import RateEntry, VehicleType
from mileage_kernel.domain.settlement import (
    DEFAULT_DEPRECIATION_RATE,
    calculate_settlement,
    effective_depreciation_rate,
    round_currency,
    settle_month,
)
from mileage_kernel.exceptions import (
    MissingFuelEfficiencyError,
    MissingFuelPriceError,
    MissingRatesError,
    ValidationError,
)


def _rates(**overrides) -> RateEntry:
    values = {
        "year": 2025,
        "month": 3,
        "gasoline_price": Decimal("1650"),
        "diesel_price": Decimal("1500"),
        "lpg_price": Decimal("1000"),
        "electric_price": Decimal("300"),
        "depreciation_cost": Decimal("140"),
    }
    values.update(overrides)
    return RateEntry(**values)


def _settle(vehicle_type=VehicleType.GASOLINE, fuel_efficiency=Decimal("10"),
            total_distance=Decimal("200"), rates=None, **kwargs):
    return settle_month(
        year=2025,
        month=3,
        driver_id=uuid4(),
        vehicle_type=vehicle_type,
        fuel_efficiency=fuel_efficiency,
        total_distance=total_distance,
        rates=_rates() if rates is None else rates,
        **kwargs,
    )


# =============================================================================
# Formula
# =============================================================================


class TestCalculateSettlement:

    def test_reference_example(self):
        """200 km at 10 km/l, 1650 per litre, 140 per km -> 61000."""
        result = calculate_settlement(
            Decimal("200"), Decimal("10"), Decimal("1650"), Decimal("140")
        )
        assert result.fuel_cost == Decimal("33000")
        assert result.depreciation_cost == Decimal("28000")
        assert result.settlement_amount == Decimal("61000")

    def test_each_cost_rounded_before_adding(self):
        # 10.5 / 12 * 1650 = 1443.75 -> 1444 ; 10.5 * 140.3 = 1473.15 -> 1473
        result = calculate_settlement(
            Decimal("10.5"), Decimal("12"), Decimal("1650"), Decimal("140.3")
        )
        assert result.fuel_cost == Decimal("1444")
        assert result.depreciation_cost == Decimal("1473")
        assert result.settlement_amount == Decimal("2917")

    def test_half_rounds_up(self):
        assert round_currency(Decimal("0.5")) == Decimal("1")
        assert round_currency(Decimal("2.5")) == Decimal("3")
        assert round_currency(Decimal("2.49")) == Decimal("2")

    def test_zero_distance_is_zero_amount(self):
        result = calculate_settlement(
            Decimal("0"), Decimal("10"), Decimal("1650"), Decimal("140")
        )
        assert result.settlement_amount == Decimal("0")

    def test_negative_distance_rejected(self):
        with pytest.raises(ValidationError, match="total_distance"):
            calculate_settlement(
                Decimal("-1"), Decimal("10"), Decimal("1650"), Decimal("140")
            )

    def test_breakdown_carries_inputs(self):
        result = calculate_settlement(
            Decimal("200"), Decimal("10"), Decimal("1650"), Decimal("140")
        )
        assert result.total_distance == Decimal("200")
        assert result.fuel_efficiency == Decimal("10")
        assert result.fuel_price == Decimal("1650")
        assert result.depreciation_rate == Decimal("140")


# =============================================================================
# Depreciation default
# =============================================================================


class TestEffectiveDepreciationRate:

    def test_present_value_used(self):
        assert effective_depreciation_rate(Decimal("150")) == Decimal("150")

    @pytest.mark.parametrize("value", [None, 0, "0", Decimal("0"), "", "abc"])
    def test_absent_or_zero_falls_back_to_default(self, value):
        assert effective_depreciation_rate(value) == DEFAULT_DEPRECIATION_RATE

    def test_default_is_overridable(self):
        assert effective_depreciation_rate(None, Decimal("200")) == Decimal("200")

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            effective_depreciation_rate(Decimal("-5"))


# =============================================================================
# Month settlement with precondition checks
# =============================================================================


class TestSettleMonth:

    def test_settles_with_vehicle_price(self):
        result = _settle(vehicle_type=VehicleType.DIESEL)
        # 200 / 10 * 1500 = 30000
        assert result.fuel_cost == Decimal("30000")
        assert result.settlement_amount == Decimal("58000")

    def test_electric_uses_electric_price(self):
        result = _settle(vehicle_type="electric", fuel_efficiency=Decimal("5"))
        # 200 / 5 * 300 = 12000
        assert result.fuel_cost == Decimal("12000")

    def test_missing_rates(self):
        with pytest.raises(MissingRatesError, match="set fuel rates first"):
            settle_month(
                year=2025, month=3, driver_id=uuid4(),
                vehicle_type=VehicleType.GASOLINE, fuel_efficiency=Decimal("10"),
                total_distance=Decimal("200"), rates=None,
            )

    @pytest.mark.parametrize("price", [None, Decimal("0"), Decimal("-1"), "n/a"])
    def test_unusable_fuel_price(self, price):
        with pytest.raises(MissingFuelPriceError) as exc_info:
            _settle(rates=_rates(gasoline_price=price))
        assert exc_info.value.vehicle_type == "gasoline"

    def test_no_fallback_to_another_vehicle_price(self):
        """An LPG driver with no LPG price fails even though gasoline is set."""
        with pytest.raises(MissingFuelPriceError):
            _settle(vehicle_type=VehicleType.LPG, rates=_rates(lpg_price=None))

    @pytest.mark.parametrize("efficiency", [None, 0, Decimal("-3"), ""])
    def test_unusable_fuel_efficiency(self, efficiency):
        with pytest.raises(MissingFuelEfficiencyError):
            _settle(fuel_efficiency=efficiency)

    def test_price_checked_before_efficiency(self):
        with pytest.raises(MissingFuelPriceError):
            _settle(rates=_rates(gasoline_price=None), fuel_efficiency=None)

    def test_zero_depreciation_uses_default(self):
        result = _settle(rates=_rates(depreciation_cost=Decimal("0")))
        assert result.depreciation_rate == DEFAULT_DEPRECIATION_RATE
        assert result.depreciation_cost == Decimal("28000")

    def test_configured_default_depreciation(self):
        result = _settle(
            rates=_rates(depreciation_cost=None),
            default_depreciation_rate=Decimal("100"),
        )
        assert result.depreciation_cost == Decimal("20000")
