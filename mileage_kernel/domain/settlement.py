"""
Settlement Calculator (``mileage_kernel.domain.settlement``).

Responsibility
--------------
Turns a driver's monthly distance into a reimbursement:

    fuel_cost         = round(total_distance / fuel_efficiency * fuel_price)
    depreciation_cost = round(total_distance * depreciation_rate)
    settlement_amount = fuel_cost + depreciation_cost

Architecture position
---------------------
**Kernel domain layer** -- pure functions.  No I/O, no session, no clock.
``SubmissionService`` gathers the inputs (records, driver, rate entry) and
persists the result; nothing here writes anything.

Invariants enforced
-------------------
* Decimal arithmetic throughout; each cost is rounded half-up to a whole
  currency unit before the two are added.
* Same inputs always give the same ``SettlementBreakdown``.
* Fuel price comes from the rate entry field for the driver's vehicle type
  only -- there is no fallback to another type's price.
* A depreciation rate that is absent or zero falls back to the configured
  default (140 unless overridden).

Failure modes
-------------
* No rate entry for the month -> ``MissingRatesError``.
* Selected fuel price absent, zero, negative or not a number
  -> ``MissingFuelPriceError``.
* Fuel efficiency absent, zero, negative or not a number
  -> ``MissingFuelEfficiencyError``.
* Negative total distance -> ``ValidationError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from uuid import UUID

from mileage_kernel.domain.dtos import RateEntry, VehicleType
from mileage_kernel.domain.values import try_decimal, usable_positive
from mileage_kernel.exceptions import (
    MissingFuelEfficiencyError,
    MissingFuelPriceError,
    MissingRatesError,
    ValidationError,
)

DEFAULT_DEPRECIATION_RATE = Decimal("140")

_WHOLE_UNIT = Decimal("1")


@dataclass(frozen=True)
class SettlementBreakdown:
    """All inputs and outputs of one settlement calculation."""

    total_distance: Decimal
    fuel_efficiency: Decimal
    fuel_price: Decimal
    depreciation_rate: Decimal
    fuel_cost: Decimal
    depreciation_cost: Decimal

    @property
    def settlement_amount(self) -> Decimal:
        return self.fuel_cost + self.depreciation_cost


def round_currency(amount: Decimal) -> Decimal:
    """Round half-up to a whole currency unit."""
    return amount.quantize(_WHOLE_UNIT, rounding=ROUND_HALF_UP)


def effective_depreciation_rate(
    depreciation_rate: Any,
    default_rate: Decimal = DEFAULT_DEPRECIATION_RATE,
) -> Decimal:
    """The rate to apply: the entry's value unless absent or zero."""
    value = try_decimal(depreciation_rate)
    if value is None or value == 0:
        return default_rate
    if value < 0:
        raise ValidationError("depreciation_rate", f"must not be negative, got {value}")
    return value


def calculate_settlement(
    total_distance: Decimal,
    fuel_efficiency: Decimal,
    fuel_price: Decimal,
    depreciation_rate: Decimal,
) -> SettlementBreakdown:
    """
    Apply the settlement formula to validated inputs.

    Preconditions:
        - ``total_distance`` >= 0.
        - ``fuel_efficiency`` > 0 and ``fuel_price`` > 0 (callers that hold
          raw values go through ``settle_month``).
        - ``depreciation_rate`` >= 0.
    Postconditions:
        - ``fuel_cost`` and ``depreciation_cost`` are whole Decimals.
    """
    if total_distance < 0:
        raise ValidationError("total_distance", f"must not be negative, got {total_distance}")
    fuel_cost = round_currency(total_distance / fuel_efficiency * fuel_price)
    depreciation_cost = round_currency(total_distance * depreciation_rate)
    return SettlementBreakdown(
        total_distance=total_distance,
        fuel_efficiency=fuel_efficiency,
        fuel_price=fuel_price,
        depreciation_rate=depreciation_rate,
        fuel_cost=fuel_cost,
        depreciation_cost=depreciation_cost,
    )


def settle_month(
    *,
    year: int,
    month: int,
    driver_id: UUID,
    vehicle_type: VehicleType,
    fuel_efficiency: Any,
    total_distance: Decimal,
    rates: RateEntry | None,
    default_depreciation_rate: Decimal = DEFAULT_DEPRECIATION_RATE,
) -> SettlementBreakdown:
    """
    Check every settlement precondition, then calculate.

    Checks run in a fixed order -- rate entry, fuel price, fuel efficiency --
    so the first missing input is the one reported.
    """
    if rates is None:
        raise MissingRatesError(year, month)

    vehicle = VehicleType(vehicle_type)
    fuel_price = usable_positive(rates.price_for(vehicle))
    if fuel_price is None:
        raise MissingFuelPriceError(year, month, vehicle.value)

    efficiency = usable_positive(fuel_efficiency)
    if efficiency is None:
        raise MissingFuelEfficiencyError(str(driver_id))

    return calculate_settlement(
        total_distance=total_distance,
        fuel_efficiency=efficiency,
        fuel_price=fuel_price,
        depreciation_rate=effective_depreciation_rate(
            rates.depreciation_cost, default_depreciation_rate
        ),
    )
