"""
RateService -- the monthly rate table.

Responsibility:
    Saves (insert-or-update) and reads the fuel prices and depreciation
    rate for one (year, month).

Architecture position:
    Kernel > Services -- imperative shell.  Read by SubmissionService at
    settlement time through ``get_rates``.

Invariants enforced:
    - At most one entry per (year, month); ``save_rates`` overwrites the
      existing row in place.
    - All five numeric fields are required and must be >= 0.
    - Only administrators save rates.

Failure modes:
    - ValidationError: a field is missing, not a number, or negative; or
      the period is invalid.
    - PermissionDeniedError: non-admin actor.
"""

from typing import Any

from sqlalchemy import select

from mileage_kernel.domain.context import ActorContext, require_admin
from mileage_kernel.domain.dtos import RateEntry
from mileage_kernel.domain.periods import format_period, validate_period
from mileage_kernel.domain.values import parse_decimal
from mileage_kernel.logging_config import get_logger
from mileage_kernel.models.fuel_price import MonthlyFuelPriceModel
from mileage_kernel.services.base import BaseService

logger = get_logger("services.rates")


class RateService(BaseService[MonthlyFuelPriceModel]):
    """Upsert and lookup of monthly rate entries."""

    def _get_orm(self, year: int, month: int) -> MonthlyFuelPriceModel | None:
        return self.session.execute(
            select(MonthlyFuelPriceModel).where(
                MonthlyFuelPriceModel.year == year,
                MonthlyFuelPriceModel.month == month,
            )
        ).scalar_one_or_none()

    def get_rates(self, year: int, month: int) -> RateEntry | None:
        """The rate entry for the month, or None if none has been saved."""
        validate_period(year, month)
        row = self._get_orm(year, month)
        return row.to_dto() if row is not None else None

    def save_rates(
        self,
        actor: ActorContext,
        year: int,
        month: int,
        gasoline_price: Any,
        diesel_price: Any,
        lpg_price: Any,
        electric_price: Any,
        depreciation_cost: Any,
    ) -> RateEntry:
        """
        Insert or overwrite the rate entry for (year, month).

        Preconditions:
            - Every price and the depreciation cost parse as numbers >= 0.

        Postconditions:
            - Exactly one row exists for the period, holding these values.
            - Completed settlements are not recomputed.
        """
        require_admin(actor, "save_rates")
        validate_period(year, month)
        values = {
            "gasoline_price": parse_decimal(gasoline_price, "gasoline_price"),
            "diesel_price": parse_decimal(diesel_price, "diesel_price"),
            "lpg_price": parse_decimal(lpg_price, "lpg_price"),
            "electric_price": parse_decimal(electric_price, "electric_price"),
            "depreciation_cost": parse_decimal(depreciation_cost, "depreciation_cost"),
        }

        row = self._get_orm(year, month)
        created = row is None
        if created:
            row = MonthlyFuelPriceModel(
                year=year, month=month, created_by_id=actor.actor_id, **values
            )
            self.session.add(row)
        else:
            for field, value in values.items():
                setattr(row, field, value)
            row.updated_by_id = actor.actor_id
        self.session.flush()

        logger.info(
            "rates_saved",
            extra={
                "period": format_period(year, month),
                "inserted": created,
                "actor_id": str(actor.actor_id),
                **values,
            },
        )
        return row.to_dto()
