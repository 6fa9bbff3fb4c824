"""
Module: mileage_kernel.models.fuel_price
Responsibility: ORM persistence for the monthly rate table -- fuel prices per
    vehicle category and the depreciation rate per km.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain DTOs only.

Invariants enforced:
    - At most one row per (year, month) (uq_fuel_price_period); RateService
      saves by upsert on that key.
    - Settled submissions keep their stored amount when rates change later;
      there is no FK from submissions to this table.
"""

from decimal import Decimal

from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mileage_kernel.db.base import TrackedBase
from mileage_kernel.domain.dtos import RateEntry


class MonthlyFuelPriceModel(TrackedBase):
    """Rates that apply to every settlement of one month."""

    __tablename__ = "monthly_fuel_prices"

    __table_args__ = (
        UniqueConstraint("year", "month", name="uq_fuel_price_period"),
    )

    year: Mapped[int] = mapped_column(nullable=False)
    month: Mapped[int] = mapped_column(nullable=False)
    gasoline_price: Mapped[Decimal | None] = mapped_column(nullable=True)
    diesel_price: Mapped[Decimal | None] = mapped_column(nullable=True)
    lpg_price: Mapped[Decimal | None] = mapped_column(nullable=True)
    electric_price: Mapped[Decimal | None] = mapped_column(nullable=True)
    depreciation_cost: Mapped[Decimal | None] = mapped_column(nullable=True)

    def to_dto(self) -> RateEntry:
        return RateEntry(
            year=self.year,
            month=self.month,
            gasoline_price=self.gasoline_price,
            diesel_price=self.diesel_price,
            lpg_price=self.lpg_price,
            electric_price=self.electric_price,
            depreciation_cost=self.depreciation_cost,
        )

    def __repr__(self) -> str:
        return f"<MonthlyFuelPriceModel {self.year}-{self.month:02d}>"
