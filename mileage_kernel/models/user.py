"""
Module: mileage_kernel.models.user
Responsibility: ORM persistence for people who use the system -- drivers
    ("employees") and administrators share the ``users`` table and are told
    apart by ``role``.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain DTOs only.

Invariants enforced:
    - fuel_efficiency > 0 for drivers (checked by DriverService; the column
      is nullable so that legacy rows without a value surface as
      MissingFuelEfficiencyError at settlement time rather than at load).
    - pin is exactly ``drivers.pin_length`` digits, 4 by default (checked
      by DriverService); the column is sized for MAX_PIN_LENGTH.

Failure modes:
    - Deleting a user with trip records or submissions raises IntegrityError
      unless DriverService.delete_driver removes the children first.
"""

from decimal import Decimal

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from mileage_kernel.db.base import TrackedBase
from mileage_kernel.domain.dtos import (
    MAX_PIN_LENGTH,
    DriverInfo,
    UserRole,
    VehicleType,
)


class UserModel(TrackedBase):
    """
    A driver or administrator.

    Guarantees:
        - ``role`` is 'employee' or 'admin'.
        - ``vehicle_type`` is one of gasoline/diesel/lpg/electric.
    """

    __tablename__ = "users"

    __table_args__ = (
        Index("idx_users_role", "role"),
        Index("idx_users_name", "name"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserRole.EMPLOYEE.value
    )
    pin: Mapped[str | None] = mapped_column(String(MAX_PIN_LENGTH), nullable=True)
    vehicle_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=VehicleType.GASOLINE.value
    )
    fuel_efficiency: Mapped[Decimal | None] = mapped_column(nullable=True)

    def to_dto(self) -> DriverInfo:
        return DriverInfo(
            id=self.id,
            name=self.name,
            vehicle_type=VehicleType(self.vehicle_type),
            fuel_efficiency=self.fuel_efficiency,
            pin=self.pin or "",
            role=UserRole(self.role),
        )

    def __repr__(self) -> str:
        return f"<UserModel {self.name} [{self.role}] {self.vehicle_type}>"
