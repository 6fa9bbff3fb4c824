"""Read-only queries over driver profiles."""

from uuid import UUID

from sqlalchemy import select

from mileage_kernel.domain.dtos import DriverInfo, UserRole
from mileage_kernel.models.user import UserModel
from mileage_kernel.selectors.base import BaseSelector


class DriverSelector(BaseSelector[UserModel]):
    """Driver listings for the admin screens."""

    def list_drivers(self) -> list[DriverInfo]:
        """Every employee, ordered by name.  Admin rows are excluded."""
        rows = self.session.execute(
            select(UserModel)
            .where(UserModel.role == UserRole.EMPLOYEE.value)
            .order_by(UserModel.name, UserModel.created_at)
        ).scalars().all()
        return [row.to_dto() for row in rows]

    def get_driver(self, driver_id: UUID) -> DriverInfo | None:
        row = self.session.execute(
            select(UserModel).where(
                UserModel.id == driver_id,
                UserModel.role == UserRole.EMPLOYEE.value,
            )
        ).scalar_one_or_none()
        return row.to_dto() if row is not None else None
