"""
DriverService -- driver profile management and PIN login.

Responsibility:
    Creates, edits and deletes driver profiles (``users`` rows with
    ``role = 'employee'``), and resolves a name + PIN login to an
    ``ActorContext``.

Architecture position:
    Kernel > Services -- imperative shell.

Invariants enforced:
    - PIN is exactly ``pin_length`` ASCII digits (4 by default, at most
      MAX_PIN_LENGTH so that it fits the column).
    - Fuel efficiency is a number greater than zero.
    - Only administrators add, edit or delete drivers.
    - Deleting a driver deletes that driver's trip records and monthly
      submissions in the same flush; other drivers' rows are untouched.

Failure modes:
    - ValidationError: blank name, malformed PIN, unknown vehicle type,
      missing or non-positive fuel efficiency.
    - PermissionDeniedError: non-admin actor.
    - DriverNotFoundError: unknown driver id on update/delete.
    - AuthenticationError: no employee matches the name and PIN.

Audit relevance:
    driver_added / driver_updated / driver_deleted are logged with the
    driver id and acting admin.  Failed logins are logged at WARNING
    without the PIN.
"""

from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from mileage_kernel.domain.context import ActorContext, require_admin
from mileage_kernel.domain.dtos import (
    MAX_PIN_LENGTH,
    DriverInfo,
    UserRole,
    VehicleType,
)
from mileage_kernel.domain.values import is_blank, parse_decimal
from mileage_kernel.exceptions import (
    AuthenticationError,
    DriverNotFoundError,
    ValidationError,
)
from mileage_kernel.logging_config import get_logger
from mileage_kernel.models.drive_record import DriveRecordModel
from mileage_kernel.models.monthly_submission import MonthlySubmissionModel
from mileage_kernel.models.user import UserModel
from mileage_kernel.services.base import BaseService

logger = get_logger("services.driver")

DEFAULT_PIN_LENGTH = 4


def validate_pin(pin: Any, pin_length: int = DEFAULT_PIN_LENGTH) -> str:
    """Return the PIN as a string, or raise ValidationError."""
    value = "" if pin is None else str(pin)
    if len(value) != pin_length or not (value.isascii() and value.isdigit()):
        raise ValidationError("pin", f"must be exactly {pin_length} digits")
    return value


def parse_vehicle_type(vehicle_type: Any) -> VehicleType:
    try:
        return VehicleType(vehicle_type)
    except ValueError:
        allowed = ", ".join(v.value for v in VehicleType)
        raise ValidationError(
            "vehicle_type", f"must be one of {allowed}, got {vehicle_type!r}"
        ) from None


class DriverService(BaseService[UserModel]):
    """
    Write side of the Driver Profile.

    Contract:
        Every mutating method takes the acting ``ActorContext`` first and
        returns a frozen ``DriverInfo`` (or the deleted row counts).
    """

    def __init__(self, session: Session, pin_length: int = DEFAULT_PIN_LENGTH):
        super().__init__(session)
        if not 1 <= pin_length <= MAX_PIN_LENGTH:
            raise ValidationError(
                "pin_length", f"must be between 1 and {MAX_PIN_LENGTH}, got {pin_length}"
            )
        self._pin_length = pin_length

    def _validated_fields(
        self,
        name: Any,
        pin: Any,
        vehicle_type: Any,
        fuel_efficiency: Any,
    ) -> tuple[str, str, VehicleType, Decimal]:
        if is_blank(name):
            raise ValidationError("name", "is required")
        return (
            str(name).strip(),
            validate_pin(pin, self._pin_length),
            parse_vehicle_type(vehicle_type),
            parse_decimal(fuel_efficiency, "fuel_efficiency", allow_zero=False),
        )

    def _get_driver_orm(self, driver_id: UUID) -> UserModel:
        driver = self.session.execute(
            select(UserModel).where(
                UserModel.id == driver_id,
                UserModel.role == UserRole.EMPLOYEE.value,
            )
        ).scalar_one_or_none()
        if driver is None:
            raise DriverNotFoundError(str(driver_id))
        return driver

    def add_driver(
        self,
        actor: ActorContext,
        name: str,
        pin: str,
        vehicle_type: VehicleType | str,
        fuel_efficiency: Any,
    ) -> DriverInfo:
        """
        Register a new driver.

        Postconditions:
            - A ``users`` row exists with ``role = 'employee'``.

        Raises:
            PermissionDeniedError: actor is not an admin.
            ValidationError: any field fails validation.
        """
        require_admin(actor, "add_driver")
        name, pin, vehicle, efficiency = self._validated_fields(
            name, pin, vehicle_type, fuel_efficiency
        )

        driver = UserModel(
            name=name,
            role=UserRole.EMPLOYEE.value,
            pin=pin,
            vehicle_type=vehicle.value,
            fuel_efficiency=efficiency,
            created_by_id=actor.actor_id,
        )
        self.session.add(driver)
        self.session.flush()

        logger.info(
            "driver_added",
            extra={
                "driver_id": str(driver.id),
                "vehicle_type": vehicle.value,
                "actor_id": str(actor.actor_id),
            },
        )
        return driver.to_dto()

    def update_driver(
        self,
        actor: ActorContext,
        driver_id: UUID,
        name: str,
        pin: str,
        vehicle_type: VehicleType | str,
        fuel_efficiency: Any,
    ) -> DriverInfo:
        """
        Overwrite every mutable field of a driver.

        Completed settlements keep their stored amounts; a new efficiency
        only affects settlements computed afterwards.
        """
        require_admin(actor, "update_driver")
        name, pin, vehicle, efficiency = self._validated_fields(
            name, pin, vehicle_type, fuel_efficiency
        )
        driver = self._get_driver_orm(driver_id)

        driver.name = name
        driver.pin = pin
        driver.vehicle_type = vehicle.value
        driver.fuel_efficiency = efficiency
        driver.updated_by_id = actor.actor_id
        self.session.flush()

        logger.info(
            "driver_updated",
            extra={
                "driver_id": str(driver.id),
                "vehicle_type": vehicle.value,
                "actor_id": str(actor.actor_id),
            },
        )
        return driver.to_dto()

    def delete_driver(self, actor: ActorContext, driver_id: UUID) -> dict[str, int]:
        """
        Delete a driver together with everything they own.

        Irreversible: there is no soft delete.

        Returns:
            ``{"records": n, "submissions": m}`` -- rows removed alongside
            the profile.
        """
        require_admin(actor, "delete_driver")
        driver = self._get_driver_orm(driver_id)

        records = self.session.execute(
            delete(DriveRecordModel).where(DriveRecordModel.driver_id == driver_id)
        ).rowcount
        submissions = self.session.execute(
            delete(MonthlySubmissionModel).where(
                MonthlySubmissionModel.driver_id == driver_id
            )
        ).rowcount
        self.session.delete(driver)
        self.session.flush()

        logger.info(
            "driver_deleted",
            extra={
                "driver_id": str(driver_id),
                "records_deleted": records,
                "submissions_deleted": submissions,
                "actor_id": str(actor.actor_id),
            },
        )
        return {"records": records, "submissions": submissions}

    def authenticate(self, name: str, pin: str) -> ActorContext:
        """
        Log a driver in by name and PIN.

        Raises:
            AuthenticationError: no employee row matches both values.
        """
        name = "" if name is None else str(name).strip()
        driver = self.session.execute(
            select(UserModel).where(
                UserModel.name == name,
                UserModel.pin == str(pin),
                UserModel.role == UserRole.EMPLOYEE.value,
            )
        ).scalars().first()

        if driver is None:
            logger.warning("driver_login_failed", extra={"driver_name": name})
            raise AuthenticationError(name)

        logger.info("driver_logged_in", extra={"driver_id": str(driver.id)})
        return ActorContext.for_driver(driver.id)
