"""
TripRecordService -- creation and deletion of trip records.

Responsibility:
    Writes individual drives for a driver, resolving the stored distance
    (manual value versus route estimate) and refusing any change to a month
    that has already been submitted.

Architecture position:
    Kernel > Services -- imperative shell.  The governing submission is
    found from the record's own (driver_id, year, month); there is no
    stored link between the two tables.

Invariants enforced:
    - A record may be created or deleted only while its month has no
      submission.  A pending submission locks the month the same as a
      completed one.
    - The lock check runs before anything is written, so a refused
      mutation never reaches storage.
    - A present, non-blank manual distance is stored as entered with
      ``is_manual_distance = True``.
    - New records carry the status that mirrors their month (``draft``).

Failure modes:
    - PermissionDeniedError: an employee acting on another driver.
    - DriverNotFoundError / TripRecordNotFoundError: unknown ids.
    - ValidationError: blank departure/destination, bad distance input.
    - SettlementLockedError: the month is settled.
    - SubmissionPendingError: the month is submitted and awaiting review.
"""

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from mileage_kernel.domain.context import ActorContext, require_driver_access
from mileage_kernel.domain.distance import (
    DEFAULT_DISTANCE_PRECISION,
    DEFAULT_ROAD_CORRECTION_FACTOR,
    Coordinate,
    estimate_route_distance,
    resolve_distance,
)
from mileage_kernel.domain.dtos import (
    RecordStatus,
    SubmissionState,
    TripRecordInfo,
    UserRole,
)
from mileage_kernel.domain.periods import format_period, period_of
from mileage_kernel.domain.submission_workflow import lock_error_for
from mileage_kernel.domain.values import is_blank
from mileage_kernel.exceptions import (
    DriverNotFoundError,
    TripRecordNotFoundError,
    ValidationError,
)
from mileage_kernel.logging_config import get_logger
from mileage_kernel.models.drive_record import DriveRecordModel
from mileage_kernel.models.monthly_submission import MonthlySubmissionModel
from mileage_kernel.models.user import UserModel
from mileage_kernel.services.base import BaseService

logger = get_logger("services.trip_records")


class TripRecordService(BaseService[DriveRecordModel]):
    """
    Write side of the Trip Record Store.

    ``road_correction_factor`` and ``precision`` come from the ``distance``
    configuration section and apply to route estimates.
    """

    def __init__(
        self,
        session: Session,
        road_correction_factor: Decimal = DEFAULT_ROAD_CORRECTION_FACTOR,
        precision: Decimal = DEFAULT_DISTANCE_PRECISION,
    ):
        super().__init__(session)
        self._road_correction_factor = road_correction_factor
        self._precision = precision

    def estimate_distance(self, points: Sequence[Coordinate]) -> Decimal:
        """One-way road distance along ``points`` with the configured correction."""
        return estimate_route_distance(
            points, self._road_correction_factor, self._precision
        )

    def _submission_state(self, driver_id: UUID, year: int, month: int) -> SubmissionState:
        status = self.session.execute(
            select(MonthlySubmissionModel.status).where(
                MonthlySubmissionModel.driver_id == driver_id,
                MonthlySubmissionModel.year == year,
                MonthlySubmissionModel.month == month,
            )
        ).scalar_one_or_none()
        return SubmissionState(status) if status else SubmissionState.ABSENT

    def _check_month_unlocked(
        self, driver_id: UUID, drive_date: date, operation: str
    ) -> None:
        year, month = period_of(drive_date)
        state = self._submission_state(driver_id, year, month)
        error = lock_error_for(state, str(driver_id), year, month)
        if error is not None:
            logger.warning(
                "trip_record_mutation_refused",
                extra={
                    "driver_id": str(driver_id),
                    "period": format_period(year, month),
                    "operation": operation,
                    "state": state.value,
                },
            )
            raise error

    def create_record(
        self,
        actor: ActorContext,
        driver_id: UUID,
        drive_date: date,
        departure: str,
        destination: str,
        waypoints: Sequence[str] = (),
        distance: Any = None,
        manual_distance: Any = None,
        client_name: str = "",
        round_trip: bool = False,
        route: Sequence[Coordinate] = (),
    ) -> TripRecordInfo:
        """
        Record one drive.

        ``distance`` is the computed route estimate (one way); it is doubled
        when ``round_trip`` is set.  When it is absent and ``route`` holds the
        geocoded departure, waypoints and destination, it is estimated from
        them.  ``manual_distance``, when present and non-blank, replaces it.

        Raises:
            SettlementLockedError: month already settled.
            SubmissionPendingError: month submitted, awaiting review.
        """
        require_driver_access(actor, driver_id, "create_record")
        if not isinstance(drive_date, date):
            raise ValidationError("drive_date", f"must be a date, got {drive_date!r}")
        if is_blank(departure):
            raise ValidationError("departure", "is required")
        if is_blank(destination):
            raise ValidationError("destination", "is required")

        driver = self.session.get(UserModel, driver_id)
        if driver is None or driver.role != UserRole.EMPLOYEE.value:
            raise DriverNotFoundError(str(driver_id))

        self._check_month_unlocked(driver_id, drive_date, "create_record")
        if is_blank(distance) and len(route) >= 2:
            distance = self.estimate_distance(route)
        resolved, is_manual = resolve_distance(distance, manual_distance, round_trip)

        record = DriveRecordModel(
            driver_id=driver_id,
            drive_date=drive_date,
            departure=departure.strip(),
            destination=destination.strip(),
            waypoints=[w.strip() for w in waypoints if not is_blank(w)],
            distance=resolved,
            is_manual_distance=is_manual,
            client_name=(client_name or "").strip(),
            status=RecordStatus.DRAFT.value,
            created_by_id=actor.actor_id,
        )
        self.session.add(record)
        self.session.flush()

        logger.info(
            "trip_record_created",
            extra={
                "record_id": str(record.id),
                "driver_id": str(driver_id),
                "drive_date": drive_date,
                "distance": resolved,
                "is_manual_distance": is_manual,
            },
        )
        return record.to_dto()

    def delete_record(self, actor: ActorContext, record_id: UUID) -> None:
        """
        Delete a record, subject to the same month lock as creation.

        Raises:
            TripRecordNotFoundError: unknown record id.
            PermissionDeniedError: an employee deleting another driver's record.
        """
        record = self.session.get(DriveRecordModel, record_id)
        if record is None:
            raise TripRecordNotFoundError(str(record_id))
        require_driver_access(actor, record.driver_id, "delete_record")

        self._check_month_unlocked(record.driver_id, record.drive_date, "delete_record")
        self.session.delete(record)
        self.session.flush()

        logger.info(
            "trip_record_deleted",
            extra={"record_id": str(record_id), "driver_id": str(record.driver_id)},
        )
