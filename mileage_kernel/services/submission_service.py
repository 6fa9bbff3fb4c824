"""
SubmissionService -- monthly submission lifecycle and settlement.

Responsibility:
    Drives a driver's (year, month) submission through
    ABSENT -> PENDING -> COMPLETED and back, computes and stores the
    settlement amount on completion, and keeps the status of that month's
    trip records in step with the submission.

Architecture position:
    Kernel > Services -- imperative shell.  Transition legality comes from
    ``SUBMISSION_WORKFLOW``; the arithmetic comes from
    ``mileage_kernel.domain.settlement``.  Called directly by the CLI and
    per item by the BulkSettlementOrchestrator.

Invariants enforced:
    - At most one submission per (driver, year, month).
    - ``complete`` writes nothing unless the whole calculation succeeds:
      rates, fuel price and fuel efficiency are checked before any column
      changes.
    - Total distance is recomputed from the month's records every time a
      submission is settled, never cached from submission time.
    - ``cancel_completion`` clears the completion stamp and every
      computed amount.
    - ``close_month`` completes pending rows without computing an amount.
    - Every transition re-stamps the month's trip records
      (draft / pending / settled).
    - Timestamps come from the injected ``Clock``.

Failure modes:
    - DuplicateSubmissionError: submit when a row already exists.
    - InvalidStateError: any other action from a state that does not allow it.
    - MissingRatesError / MissingFuelPriceError / MissingFuelEfficiencyError:
      settlement preconditions; the submission stays PENDING.
    - PermissionDeniedError: employee on an admin action or another driver.
    - SubmissionNotFoundError / DriverNotFoundError: unknown ids.

Audit relevance:
    submission_submitted, submission_cancelled, submission_completed,
    submission_completion_cancelled and month_closed are logged at INFO
    with the submission key.  Refused transitions and settlement
    precondition failures are logged at WARNING with the error code.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mileage_kernel.domain.clock import Clock, SystemClock
from mileage_kernel.domain.context import (
    ActorContext,
    require_admin,
    require_driver_access,
)
from mileage_kernel.domain.distance import sum_distance
from mileage_kernel.domain.dtos import (
    RecordStatus,
    SubmissionInfo,
    SubmissionState,
    UserRole,
)
from mileage_kernel.domain.periods import format_period, month_bounds, validate_period
from mileage_kernel.domain.settlement import (
    DEFAULT_DEPRECIATION_RATE,
    SettlementBreakdown,
    settle_month,
)
from mileage_kernel.domain.submission_workflow import (
    CANCEL,
    CANCEL_COMPLETION,
    CLOSE_MONTH,
    COMPLETE,
    SUBMISSION_WORKFLOW,
    SUBMIT,
)
from mileage_kernel.domain.workflow import Transition
from mileage_kernel.exceptions import (
    DriverNotFoundError,
    DuplicateSubmissionError,
    InvalidStateError,
    SettlementError,
    SubmissionNotFoundError,
)
from mileage_kernel.logging_config import LogContext, get_logger
from mileage_kernel.models.drive_record import DriveRecordModel
from mileage_kernel.models.monthly_submission import MonthlySubmissionModel
from mileage_kernel.models.user import UserModel
from mileage_kernel.services.base import BaseService
from mileage_kernel.services.rate_service import RateService

logger = get_logger("services.submissions")


class SettlementStatus(str, Enum):
    """Outcome of settling one submission."""

    SETTLED = "settled"
    FAILED = "failed"


@dataclass(frozen=True)
class SettlementResult:
    """Result of settling one submission without raising on precondition failures."""

    submission_id: UUID
    driver_id: UUID | None
    status: SettlementStatus
    settlement_amount: Decimal | None = None
    error_code: str | None = None
    error_message: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status == SettlementStatus.SETTLED

    @classmethod
    def settled(cls, submission: SubmissionInfo) -> "SettlementResult":
        return cls(
            submission_id=submission.id,
            driver_id=submission.driver_id,
            status=SettlementStatus.SETTLED,
            settlement_amount=submission.settlement_amount,
        )

    @classmethod
    def failed(
        cls, submission_id: UUID, driver_id: UUID | None, error: SettlementError
    ) -> "SettlementResult":
        return cls(
            submission_id=submission_id,
            driver_id=driver_id,
            status=SettlementStatus.FAILED,
            error_code=error.code,
            error_message=str(error),
        )


class SubmissionService(BaseService[MonthlySubmissionModel]):
    """
    Write side of the Monthly Submission Lifecycle.

    Contract:
        Mutating methods take the acting ``ActorContext`` first, validate
        permission before touching storage, and return frozen
        ``SubmissionInfo`` DTOs.

    Non-goals:
        - Does NOT iterate a month's submissions for settlement -- that is
          the BulkSettlementOrchestrator in ``mileage_batch``.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        default_depreciation_rate: Decimal = DEFAULT_DEPRECIATION_RATE,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._default_depreciation_rate = default_depreciation_rate
        self._rates = RateService(session)

    # -------------------------------------------------------------------------
    # Lookup helpers
    # -------------------------------------------------------------------------

    def _get_orm(self, submission_id: UUID) -> MonthlySubmissionModel:
        submission = self.session.get(MonthlySubmissionModel, submission_id)
        if submission is None:
            raise SubmissionNotFoundError(str(submission_id))
        return submission

    def _get_for_period(
        self, driver_id: UUID, year: int, month: int
    ) -> MonthlySubmissionModel | None:
        return self.session.execute(
            select(MonthlySubmissionModel).where(
                MonthlySubmissionModel.driver_id == driver_id,
                MonthlySubmissionModel.year == year,
                MonthlySubmissionModel.month == month,
            )
        ).scalar_one_or_none()

    def _get_driver(self, driver_id: UUID) -> UserModel:
        driver = self.session.get(UserModel, driver_id)
        if driver is None or driver.role != UserRole.EMPLOYEE.value:
            raise DriverNotFoundError(str(driver_id))
        return driver

    def _require_transition(
        self,
        actor: ActorContext,
        state: SubmissionState,
        action: str,
    ) -> Transition:
        transition = SUBMISSION_WORKFLOW.find_transition(state.value, action)
        if transition is None:
            logger.warning(
                "submission_transition_refused",
                extra={"action": action, "state": state.value},
            )
            raise InvalidStateError(action, state.value)
        if transition.admin_only:
            require_admin(actor, action)
        return transition

    def _stamp_records(
        self, driver_id: UUID, year: int, month: int, state: SubmissionState
    ) -> None:
        first_day, last_day = month_bounds(year, month)
        self.session.execute(
            update(DriveRecordModel)
            .where(
                DriveRecordModel.driver_id == driver_id,
                DriveRecordModel.drive_date >= first_day,
                DriveRecordModel.drive_date <= last_day,
            )
            .values(status=RecordStatus.for_state(state).value)
        )

    # -------------------------------------------------------------------------
    # Driver-initiated transitions
    # -------------------------------------------------------------------------

    def submit(
        self, actor: ActorContext, driver_id: UUID, year: int, month: int
    ) -> SubmissionInfo:
        """
        Submit a month: ABSENT -> PENDING.

        Postconditions:
            - A PENDING row exists with ``submitted_at`` from the clock.
            - The month's records are stamped ``pending`` and locked.

        Raises:
            DuplicateSubmissionError: a row already exists, whatever its status.
        """
        require_driver_access(actor, driver_id, "submit")
        validate_period(year, month)
        self._get_driver(driver_id)

        existing = self._get_for_period(driver_id, year, month)
        state = existing.state if existing is not None else SubmissionState.ABSENT
        if SUBMISSION_WORKFLOW.find_transition(state.value, SUBMIT) is None:
            logger.warning(
                "submission_duplicate_refused",
                extra={
                    "driver_id": str(driver_id),
                    "period": format_period(year, month),
                    "state": state.value,
                },
            )
            raise DuplicateSubmissionError(str(driver_id), year, month, state.value)

        submission = MonthlySubmissionModel(
            driver_id=driver_id,
            year=year,
            month=month,
            status=SubmissionState.PENDING.value,
            submitted_at=self._clock.now(),
            created_by_id=actor.actor_id,
        )
        self.session.add(submission)
        try:
            self.session.flush()
        except IntegrityError as exc:
            # Concurrent submit for the same key; the caller rolls back.
            raise DuplicateSubmissionError(
                str(driver_id), year, month, SubmissionState.PENDING.value
            ) from exc

        self._stamp_records(driver_id, year, month, SubmissionState.PENDING)
        self.session.flush()

        logger.info(
            "submission_submitted",
            extra={
                "submission_id": str(submission.id),
                "driver_id": str(driver_id),
                "period": format_period(year, month),
            },
        )
        return submission.to_dto()

    def cancel_submission(
        self, actor: ActorContext, driver_id: UUID, year: int, month: int
    ) -> None:
        """
        Withdraw a pending submission: PENDING -> ABSENT (row deleted).

        Raises:
            InvalidStateError: nothing submitted, or already completed.
        """
        require_driver_access(actor, driver_id, "cancel_submission")
        validate_period(year, month)

        submission = self._get_for_period(driver_id, year, month)
        state = submission.state if submission is not None else SubmissionState.ABSENT
        self._require_transition(actor, state, CANCEL)

        submission_id = submission.id
        self.session.delete(submission)
        self._stamp_records(driver_id, year, month, SubmissionState.ABSENT)
        self.session.flush()

        logger.info(
            "submission_cancelled",
            extra={
                "submission_id": str(submission_id),
                "driver_id": str(driver_id),
                "period": format_period(year, month),
            },
        )

    # -------------------------------------------------------------------------
    # Settlement
    # -------------------------------------------------------------------------

    def calculate(self, submission: MonthlySubmissionModel) -> SettlementBreakdown:
        """
        Compute the settlement for a submission without writing anything.

        Raises:
            MissingRatesError, MissingFuelPriceError, MissingFuelEfficiencyError
        """
        driver = self._get_driver(submission.driver_id)
        first_day, last_day = month_bounds(submission.year, submission.month)
        distances = self.session.execute(
            select(DriveRecordModel.distance).where(
                DriveRecordModel.driver_id == submission.driver_id,
                DriveRecordModel.drive_date >= first_day,
                DriveRecordModel.drive_date <= last_day,
            )
        ).scalars().all()

        return settle_month(
            year=submission.year,
            month=submission.month,
            driver_id=driver.id,
            vehicle_type=driver.vehicle_type,
            fuel_efficiency=driver.fuel_efficiency,
            total_distance=sum_distance({"distance": d} for d in distances),
            rates=self._rates.get_rates(submission.year, submission.month),
            default_depreciation_rate=self._default_depreciation_rate,
        )

    def complete(self, actor: ActorContext, submission_id: UUID) -> SubmissionInfo:
        """
        Settle a pending submission: PENDING -> COMPLETED.

        Postconditions (success):
            - ``status = completed``; ``completed_at`` from the clock;
              ``completed_by`` is the acting admin.
            - ``settlement_amount`` and its breakdown are stored.
            - The month's records are stamped ``settled``.

        Postconditions (failure):
            - Nothing on the submission has changed.

        Raises:
            InvalidStateError: submission is not PENDING.
            SettlementError subclasses: a settlement input is missing.
        """
        require_admin(actor, "complete")
        submission = self._get_orm(submission_id)

        with LogContext.bind(
            submission_id=str(submission.id), driver_id=str(submission.driver_id)
        ):
            self._require_transition(actor, submission.state, COMPLETE)
            try:
                breakdown = self.calculate(submission)
            except SettlementError as exc:
                logger.warning(
                    "settlement_refused",
                    extra={
                        "period": format_period(submission.year, submission.month),
                        "error_code": exc.code,
                        "reason": str(exc),
                    },
                )
                raise

            submission.status = SubmissionState.COMPLETED.value
            submission.completed_at = self._clock.now()
            submission.completed_by = actor.actor_id
            submission.total_distance = breakdown.total_distance
            submission.fuel_cost = breakdown.fuel_cost
            submission.depreciation_cost = breakdown.depreciation_cost
            submission.settlement_amount = breakdown.settlement_amount
            submission.updated_by_id = actor.actor_id
            self._stamp_records(
                submission.driver_id,
                submission.year,
                submission.month,
                SubmissionState.COMPLETED,
            )
            self.session.flush()

            logger.info(
                "submission_completed",
                extra={
                    "period": format_period(submission.year, submission.month),
                    "total_distance": breakdown.total_distance,
                    "fuel_cost": breakdown.fuel_cost,
                    "depreciation_cost": breakdown.depreciation_cost,
                    "settlement_amount": breakdown.settlement_amount,
                },
            )
        return submission.to_dto()

    def try_settle(self, actor: ActorContext, submission_id: UUID) -> SettlementResult:
        """
        ``complete`` that reports settlement precondition failures as a value.

        Lifecycle, permission and storage errors still raise.
        """
        try:
            return SettlementResult.settled(self.complete(actor, submission_id))
        except SettlementError as exc:
            submission = self.session.get(MonthlySubmissionModel, submission_id)
            return SettlementResult.failed(
                submission_id,
                submission.driver_id if submission is not None else None,
                exc,
            )

    def cancel_completion(
        self, actor: ActorContext, submission_id: UUID
    ) -> SubmissionInfo:
        """
        Reopen a settled submission: COMPLETED -> PENDING.

        Postconditions:
            - ``completed_at``, ``completed_by``, ``settlement_amount`` and
              the breakdown are cleared.
            - The month's records are stamped ``pending``.

        Raises:
            InvalidStateError: submission is not COMPLETED.
        """
        require_admin(actor, "cancel_completion")
        submission = self._get_orm(submission_id)
        self._require_transition(actor, submission.state, CANCEL_COMPLETION)

        submission.status = SubmissionState.PENDING.value
        submission.clear_settlement()
        submission.updated_by_id = actor.actor_id
        self._stamp_records(
            submission.driver_id, submission.year, submission.month, SubmissionState.PENDING
        )
        self.session.flush()

        logger.info(
            "submission_completion_cancelled",
            extra={
                "submission_id": str(submission.id),
                "driver_id": str(submission.driver_id),
                "period": format_period(submission.year, submission.month),
            },
        )
        return submission.to_dto()

    def close_month(
        self, actor: ActorContext, year: int, month: int
    ) -> list[SubmissionInfo]:
        """
        Force every pending submission of a month to COMPLETED.

        No settlement is computed; ``settlement_amount`` keeps whatever
        value it had.  Completed submissions are left alone.

        Returns:
            The submissions that were closed, in submission order.
        """
        require_admin(actor, "close_month")
        validate_period(year, month)

        pending = self.session.execute(
            select(MonthlySubmissionModel)
            .where(
                MonthlySubmissionModel.year == year,
                MonthlySubmissionModel.month == month,
                MonthlySubmissionModel.status == SubmissionState.PENDING.value,
            )
            .order_by(MonthlySubmissionModel.submitted_at)
        ).scalars().all()

        now = self._clock.now()
        for submission in pending:
            self._require_transition(actor, submission.state, CLOSE_MONTH)
            submission.status = SubmissionState.COMPLETED.value
            submission.completed_at = now
            submission.completed_by = actor.actor_id
            submission.updated_by_id = actor.actor_id
            self._stamp_records(
                submission.driver_id, year, month, SubmissionState.COMPLETED
            )
        self.session.flush()

        logger.info(
            "month_closed",
            extra={
                "period": format_period(year, month),
                "closed_count": len(pending),
                "actor_id": str(actor.actor_id),
            },
        )
        return [submission.to_dto() for submission in pending]
