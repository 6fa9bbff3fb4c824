"""
BulkSettlementOrchestrator -- settle every pending submission of a month.

Contract:
    ``bulk_settle(actor, year, month)`` applies the single-submission
    settlement to each PENDING submission of the month, one at a time in
    ``submitted_at`` order, and returns a ``BulkSettlementResult``.

Architecture: mileage_batch (top-level).  Composes the kernel's
    SubmissionService and SubmissionSelector; the kernel never imports from
    this package.

Invariants enforced:
    - Per-item isolation: a settlement precondition failure on one item is
      recorded as a failed ``SettlementResult`` and does not stop the batch
      or undo earlier successes.  The calculator validates every input
      before the submission is touched, so a failed item has written
      nothing.
    - Storage and permission errors are not per-item failures; they abort
      the run and propagate to the caller.
    - Clock injection: timestamps on the result and on every completed
      submission come from the same Clock.
    - The batch id is bound into the log context for the whole run.
"""

from __future__ import annotations

import time
from decimal import Decimal
from uuid import uuid4

from sqlalchemy.orm import Session

from mileage_batch.domain.types import BulkSettlementResult
from mileage_kernel.domain.clock import Clock, SystemClock
from mileage_kernel.domain.context import ActorContext, require_admin
from mileage_kernel.domain.dtos import SubmissionState
from mileage_kernel.domain.periods import format_period
from mileage_kernel.domain.settlement import DEFAULT_DEPRECIATION_RATE
from mileage_kernel.logging_config import LogContext, get_logger
from mileage_kernel.selectors.submission_selector import SubmissionSelector
from mileage_kernel.services.submission_service import SubmissionService

logger = get_logger("batch.bulk_settlement")


class BulkSettlementOrchestrator:
    """Runs month-end bulk settlement."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        default_depreciation_rate: Decimal = DEFAULT_DEPRECIATION_RATE,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._submissions = SubmissionService(
            session,
            clock=self._clock,
            default_depreciation_rate=default_depreciation_rate,
        )
        self._selector = SubmissionSelector(session)

    def bulk_settle(
        self, actor: ActorContext, year: int, month: int
    ) -> BulkSettlementResult:
        """
        Settle every PENDING submission of (year, month).

        Postconditions:
            - Each item that settled is COMPLETED with its amount stored.
            - Each item that failed is still PENDING and unchanged.
            - Completed submissions of the month are not recomputed.
        """
        require_admin(actor, "bulk_settle")
        batch_id = uuid4()
        period = format_period(year, month)

        with LogContext.bind(batch_id=str(batch_id), actor_id=str(actor.actor_id)):
            pending = self._selector.list_submissions(
                year, month, status=SubmissionState.PENDING
            )
            started_at = self._clock.now()
            start_time = time.monotonic()
            logger.info(
                "bulk_settlement_started",
                extra={"period": period, "pending_count": len(pending)},
            )

            items = []
            for submission in pending:
                result = self._submissions.try_settle(actor, submission.id)
                if not result.is_success:
                    logger.warning(
                        "bulk_settlement_item_failed",
                        extra={
                            "submission_id": str(submission.id),
                            "driver_id": str(submission.driver_id),
                            "error_code": result.error_code,
                            "reason": result.error_message,
                        },
                    )
                items.append(result)

            result = BulkSettlementResult(
                batch_id=batch_id,
                year=year,
                month=month,
                items=tuple(items),
                started_at=started_at,
                completed_at=self._clock.now(),
                duration_ms=int((time.monotonic() - start_time) * 1000),
            )
            logger.info(
                "bulk_settlement_completed",
                extra={
                    "period": period,
                    "success_count": result.success_count,
                    "fail_count": result.fail_count,
                    "duration_ms": result.duration_ms,
                },
            )
        return result
