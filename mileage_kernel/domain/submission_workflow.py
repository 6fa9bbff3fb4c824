"""Monthly submission workflow.

State machine for a driver's (year, month) submission, and the trip-record
mutability it implies.
"""

from __future__ import annotations

from mileage_kernel.domain.dtos import SubmissionState
from mileage_kernel.domain.workflow import Guard, Transition, Workflow
from mileage_kernel.exceptions import (
    RecordLockError,
    SettlementLockedError,
    SubmissionPendingError,
)
from mileage_kernel.logging_config import get_logger

logger = get_logger("domain.submission_workflow")

ABSENT = SubmissionState.ABSENT.value
PENDING = SubmissionState.PENDING.value
COMPLETED = SubmissionState.COMPLETED.value

# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

SETTLEMENT_INPUTS_PRESENT = Guard(
    name="settlement_inputs_present",
    description="Month has a rate entry with a price for the driver's vehicle "
    "type, and the driver has a fuel efficiency",
)

# -----------------------------------------------------------------------------
# Actions
# -----------------------------------------------------------------------------

SUBMIT = "submit"
CANCEL = "cancel"
COMPLETE = "complete"
CANCEL_COMPLETION = "cancel_completion"
CLOSE_MONTH = "close_month"

SUBMISSION_WORKFLOW = Workflow(
    name="monthly_submission",
    description="Driver monthly submission lifecycle",
    initial_state=ABSENT,
    states=(ABSENT, PENDING, COMPLETED),
    transitions=(
        Transition(ABSENT, PENDING, action=SUBMIT),
        Transition(PENDING, ABSENT, action=CANCEL),
        Transition(
            PENDING, COMPLETED, action=COMPLETE,
            guard=SETTLEMENT_INPUTS_PRESENT, admin_only=True,
        ),
        Transition(COMPLETED, PENDING, action=CANCEL_COMPLETION, admin_only=True),
        Transition(PENDING, COMPLETED, action=CLOSE_MONTH, admin_only=True),
    ),
)

logger.debug(
    "submission_workflow_defined",
    extra={
        "states": list(SUBMISSION_WORKFLOW.states),
        "actions": [t.action for t in SUBMISSION_WORKFLOW.transitions],
    },
)


def records_mutable(state: SubmissionState) -> bool:
    """Trip records may be created or deleted only while nothing is submitted.

    A pending submission freezes its records during review, the same as a
    completed one.
    """
    return SubmissionState(state) == SubmissionState.ABSENT


def lock_error_for(
    state: SubmissionState, driver_id: str, year: int, month: int
) -> RecordLockError | None:
    """The error a record mutation raises in ``state``, or None if allowed."""
    state = SubmissionState(state)
    if state == SubmissionState.COMPLETED:
        return SettlementLockedError(driver_id, year, month)
    if state == SubmissionState.PENDING:
        return SubmissionPendingError(driver_id, year, month)
    return None
