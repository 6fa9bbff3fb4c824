"""
Module: mileage_kernel.selectors.submission_selector
Responsibility: Read-only access to monthly submissions -- the admin review
    list and the per-driver state lookup that gates trip record changes.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - "No row" is reported as ``SubmissionState.ABSENT``, never as None.
    - Review lists are ordered by ``submitted_at`` (oldest first).
"""

from uuid import UUID

from sqlalchemy import select

from mileage_kernel.domain.dtos import SubmissionInfo, SubmissionState
from mileage_kernel.domain.periods import validate_period
from mileage_kernel.models.monthly_submission import MonthlySubmissionModel
from mileage_kernel.selectors.base import BaseSelector


class SubmissionSelector(BaseSelector[MonthlySubmissionModel]):
    """Queries over ``monthly_submissions``."""

    def get_submission(
        self, driver_id: UUID, year: int, month: int
    ) -> SubmissionInfo | None:
        """The submission for (driver, year, month), or None if unsubmitted."""
        row = self.session.execute(
            select(MonthlySubmissionModel).where(
                MonthlySubmissionModel.driver_id == driver_id,
                MonthlySubmissionModel.year == year,
                MonthlySubmissionModel.month == month,
            )
        ).scalar_one_or_none()
        return row.to_dto() if row is not None else None

    def get_by_id(self, submission_id: UUID) -> SubmissionInfo | None:
        row = self.session.get(MonthlySubmissionModel, submission_id)
        return row.to_dto() if row is not None else None

    def state_of(self, driver_id: UUID, year: int, month: int) -> SubmissionState:
        submission = self.get_submission(driver_id, year, month)
        return submission.status if submission is not None else SubmissionState.ABSENT

    def list_submissions(
        self,
        year: int,
        month: int,
        status: SubmissionState | None = None,
    ) -> list[SubmissionInfo]:
        """
        Submissions of a month, oldest submission first.

        Args:
            status: restrict to PENDING or COMPLETED.  ABSENT matches nothing.
        """
        validate_period(year, month)
        query = select(MonthlySubmissionModel).where(
            MonthlySubmissionModel.year == year,
            MonthlySubmissionModel.month == month,
        )
        if status is not None:
            query = query.where(
                MonthlySubmissionModel.status == SubmissionState(status).value
            )
        rows = self.session.execute(
            query.order_by(
                MonthlySubmissionModel.submitted_at, MonthlySubmissionModel.id
            )
        ).scalars().all()
        return [row.to_dto() for row in rows]
