"""
Module: mileage_kernel.selectors.trip_record_selector
Responsibility: Read-only access to trip records -- the driver's monthly
    list and the summary shown above it.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - A month is the inclusive calendar range from ``month_bounds``.
    - Distances are summed in Decimal with ``sum_distance``; the same set of
      records always gives the same total.
"""

from uuid import UUID

from sqlalchemy import select

from mileage_kernel.domain.distance import sum_distance
from mileage_kernel.domain.dtos import (
    MonthlySummary,
    RecordStatus,
    SubmissionState,
    TripRecordInfo,
)
from mileage_kernel.domain.periods import month_bounds
from mileage_kernel.models.drive_record import DriveRecordModel
from mileage_kernel.models.monthly_submission import MonthlySubmissionModel
from mileage_kernel.selectors.base import BaseSelector


class TripRecordSelector(BaseSelector[DriveRecordModel]):
    """Queries over ``drive_records``."""

    def list_records(self, driver_id: UUID, year: int, month: int) -> list[TripRecordInfo]:
        """A driver's records for one month, newest drive first."""
        first_day, last_day = month_bounds(year, month)
        rows = self.session.execute(
            select(DriveRecordModel)
            .where(
                DriveRecordModel.driver_id == driver_id,
                DriveRecordModel.drive_date >= first_day,
                DriveRecordModel.drive_date <= last_day,
            )
            .order_by(
                DriveRecordModel.drive_date.desc(),
                DriveRecordModel.created_at.desc(),
            )
        ).scalars().all()
        return [row.to_dto() for row in rows]

    def monthly_summary(self, driver_id: UUID, year: int, month: int) -> MonthlySummary:
        """Total distance, record counts and submission state for a month."""
        records = self.list_records(driver_id, year, month)
        status = self.session.execute(
            select(MonthlySubmissionModel.status).where(
                MonthlySubmissionModel.driver_id == driver_id,
                MonthlySubmissionModel.year == year,
                MonthlySubmissionModel.month == month,
            )
        ).scalar_one_or_none()
        return MonthlySummary(
            driver_id=driver_id,
            year=year,
            month=month,
            total_distance=sum_distance(records),
            record_count=len(records),
            draft_count=sum(1 for r in records if r.status == RecordStatus.DRAFT),
            state=SubmissionState(status) if status else SubmissionState.ABSENT,
        )
