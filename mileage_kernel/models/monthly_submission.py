"""
Module: mileage_kernel.models.monthly_submission
Responsibility: ORM persistence for a driver's monthly submission -- the
    row whose existence and status drive the record lock and the settlement.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain DTOs only.

Invariants enforced:
    - At most one row per (driver_id, year, month) (uq_submission_period).
    - status is 'pending' or 'completed'.  "No row" is the ABSENT state.
    - settlement_amount and its breakdown are set only while completed.

Failure modes:
    - IntegrityError on a second row for the same (driver, year, month);
      SubmissionService translates it to DuplicateSubmissionError.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mileage_kernel.db.base import TrackedBase, UTCDateTime, UUIDString
from mileage_kernel.domain.dtos import SubmissionInfo, SubmissionState


class MonthlySubmissionModel(TrackedBase):
    """A driver's declaration that a month's records are final."""

    __tablename__ = "monthly_submissions"

    __table_args__ = (
        UniqueConstraint("driver_id", "year", "month", name="uq_submission_period"),
        Index("idx_submission_period_status", "year", "month", "status"),
    )

    driver_id: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    year: Mapped[int] = mapped_column(nullable=False)
    month: Mapped[int] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SubmissionState.PENDING.value
    )
    submitted_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )
    completed_by: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    settlement_amount: Mapped[Decimal | None] = mapped_column(nullable=True)
    total_distance: Mapped[Decimal | None] = mapped_column(nullable=True)
    fuel_cost: Mapped[Decimal | None] = mapped_column(nullable=True)
    depreciation_cost: Mapped[Decimal | None] = mapped_column(nullable=True)

    @property
    def state(self) -> SubmissionState:
        return SubmissionState(self.status)

    def clear_settlement(self) -> None:
        """Drop the completion stamp and every computed amount."""
        self.completed_at = None
        self.completed_by = None
        self.settlement_amount = None
        self.total_distance = None
        self.fuel_cost = None
        self.depreciation_cost = None

    def to_dto(self) -> SubmissionInfo:
        return SubmissionInfo(
            id=self.id,
            driver_id=self.driver_id,
            year=self.year,
            month=self.month,
            status=SubmissionState(self.status),
            submitted_at=self.submitted_at,
            completed_at=self.completed_at,
            completed_by=self.completed_by,
            settlement_amount=self.settlement_amount,
            total_distance=self.total_distance,
            fuel_cost=self.fuel_cost,
            depreciation_cost=self.depreciation_cost,
        )

    def __repr__(self) -> str:
        return (
            f"<MonthlySubmissionModel {self.driver_id} "
            f"{self.year}-{self.month:02d} [{self.status}]>"
        )
