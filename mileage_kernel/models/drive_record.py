"""
Module: mileage_kernel.models.drive_record
Responsibility: ORM persistence for trip records.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain DTOs only.

Invariants enforced:
    - Each record belongs to exactly one driver (driver_id FK to users.id).
    - distance >= 0, stored as Numeric -- never float.
    - status mirrors the submission state of the record's month; it is
      re-stamped by SubmissionService on every transition and never edited
      on its own.

Non-goals:
    - No foreign key to monthly_submissions.  The governing submission is
      found from (driver_id, year(drive_date), month(drive_date)).
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Boolean, Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from mileage_kernel.db.base import TrackedBase
from mileage_kernel.domain.dtos import RecordStatus, TripRecordInfo


class DriveRecordModel(TrackedBase):
    """One logged drive."""

    __tablename__ = "drive_records"

    __table_args__ = (
        Index("idx_drive_records_driver_date", "driver_id", "drive_date"),
        Index("idx_drive_records_status", "status"),
    )

    driver_id: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    drive_date: Mapped[date] = mapped_column(Date, nullable=False)
    departure: Mapped[str] = mapped_column(String(500), nullable=False)
    destination: Mapped[str] = mapped_column(String(500), nullable=False)
    waypoints: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    distance: Mapped[Decimal] = mapped_column(nullable=False)
    is_manual_distance: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    client_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=RecordStatus.DRAFT.value
    )

    def to_dto(self) -> TripRecordInfo:
        return TripRecordInfo(
            id=self.id,
            driver_id=self.driver_id,
            drive_date=self.drive_date,
            departure=self.departure,
            destination=self.destination,
            waypoints=tuple(self.waypoints or ()),
            distance=self.distance,
            is_manual_distance=self.is_manual_distance,
            client_name=self.client_name,
            status=RecordStatus(self.status),
            created_at=self.created_at,
        )

    def __repr__(self) -> str:
        return (
            f"<DriveRecordModel {self.drive_date} {self.departure} -> "
            f"{self.destination} {self.distance}km [{self.status}]>"
        )
