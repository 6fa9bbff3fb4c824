"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Immutable data structures returned by services and selectors and
    consumed by the settlement calculator: driver profiles, rate table
    entries, trip records, monthly submissions, and the status enums that
    go with them.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    ORM models convert themselves to these DTOs (``to_dto()``); domain code
    never sees an ORM entity.

Invariants enforced:
    - Money and distance fields are ``Decimal``, never float.
    - Trip record status mirrors the submission state of its month; the
      mapping lives in ``RecordStatus.for_state``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID


class VehicleType(str, Enum):
    """Vehicle fuel category; selects exactly one price field of a rate entry."""

    GASOLINE = "gasoline"
    DIESEL = "diesel"
    LPG = "lpg"
    ELECTRIC = "electric"


class UserRole(str, Enum):
    """Role stored on a ``users`` row."""

    EMPLOYEE = "employee"
    ADMIN = "admin"


class SubmissionState(str, Enum):
    """
    Logical state of a (driver, year, month) submission.

    Contract:
        ABSENT means there is no row.  PENDING and COMPLETED are the two
        persisted statuses.
    """

    ABSENT = "absent"
    PENDING = "pending"
    COMPLETED = "completed"


class RecordStatus(str, Enum):
    """Trip record status, mirroring its month's submission state."""

    DRAFT = "draft"
    PENDING = "pending"
    SETTLED = "settled"

    @classmethod
    def for_state(cls, state: SubmissionState) -> RecordStatus:
        return _RECORD_STATUS_BY_STATE[state]


_RECORD_STATUS_BY_STATE = {
    SubmissionState.ABSENT: RecordStatus.DRAFT,
    SubmissionState.PENDING: RecordStatus.PENDING,
    SubmissionState.COMPLETED: RecordStatus.SETTLED,
}


# Widest PIN the users.pin column holds; configured PIN lengths may not exceed it.
MAX_PIN_LENGTH = 8


@dataclass(frozen=True)
class DriverInfo:
    """A driver profile."""

    id: UUID
    name: str
    vehicle_type: VehicleType
    fuel_efficiency: Decimal | None
    pin: str
    role: UserRole = UserRole.EMPLOYEE


@dataclass(frozen=True)
class RateEntry:
    """Fuel prices and depreciation rate for one (year, month)."""

    year: int
    month: int
    gasoline_price: Decimal | None
    diesel_price: Decimal | None
    lpg_price: Decimal | None
    electric_price: Decimal | None
    depreciation_cost: Decimal | None

    def price_for(self, vehicle_type: VehicleType) -> Decimal | None:
        """Price field for a vehicle type.  No fallback across types."""
        return getattr(self, f"{VehicleType(vehicle_type).value}_price")


@dataclass(frozen=True)
class TripRecordInfo:
    """One logged drive."""

    id: UUID
    driver_id: UUID
    drive_date: date
    departure: str
    destination: str
    waypoints: tuple[str, ...]
    distance: Decimal
    is_manual_distance: bool
    client_name: str
    status: RecordStatus
    created_at: datetime | None = None


@dataclass(frozen=True)
class SubmissionInfo:
    """A persisted monthly submission (PENDING or COMPLETED)."""

    id: UUID
    driver_id: UUID
    year: int
    month: int
    status: SubmissionState
    submitted_at: datetime
    completed_at: datetime | None = None
    completed_by: UUID | None = None
    settlement_amount: Decimal | None = None
    total_distance: Decimal | None = None
    fuel_cost: Decimal | None = None
    depreciation_cost: Decimal | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == SubmissionState.COMPLETED


@dataclass(frozen=True)
class MonthlySummary:
    """What a driver sees for one month of records."""

    driver_id: UUID
    year: int
    month: int
    total_distance: Decimal
    record_count: int
    draft_count: int
    state: SubmissionState
