"""Write-side services for the mileage kernel."""

from mileage_kernel.services.driver_service import DriverService
from mileage_kernel.services.rate_service import RateService
from mileage_kernel.services.submission_service import (
    SettlementResult,
    SettlementStatus,
    SubmissionService,
)
from mileage_kernel.services.trip_record_service import TripRecordService

__all__ = [
    "DriverService",
    "RateService",
    "SettlementResult",
    "SettlementStatus",
    "SubmissionService",
    "TripRecordService",
]
