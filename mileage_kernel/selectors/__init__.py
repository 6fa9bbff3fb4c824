"""Read-only selectors over the mileage tables."""

from mileage_kernel.selectors.driver_selector import DriverSelector
from mileage_kernel.selectors.submission_selector import SubmissionSelector
from mileage_kernel.selectors.trip_record_selector import TripRecordSelector

__all__ = [
    "DriverSelector",
    "SubmissionSelector",
    "TripRecordSelector",
]
