"""ORM models for the mileage kernel."""

from mileage_kernel.models.drive_record import DriveRecordModel
from mileage_kernel.models.fuel_price import MonthlyFuelPriceModel
from mileage_kernel.models.monthly_submission import MonthlySubmissionModel
from mileage_kernel.models.user import UserModel

__all__ = [
    "UserModel",
    "DriveRecordModel",
    "MonthlySubmissionModel",
    "MonthlyFuelPriceModel",
]
