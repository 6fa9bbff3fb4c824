"""
Tests for DriverService: validation, updates, cascade delete, PIN login.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from mileage_kernel.domain.context import ActorContext
from mileage_kernel.domain.dtos import MAX_PIN_LENGTH, UserRole, VehicleType
from mileage_kernel.exceptions import (
    AuthenticationError,
    DriverNotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from mileage_kernel.models import DriveRecordModel, MonthlySubmissionModel, UserModel
from mileage_kernel.services import DriverService


class TestAddDriver:

    def test_persists_employee(self, driver_service, admin, session):
        driver = driver_service.add_driver(
            admin, name="Kim", pin="0420", vehicle_type="diesel", fuel_efficiency="14.2"
        )

        assert driver.role == UserRole.EMPLOYEE
        assert driver.vehicle_type == VehicleType.DIESEL
        assert driver.fuel_efficiency == Decimal("14.2")
        assert driver.pin == "0420"
        row = session.get(UserModel, driver.id)
        assert row.created_by_id == admin.actor_id

    @pytest.mark.parametrize("pin", ["123", "12345", "12a4", "", None, "١٢٣٤"])
    def test_pin_must_be_four_digits(self, driver_service, admin, pin):
        with pytest.raises(ValidationError, match="pin"):
            driver_service.add_driver(
                admin, name="Kim", pin=pin, vehicle_type="gasoline", fuel_efficiency="10"
            )

    @pytest.mark.parametrize("efficiency", ["0", "-1", "abc", None, ""])
    def test_fuel_efficiency_must_be_positive(self, driver_service, admin, efficiency):
        with pytest.raises(ValidationError, match="fuel_efficiency"):
            driver_service.add_driver(
                admin, name="Kim", pin="1234", vehicle_type="gasoline",
                fuel_efficiency=efficiency,
            )

    def test_unknown_vehicle_type(self, driver_service, admin):
        with pytest.raises(ValidationError, match="vehicle_type"):
            driver_service.add_driver(
                admin, name="Kim", pin="1234", vehicle_type="hydrogen", fuel_efficiency="10"
            )

    def test_blank_name(self, driver_service, admin):
        with pytest.raises(ValidationError, match="name"):
            driver_service.add_driver(
                admin, name="  ", pin="1234", vehicle_type="gasoline", fuel_efficiency="10"
            )

    def test_driver_cannot_add_drivers(self, driver_service):
        with pytest.raises(PermissionDeniedError):
            driver_service.add_driver(
                ActorContext.for_driver(uuid4()),
                name="Kim", pin="1234", vehicle_type="gasoline", fuel_efficiency="10",
            )

    def test_logs_driver_added_without_pin(self, driver_service, admin, captured_logs):
        driver_service.add_driver(
            admin, name="Kim", pin="9876", vehicle_type="lpg", fuel_efficiency="9"
        )
        record = next(r for r in captured_logs() if r["message"] == "driver_added")
        assert record["vehicle_type"] == "lpg"
        assert "9876" not in str(record)


class TestPinLength:

    def test_configured_length_fits_the_column(self, session, admin):
        service = DriverService(session, pin_length=MAX_PIN_LENGTH)
        pin = "1" * MAX_PIN_LENGTH

        driver = service.add_driver(
            admin, name="Kim", pin=pin, vehicle_type="gasoline", fuel_efficiency="10"
        )

        assert UserModel.__table__.c.pin.type.length >= MAX_PIN_LENGTH
        session.expire_all()
        assert session.get(UserModel, driver.id).pin == pin

    def test_six_digit_pins(self, session, admin):
        service = DriverService(session, pin_length=6)
        service.add_driver(
            admin, name="Kim", pin="123456", vehicle_type="gasoline", fuel_efficiency="10"
        )
        with pytest.raises(ValidationError, match="6 digits"):
            service.add_driver(
                admin, name="Lee", pin="1234", vehicle_type="gasoline", fuel_efficiency="10"
            )

    @pytest.mark.parametrize("length", [0, MAX_PIN_LENGTH + 1])
    def test_length_outside_column_width_rejected(self, session, length):
        with pytest.raises(ValidationError, match="pin_length"):
            DriverService(session, pin_length=length)


class TestUpdateDriver:

    def test_overwrites_all_fields(self, driver_service, admin, make_driver):
        driver = make_driver(name="Kim")

        updated = driver_service.update_driver(
            admin, driver.id, name="Kim Jisoo", pin="5555",
            vehicle_type="electric", fuel_efficiency="6.1",
        )

        assert updated.id == driver.id
        assert updated.name == "Kim Jisoo"
        assert updated.pin == "5555"
        assert updated.vehicle_type == VehicleType.ELECTRIC
        assert updated.fuel_efficiency == Decimal("6.1")

    def test_same_validation_as_add(self, driver_service, admin, make_driver):
        driver = make_driver()
        with pytest.raises(ValidationError):
            driver_service.update_driver(
                admin, driver.id, name="Kim", pin="12", vehicle_type="gasoline",
                fuel_efficiency="10",
            )

    def test_unknown_driver(self, driver_service, admin):
        with pytest.raises(DriverNotFoundError):
            driver_service.update_driver(
                admin, uuid4(), name="Kim", pin="1234", vehicle_type="gasoline",
                fuel_efficiency="10",
            )


class TestDeleteDriver:
    """Deleting a driver removes their records; other drivers are untouched."""

    def test_cascade_delete_removes_only_that_drivers_records(
        self, driver_service, admin, make_driver, add_trip, submit_month, session
    ):
        leaving = make_driver(name="Leaving")
        staying = make_driver(name="Staying")
        add_trip(leaving, date(2025, 3, 1))
        add_trip(leaving, date(2025, 4, 2))
        add_trip(staying, date(2025, 3, 1))
        submit_month(leaving, 2025, 4)

        removed = driver_service.delete_driver(admin, leaving.id)

        assert removed == {"records": 2, "submissions": 1}
        assert session.get(UserModel, leaving.id) is None
        remaining = session.execute(select(DriveRecordModel.driver_id)).scalars().all()
        assert remaining == [staying.id]
        assert session.execute(
            select(func.count()).select_from(MonthlySubmissionModel)
        ).scalar_one() == 0

    def test_unknown_driver(self, driver_service, admin):
        with pytest.raises(DriverNotFoundError):
            driver_service.delete_driver(admin, uuid4())

    def test_driver_cannot_delete(self, driver_service, make_driver):
        driver = make_driver()
        with pytest.raises(PermissionDeniedError):
            driver_service.delete_driver(ActorContext.for_driver(driver.id), driver.id)


class TestAuthenticate:

    def test_name_and_pin_match(self, driver_service, make_driver):
        driver = make_driver(name="Park", pin="4321")

        actor = driver_service.authenticate("Park", "4321")

        assert actor == ActorContext.for_driver(driver.id)

    def test_wrong_pin(self, driver_service, make_driver, captured_logs):
        make_driver(name="Park", pin="4321")

        with pytest.raises(AuthenticationError):
            driver_service.authenticate("Park", "0000")

        failed = [r for r in captured_logs() if r["message"] == "driver_login_failed"]
        assert failed and failed[0]["level"] == "WARNING"

    def test_unknown_name(self, driver_service):
        with pytest.raises(AuthenticationError):
            driver_service.authenticate("Nobody", "1234")
