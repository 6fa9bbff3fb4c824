"""
Pytest fixtures for the mileage settlement test suite.

Provides:
- A fresh in-memory SQLite database and session per test
- A DeterministicClock shared by every service under test
- Admin and driver ActorContexts
- Factories for drivers, rate entries, trip records and submissions
- Structured log capture
"""

import json
import logging
from datetime import date
from io import StringIO
from uuid import uuid4

import pytest

from mileage_kernel.db.engine import (
    create_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from mileage_kernel.domain.clock import DeterministicClock
from mileage_kernel.domain.context import ActorContext
from mileage_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from mileage_kernel.selectors import (
    DriverSelector,
    SubmissionSelector,
    TripRecordSelector,
)
from mileage_kernel.services import (
    DriverService,
    RateService,
    SubmissionService,
    TripRecordService,
)

# Test admin for all privileged operations
TEST_ADMIN_ID = uuid4()


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture mileage_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, submission_service):
            submission_service.submit(...)
            logs = captured_logs()
            assert any(r["message"] == "submission_submitted" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("mileage_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    """A fresh in-memory database with all tables, torn down after the test."""
    reset_engine()
    eng = init_engine_from_url("sqlite:///:memory:")
    create_tables()
    yield eng
    reset_engine()


@pytest.fixture
def session(engine):
    """Session for the test.  Services only flush; nothing is committed."""
    sess = get_session()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def clock():
    return DeterministicClock()


@pytest.fixture
def admin():
    return ActorContext.admin(TEST_ADMIN_ID)


# =============================================================================
# Services and selectors
# =============================================================================


@pytest.fixture
def driver_service(session):
    return DriverService(session)


@pytest.fixture
def rate_service(session):
    return RateService(session)


@pytest.fixture
def trip_service(session):
    return TripRecordService(session)


@pytest.fixture
def submission_service(session, clock):
    return SubmissionService(session, clock=clock)


@pytest.fixture
def trip_selector(session):
    return TripRecordSelector(session)


@pytest.fixture
def submission_selector(session):
    return SubmissionSelector(session)


@pytest.fixture
def driver_selector(session):
    return DriverSelector(session)


# =============================================================================
# Data factories
# =============================================================================


@pytest.fixture
def make_driver(driver_service, admin):
    """Factory: register a driver and return its DriverInfo."""
    counter = iter(range(1, 10_000))

    def _make(
        name: str | None = None,
        vehicle_type: str = "gasoline",
        fuel_efficiency="10",
        pin: str = "1234",
    ):
        return driver_service.add_driver(
            admin,
            name=name or f"Driver {next(counter)}",
            pin=pin,
            vehicle_type=vehicle_type,
            fuel_efficiency=fuel_efficiency,
        )

    return _make


@pytest.fixture
def set_rates(rate_service, admin):
    """Factory: save a rate entry; any price can be overridden."""

    def _set(year: int = 2025, month: int = 3, **overrides):
        values = {
            "gasoline_price": "1650",
            "diesel_price": "1500",
            "lpg_price": "1000",
            "electric_price": "300",
            "depreciation_cost": "140",
        }
        values.update(overrides)
        return rate_service.save_rates(admin, year, month, **values)

    return _set


@pytest.fixture
def add_trip(trip_service):
    """Factory: log a drive as the driver themselves."""

    def _add(driver, drive_date: date = date(2025, 3, 10), distance="50", **kwargs):
        kwargs.setdefault("departure", "Head office")
        kwargs.setdefault("destination", "Client site")
        return trip_service.create_record(
            ActorContext.for_driver(driver.id),
            driver.id,
            drive_date,
            distance=distance,
            **kwargs,
        )

    return _add


@pytest.fixture
def submit_month(submission_service):
    """Factory: submit a month as the driver themselves."""

    def _submit(driver, year: int = 2025, month: int = 3):
        return submission_service.submit(
            ActorContext.for_driver(driver.id), driver.id, year, month
        )

    return _submit


@pytest.fixture
def pending_submission(make_driver, set_rates, add_trip, submit_month):
    """One gasoline driver, 200 km in March 2025, March rates set, submitted."""
    driver = make_driver(name="Kim", fuel_efficiency="10")
    set_rates()
    add_trip(driver, date(2025, 3, 3), distance="120")
    add_trip(driver, date(2025, 3, 17), distance="80")
    return driver, submit_month(driver)
