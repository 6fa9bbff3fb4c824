"""Tests for the read-only selectors."""

from datetime import date
from decimal import Decimal

from mileage_kernel.domain.context import ActorContext
from mileage_kernel.domain.dtos import SubmissionState


class TestTripRecordSelector:

    def test_list_records_newest_first(self, make_driver, add_trip, trip_selector):
        driver = make_driver()
        add_trip(driver, date(2025, 3, 5))
        add_trip(driver, date(2025, 3, 28))
        add_trip(driver, date(2025, 3, 1))
        add_trip(driver, date(2025, 4, 1))

        records = trip_selector.list_records(driver.id, 2025, 3)

        assert [r.drive_date.day for r in records] == [28, 5, 1]

    def test_list_records_only_that_driver(self, make_driver, add_trip, trip_selector):
        mine, theirs = make_driver(), make_driver()
        add_trip(mine)
        add_trip(theirs)

        assert {r.driver_id for r in trip_selector.list_records(mine.id, 2025, 3)} == {mine.id}

    def test_monthly_summary(self, make_driver, add_trip, trip_selector):
        driver = make_driver()
        add_trip(driver, date(2025, 3, 2), distance="12.5")
        add_trip(driver, date(2025, 3, 9), manual_distance="7.5")

        summary = trip_selector.monthly_summary(driver.id, 2025, 3)

        assert summary.total_distance == Decimal("20.0")
        assert summary.record_count == 2
        assert summary.draft_count == 2
        assert summary.state == SubmissionState.ABSENT

    def test_monthly_summary_after_submit(
        self, make_driver, add_trip, submit_month, trip_selector
    ):
        driver = make_driver()
        add_trip(driver, date(2025, 3, 2))
        submit_month(driver, 2025, 3)

        summary = trip_selector.monthly_summary(driver.id, 2025, 3)

        assert summary.draft_count == 0
        assert summary.state == SubmissionState.PENDING

    def test_empty_month(self, make_driver, trip_selector):
        summary = trip_selector.monthly_summary(make_driver().id, 2025, 3)
        assert summary.total_distance == Decimal("0")
        assert summary.record_count == 0


class TestSubmissionSelector:

    def test_list_submissions_in_submission_order(
        self, make_driver, submission_service, submission_selector, clock
    ):
        drivers = [make_driver() for _ in range(3)]
        for driver in reversed(drivers):
            clock.advance(60)
            submission_service.submit(ActorContext.for_driver(driver.id), driver.id, 2025, 3)

        listed = submission_selector.list_submissions(2025, 3)

        assert [s.driver_id for s in listed] == [d.id for d in reversed(drivers)]

    def test_filter_by_status(
        self, pending_submission, make_driver, submit_month, submission_service,
        submission_selector, admin,
    ):
        _, settled = pending_submission
        submission_service.complete(admin, settled.id)
        other = submit_month(make_driver(), 2025, 3)

        pending = submission_selector.list_submissions(2025, 3, SubmissionState.PENDING)
        completed = submission_selector.list_submissions(2025, 3, SubmissionState.COMPLETED)

        assert [s.id for s in pending] == [other.id]
        assert [s.id for s in completed] == [settled.id]

    def test_get_submission_and_state(self, make_driver, submit_month, submission_selector):
        driver = make_driver()
        assert submission_selector.get_submission(driver.id, 2025, 3) is None
        assert submission_selector.state_of(driver.id, 2025, 3) == SubmissionState.ABSENT

        submitted = submit_month(driver, 2025, 3)

        assert submission_selector.get_submission(driver.id, 2025, 3) == submitted
        assert submission_selector.get_by_id(submitted.id) == submitted


class TestDriverSelector:

    def test_lists_employees_by_name(self, make_driver, driver_selector):
        make_driver(name="Yoon")
        make_driver(name="Ahn")

        assert [d.name for d in driver_selector.list_drivers()] == ["Ahn", "Yoon"]

    def test_get_driver(self, make_driver, driver_selector):
        driver = make_driver(name="Ahn")
        assert driver_selector.get_driver(driver.id) == driver
