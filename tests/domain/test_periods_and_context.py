"""Tests for period derivation and the acting-user context."""

from datetime import date
from uuid import uuid4

import pytest

from mileage_kernel.domain.context import (
    ActorContext,
    check_access,
    require_admin,
    require_driver_access,
)
from mileage_kernel.domain.dtos import UserRole
from mileage_kernel.domain.periods import format_period, month_bounds, period_of
from mileage_kernel.exceptions import PermissionDeniedError, ValidationError


class TestPeriodOf:

    def test_year_and_month_of_date(self):
        assert period_of(date(2025, 3, 31)) == (2025, 3)
        assert period_of(date(2024, 12, 1)) == (2024, 12)


class TestMonthBounds:

    def test_thirty_one_day_month(self):
        assert month_bounds(2025, 3) == (date(2025, 3, 1), date(2025, 3, 31))

    def test_leap_february(self):
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_common_february(self):
        assert month_bounds(2025, 2) == (date(2025, 2, 1), date(2025, 2, 28))

    @pytest.mark.parametrize("month", [0, 13, -1])
    def test_invalid_month(self, month):
        with pytest.raises(ValidationError, match="month"):
            month_bounds(2025, month)

    def test_bounds_contain_every_day_of_the_month(self):
        first, last = month_bounds(2025, 4)
        assert all(period_of(date(2025, 4, d)) == (2025, 4) for d in range(first.day, last.day + 1))

    def test_format_period(self):
        assert format_period(2025, 3) == "2025-03"


class TestActorContext:

    def test_admin(self):
        actor = ActorContext.admin(uuid4())
        assert actor.is_admin
        assert actor.driver_id is None

    def test_driver(self):
        driver_id = uuid4()
        actor = ActorContext.for_driver(driver_id)
        assert actor.role == UserRole.EMPLOYEE
        assert actor.driver_id == driver_id == actor.actor_id
        assert not actor.is_admin

    def test_admin_may_act_for_anyone(self):
        assert check_access(ActorContext.admin(uuid4()), admin_only=False, driver_id=uuid4()) == (True, "")

    def test_driver_refused_admin_operation(self):
        with pytest.raises(PermissionDeniedError) as exc_info:
            require_admin(ActorContext.for_driver(uuid4()), "save_rates")
        assert exc_info.value.operation == "save_rates"

    def test_driver_refused_other_driver(self):
        with pytest.raises(PermissionDeniedError, match="own records"):
            require_driver_access(ActorContext.for_driver(uuid4()), uuid4(), "submit")

    def test_driver_allowed_own_records(self):
        driver_id = uuid4()
        require_driver_access(ActorContext.for_driver(driver_id), driver_id, "submit")
