"""Tests for the structured logging system (mileage_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from mileage_kernel.exceptions import MissingRatesError
from mileage_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests, then restore the suite's configuration."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "mileage_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("rates_saved", extra={"period": "2025-03", "inserted": True})

        record = _parse_log(stream)
        assert record["period"] == "2025-03"
        assert record["inserted"] is True

    def test_decimal_and_uuid_serialized_as_strings(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        submission_id = uuid4()
        get_logger("test").info(
            "submission_completed",
            extra={"settlement_amount": Decimal("61000"), "sid": submission_id},
        )

        record = _parse_log(stream)
        assert record["settlement_amount"] == "61000"
        assert record["sid"] == str(submission_id)

    def test_exception_code_and_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise MissingRatesError(2025, 3)
        except MissingRatesError:
            get_logger("test").warning("settlement_refused", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "MissingRatesError"
        assert record["exc_code"] == "MISSING_RATES"
        assert record["exc_year"] == 2025
        assert record["exc_month"] == 3
        assert "traceback" in record


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(correlation_id="req-1", actor_id="admin-1")
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["correlation_id"] == "req-1"
        assert record["actor_id"] == "admin-1"

    def test_bind_restores_previous_values(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        LogContext.set(batch_id="outer")

        with LogContext.bind(batch_id="inner", submission_id="s-1"):
            logger.info("inside")
        logger.info("outside")

        inside, outside = _parse_all_logs(stream)
        assert inside["batch_id"] == "inner"
        assert inside["submission_id"] == "s-1"
        assert outside["batch_id"] == "outer"
        assert "submission_id" not in outside

    def test_bind_converts_uuids_to_strings(self):
        driver_id = uuid4()
        with LogContext.bind(driver_id=driver_id):
            assert LogContext.get_all()["driver_id"] == str(driver_id)

    def test_clear_removes_all_fields(self):
        LogContext.set(correlation_id="x", batch_id="y")
        LogContext.clear()
        assert LogContext.get_all() == {}


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:

    def test_idempotent(self):
        handler, _ = _make_handler()
        second = logging.StreamHandler(StringIO())
        configure_logging(handler=handler)
        configure_logging(handler=second)

        # pytest attaches its own capture handlers, so check membership only
        handlers = logging.getLogger("mileage_kernel").handlers
        assert handlers.count(handler) == 1
        assert second not in handlers

    def test_level_applied(self):
        handler, stream = _make_handler()
        configure_logging(level=logging.WARNING, handler=handler)
        logger = get_logger("test")
        logger.info("dropped")
        logger.warning("kept")

        records = _parse_all_logs(stream)
        assert [r["message"] for r in records] == ["kept"]
