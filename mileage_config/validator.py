"""
Configuration validation.

``validate_raw`` checks a raw YAML document and returns every problem it
finds, so that a broken file is reported in one pass rather than one error
at a time.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from mileage_kernel.domain.dtos import MAX_PIN_LENGTH

_KNOWN_SECTIONS = frozenset(
    {"config_id", "version", "database", "settlement", "distance", "drivers", "logging"}
)


class ConfigValidationError(Exception):
    """The configuration document failed validation.

    Attributes:
        errors: Every problem found, one message each.
    """

    code: str = "CONFIG_INVALID"

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _number(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def validate_raw(data: Any) -> list[str]:
    """Return a list of validation errors; empty means valid."""
    if not isinstance(data, dict):
        return ["configuration must be a mapping"]

    errors: list[str] = []
    for key in data:
        if key not in _KNOWN_SECTIONS:
            errors.append(f"unknown section '{key}'")

    for section in _KNOWN_SECTIONS - {"config_id", "version"}:
        if section in data and not isinstance(data[section] or {}, dict):
            errors.append(f"section '{section}' must be a mapping")
    if errors:
        return errors

    database = data.get("database") or {}
    if "url" in database and (not isinstance(database["url"], str) or not database["url"]):
        errors.append("database.url must be a non-empty string")

    settlement = data.get("settlement") or {}
    if "default_depreciation_rate" in settlement:
        rate = _number(settlement["default_depreciation_rate"])
        if rate is None or rate < 0:
            errors.append("settlement.default_depreciation_rate must be a number >= 0")
    if "currency" in settlement and not isinstance(settlement["currency"], str):
        errors.append("settlement.currency must be a string")

    distance = data.get("distance") or {}
    if "road_correction_factor" in distance:
        factor = _number(distance["road_correction_factor"])
        if factor is None or factor <= 0:
            errors.append("distance.road_correction_factor must be a number > 0")
    if "precision" in distance:
        precision = _number(distance["precision"])
        if precision is None or precision <= 0:
            errors.append("distance.precision must be a number > 0")

    drivers = data.get("drivers") or {}
    if "pin_length" in drivers:
        pin_length = drivers["pin_length"]
        if (
            isinstance(pin_length, bool)
            or not isinstance(pin_length, int)
            or not 1 <= pin_length <= MAX_PIN_LENGTH
        ):
            errors.append(
                f"drivers.pin_length must be an integer from 1 to {MAX_PIN_LENGTH}"
            )

    logging_section = data.get("logging") or {}
    if "level" in logging_section:
        level = str(logging_section["level"]).upper()
        if not isinstance(logging.getLevelName(level), int):
            errors.append(f"logging.level '{logging_section['level']}' is not a logging level")

    if "version" in data and (isinstance(data["version"], bool) or not isinstance(data["version"], int)):
        errors.append("version must be an integer")

    return errors
