"""
Configuration Loader (``mileage_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen dataclasses
of ``mileage_config.schema``.  The single public entry point for runtime
config is ``mileage_config.get_active_config()``; nothing else should call
this module directly.

Invariants enforced
-------------------
* Sections that are absent take the schema defaults; values that are
  present but malformed are collected by ``validator.validate_raw`` and
  never silently replaced.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  canonical (sorted-key JSON) form of the raw document.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from mileage_config.schema import (
    DatabaseConfig,
    DistanceConfig,
    DriverConfig,
    LoggingConfig,
    MileageConfig,
    SettlementConfig,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _decimal(value: Any) -> Decimal:
    return Decimal(str(value))


def parse_config(data: dict[str, Any], checksum: str = "") -> MileageConfig:
    """
    Parse a validated raw document into a ``MileageConfig``.

    Preconditions:
        - ``data`` passed ``validator.validate_raw`` with no errors.
    """
    database = data.get("database") or {}
    settlement = data.get("settlement") or {}
    distance = data.get("distance") or {}
    drivers = data.get("drivers") or {}
    logging_section = data.get("logging") or {}

    return MileageConfig(
        config_id=str(data.get("config_id", "default")),
        version=int(data.get("version", 1)),
        database=DatabaseConfig(
            url=database.get("url", DatabaseConfig.url),
            echo=bool(database.get("echo", DatabaseConfig.echo)),
        ),
        settlement=SettlementConfig(
            default_depreciation_rate=_decimal(
                settlement.get(
                    "default_depreciation_rate",
                    SettlementConfig.default_depreciation_rate,
                )
            ),
            currency=settlement.get("currency", SettlementConfig.currency),
        ),
        distance=DistanceConfig(
            road_correction_factor=_decimal(
                distance.get(
                    "road_correction_factor", DistanceConfig.road_correction_factor
                )
            ),
            precision=_decimal(distance.get("precision", DistanceConfig.precision)),
        ),
        drivers=DriverConfig(
            pin_length=int(drivers.get("pin_length", DriverConfig.pin_length)),
        ),
        logging=LoggingConfig(
            level=str(logging_section.get("level", LoggingConfig.level)).upper(),
        ),
        checksum=checksum,
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
