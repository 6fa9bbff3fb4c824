"""
Mileage configuration schema.

Frozen dataclasses parsed from a YAML configuration set by
``mileage_config.loader``.  ``MileageConfig`` is the only object handed to
the rest of the system.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class DatabaseConfig:
    url: str = "sqlite:///mileage.db"
    echo: bool = False


@dataclass(frozen=True)
class SettlementConfig:
    """Settlement arithmetic settings."""

    default_depreciation_rate: Decimal = Decimal("140")
    currency: str = "KRW"


@dataclass(frozen=True)
class DistanceConfig:
    """Route estimate settings: straight-line legs times the correction factor."""

    road_correction_factor: Decimal = Decimal("1.3")
    precision: Decimal = Decimal("0.1")


@dataclass(frozen=True)
class DriverConfig:
    pin_length: int = 4


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class MileageConfig:
    """A complete, validated configuration set."""

    config_id: str
    version: int
    database: DatabaseConfig
    settlement: SettlementConfig
    distance: DistanceConfig
    drivers: DriverConfig
    logging: LoggingConfig
    checksum: str = ""
