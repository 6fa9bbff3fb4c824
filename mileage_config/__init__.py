"""
mileage_config -- single public entrypoint for mileage configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``MileageConfig``.

Architecture position:
    Configuration -- YAML-driven.  Sits above ``mileage_kernel``: the
    kernel never imports from this package; callers (the CLI, the bulk
    orchestrator's wiring, tests) pass the values they need into kernel
    services.

Invariants enforced:
    - Single entrypoint: all runtime config flows through
      ``get_active_config()``.
    - Same YAML always produces the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``ConfigValidationError`` -- one or more values are invalid; every
      problem is listed.

Audit relevance:
    Every successful call emits a ``MILEAGE_CONFIG_TRACE`` log entry with
    the config id, version, checksum and the settlement defaults in force,
    so each settlement run can be tied to the configuration that governed
    it.
"""

from __future__ import annotations

from pathlib import Path

from mileage_config.loader import compute_checksum, load_yaml_file, parse_config
from mileage_config.schema import MileageConfig
from mileage_config.validator import ConfigValidationError, validate_raw
from mileage_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"

__all__ = [
    "ConfigValidationError",
    "DEFAULT_CONFIG_PATH",
    "MileageConfig",
    "get_active_config",
]


def get_active_config(config_path: Path | str | None = None) -> MileageConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Override path to a YAML configuration file.
            Defaults to ``mileage_config/sets/default.yaml``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If any value is invalid.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    raw = load_yaml_file(path)

    errors = validate_raw(raw)
    if errors:
        _logger.warning(
            "config_validation_failed",
            extra={"config_path": str(path), "errors": errors},
        )
        raise ConfigValidationError(errors)

    config = parse_config(raw, checksum=compute_checksum(raw))

    _logger.info(
        "MILEAGE_CONFIG_TRACE",
        extra={
            "trace_type": "MILEAGE_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "default_depreciation_rate": config.settlement.default_depreciation_rate,
            "road_correction_factor": config.distance.road_correction_factor,
            "currency": config.settlement.currency,
        },
    )
    return config
