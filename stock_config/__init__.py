"""
stock_config -- single public entrypoint for engine settings.

Responsibility:
    Provides the ONLY way to obtain engine settings at runtime through
    ``get_engine_settings()``.  No engine reads files or environment
    variables; settings flow in as parameters built by
    ``stock_config.bridges``.

Architecture position:
    Configuration -- YAML-driven, validated at load time.
    Sits above ``stock_engines``; engines MUST NEVER import stock_config.

Invariants enforced:
    - Single entrypoint: all runtime settings flow through
      ``get_engine_settings()``.
    - Validation: expiry and putaway thresholds are consistent before
      settings are returned.
    - Deterministic checksum: the same YAML always yields the same
      ``EngineSettings.checksum``.

Failure modes:
    - ``FileNotFoundError`` -- no settings file with the requested name.
    - ``ValueError`` -- validation failures.
    - ``yaml.YAMLError`` -- malformed YAML.

Audit relevance:
    Every successful call emits a ``STOCK_CONFIG_TRACE`` log record with
    the config id, version and checksum.
"""

from __future__ import annotations

import logging
from pathlib import Path

from stock_config.loader import load_yaml_file, parse_engine_settings
from stock_config.schema import EngineSettings

_logger = logging.getLogger("stock_kernel.config")

# Default settings sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

__all__ = ["EngineSettings", "get_engine_settings", "validate_engine_settings"]


def validate_engine_settings(settings: EngineSettings) -> list[str]:
    """Return a list of validation errors (empty if valid)."""
    errors: list[str] = []

    expiry = settings.expiry
    if not 0 <= expiry.critical_days <= expiry.warning_days <= expiry.days_ahead:
        errors.append(
            "expiry: thresholds must satisfy 0 <= critical_days <= "
            "warning_days <= days_ahead"
        )

    if settings.putaway.bucket_weight < 0:
        errors.append("putaway.bucket_weight: must not be negative")
    if settings.putaway.limit < 1:
        errors.append("putaway.limit: must be at least 1")

    return errors


def get_engine_settings(
    name: str = "default",
    config_dir: Path | None = None,
) -> EngineSettings:
    """The ONLY public settings entrypoint.

    Args:
        name: Settings set name (file stem under the sets directory).
        config_dir: Override path to the sets directory.
            Defaults to stock_config/sets/.

    Raises:
        FileNotFoundError: If ``<config_dir>/<name>.yaml`` does not exist.
        ValueError: If validation fails.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    path = sets_dir / f"{name}.yaml"
    if not path.is_file():
        raise FileNotFoundError(f"Engine settings not found: {path}")

    settings = parse_engine_settings(load_yaml_file(path))

    errors = validate_engine_settings(settings)
    if errors:
        raise ValueError(
            "Engine settings validation failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    _logger.info(
        "STOCK_CONFIG_TRACE",
        extra={
            "trace_type": "STOCK_CONFIG_TRACE",
            "config_id": settings.config_id,
            "config_version": settings.version,
            "checksum": settings.checksum,
            "source": str(path),
        },
    )
    return settings
