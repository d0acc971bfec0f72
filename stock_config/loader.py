"""
Settings Loader (``stock_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into ``stock_config.schema``
dataclasses.  Runtime callers go through
``stock_config.get_engine_settings()`` rather than calling this directly.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Missing optional sections fall back to schema defaults; missing
  required keys (``config_id``, ``version``) raise ``KeyError``.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  settings for change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrongly typed values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from stock_config.schema import (
    CategorySettings,
    EngineSettings,
    ExpirySettings,
    PutawaySettings,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping at top level")
    return data


def _int_field(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Setting {key!r} must be an integer, got {value!r}")
    return value


def parse_category(data: dict[str, Any]) -> CategorySettings:
    return CategorySettings(
        indent_marker=str(data.get("indent_marker", CategorySettings().indent_marker)),
    )


def parse_expiry(data: dict[str, Any]) -> ExpirySettings:
    defaults = ExpirySettings()
    return ExpirySettings(
        days_ahead=_int_field(data, "days_ahead", defaults.days_ahead),
        critical_days=_int_field(data, "critical_days", defaults.critical_days),
        warning_days=_int_field(data, "warning_days", defaults.warning_days),
    )


def parse_putaway(data: dict[str, Any]) -> PutawaySettings:
    defaults = PutawaySettings()
    return PutawaySettings(
        bucket_weight=_int_field(data, "bucket_weight", defaults.bucket_weight),
        limit=_int_field(data, "limit", defaults.limit),
    )


def parse_engine_settings(data: dict[str, Any]) -> EngineSettings:
    """Parse a whole settings document.

    Raises:
        KeyError: ``config_id`` or ``version`` missing.
    """
    return EngineSettings(
        config_id=str(data["config_id"]),
        version=int(data["version"]),
        description=str(data.get("description", "")),
        category=parse_category(data.get("category") or {}),
        expiry=parse_expiry(data.get("expiry") or {}),
        putaway=parse_putaway(data.get("putaway") or {}),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums, independent of
    key order.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
