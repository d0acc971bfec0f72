"""
EngineSettings schema.

The typed form of a settings file under ``stock_config/sets/``.  The
loader parses YAML into these frozen dataclasses; bridges translate them
into engine parameter objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CategorySettings:
    indent_marker: str = "— "


@dataclass(frozen=True)
class ExpirySettings:
    days_ahead: int = 90
    critical_days: int = 14
    warning_days: int = 30


@dataclass(frozen=True)
class PutawaySettings:
    bucket_weight: int = 10
    limit: int = 5


@dataclass(frozen=True)
class EngineSettings:
    """One named settings set."""

    config_id: str
    version: int
    description: str = ""
    category: CategorySettings = field(default_factory=CategorySettings)
    expiry: ExpirySettings = field(default_factory=ExpirySettings)
    putaway: PutawaySettings = field(default_factory=PutawaySettings)
    checksum: str = ""
