"""
Settings -> Engine Bridges.

Functions that convert EngineSettings into engine parameter objects.
They live in stock_config (the producer) because the engines must NEVER
import stock_config.

Usage:
    from stock_config import get_engine_settings
    from stock_config.bridges import build_expiry_thresholds

    settings = get_engine_settings()
    alerts = classify_expiry_alerts(buckets, now, build_expiry_thresholds(settings))
"""

from __future__ import annotations

from stock_config.schema import EngineSettings
from stock_engines.expiry import ExpiryThresholds
from stock_engines.putaway import PutawayPolicy


def build_expiry_thresholds(settings: EngineSettings) -> ExpiryThresholds:
    return ExpiryThresholds(
        days_ahead=settings.expiry.days_ahead,
        critical_days=settings.expiry.critical_days,
        warning_days=settings.expiry.warning_days,
    )


def build_putaway_policy(settings: EngineSettings) -> PutawayPolicy:
    return PutawayPolicy(
        bucket_weight=settings.putaway.bucket_weight,
        limit=settings.putaway.limit,
    )


def category_indent_marker(settings: EngineSettings) -> str:
    return settings.category.indent_marker

