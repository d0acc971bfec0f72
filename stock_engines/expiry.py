"""
Module: stock_engines.expiry
Responsibility:
    Classify dated stock by how close it is to expiry, and list the
    buckets that have already expired.  Allocation never hands out expired
    stock; this engine is where that stock becomes visible again.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import stock_kernel.

Invariants enforced:
    - Purity: ``now`` is passed in; the engine never reads the clock.
    - Threshold ordering: ``0 <= critical_days <= warning_days <= days_ahead``.
    - Deterministic output: alerts ordered by expiry date, then bucket id.

Failure modes:
    - ValueError on construction of inconsistent ExpiryThresholds.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum

from stock_engines.tracer import traced_engine
from stock_kernel.domain.stock import StockBucket
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.expiry")


class ExpiryUrgency(str, Enum):
    EXPIRED = "expired"
    CRITICAL = "critical"
    WARNING = "warning"
    NOTICE = "notice"


@dataclass(frozen=True)
class ExpiryThresholds:
    """Day counts that separate the urgency bands."""

    days_ahead: int = 90
    critical_days: int = 14
    warning_days: int = 30

    def __post_init__(self) -> None:
        if not 0 <= self.critical_days <= self.warning_days <= self.days_ahead:
            raise ValueError(
                "Expiry thresholds must satisfy 0 <= critical_days <= "
                f"warning_days <= days_ahead, got critical={self.critical_days} "
                f"warning={self.warning_days} days_ahead={self.days_ahead}"
            )

    def urgency_for(self, days_until_expiry: int) -> ExpiryUrgency:
        if days_until_expiry <= 0:
            return ExpiryUrgency.EXPIRED
        if days_until_expiry <= self.critical_days:
            return ExpiryUrgency.CRITICAL
        if days_until_expiry <= self.warning_days:
            return ExpiryUrgency.WARNING
        return ExpiryUrgency.NOTICE


@dataclass(frozen=True)
class ExpiryAlert:
    bucket_id: str
    product_id: str
    warehouse_id: str
    quantity: Decimal
    expiry_date: datetime
    days_until_expiry: int
    urgency: ExpiryUrgency
    batch_number: str | None = None
    location_id: str | None = None


def days_until(expiry_date: datetime, now: datetime) -> int:
    """Whole days from ``now`` to ``expiry_date``, rounded down."""
    return (expiry_date - now) // timedelta(days=1)


@traced_engine("expiry", "1.0", fingerprint_fields=("buckets", "now", "thresholds"))
def classify_expiry_alerts(
    buckets: Iterable[StockBucket],
    now: datetime,
    thresholds: ExpiryThresholds | None = None,
) -> tuple[ExpiryAlert, ...]:
    """
    Alerts for every bucket with stock expiring within ``days_ahead``.

    Already-expired buckets are included with urgency EXPIRED.
    """
    thresholds = thresholds or ExpiryThresholds()
    horizon = now + timedelta(days=thresholds.days_ahead)

    due = sorted(
        (
            b for b in buckets
            if b.expiry_date is not None and b.quantity > 0 and b.expiry_date <= horizon
        ),
        key=lambda b: (b.expiry_date, b.bucket_id),
    )

    alerts = []
    for bucket in due:
        days = days_until(bucket.expiry_date, now)
        alerts.append(
            ExpiryAlert(
                bucket_id=bucket.bucket_id,
                product_id=bucket.product_id,
                warehouse_id=bucket.warehouse_id,
                quantity=bucket.quantity,
                expiry_date=bucket.expiry_date,
                days_until_expiry=days,
                urgency=thresholds.urgency_for(days),
                batch_number=bucket.batch_number,
                location_id=bucket.location_id,
            )
        )

    logger.info("expiry_alerts_classified", extra={
        "alert_count": len(alerts),
        "expired_count": sum(1 for a in alerts if a.urgency is ExpiryUrgency.EXPIRED),
        "days_ahead": thresholds.days_ahead,
    })
    return tuple(alerts)


def find_expired_buckets(
    buckets: Iterable[StockBucket],
    now: datetime,
) -> tuple[StockBucket, ...]:
    """Buckets past expiry that still hold available stock."""
    return tuple(
        sorted(
            (b for b in buckets if b.is_expired(now) and b.available > 0),
            key=lambda b: (b.expiry_date, b.bucket_id),
        )
    )
