"""
Module: stock_engines.tracking
Responsibility:
    Check that a stock movement of a tracked product carries the tracking
    values the product requires (batch number, expiry date, serial number).

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Failure modes:
    - MissingTrackingFieldError for the first missing field, checked in the
      order batch number, expiry date, serial number.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from stock_kernel.exceptions import MissingTrackingFieldError


@dataclass(frozen=True)
class TrackingRequirements:
    """Which tracking values a product demands."""

    requires_batch: bool = False
    requires_expiry: bool = False
    requires_serial: bool = False

    @property
    def is_tracked(self) -> bool:
        return self.requires_batch or self.requires_expiry or self.requires_serial


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def validate_required_tracking_fields(
    requirements: TrackingRequirements,
    batch_number: str | None = None,
    expiry_date: date | None = None,
    serial_number: str | None = None,
) -> None:
    """Raise MissingTrackingFieldError if a required value is absent.

    Blank or whitespace-only strings count as absent.
    """
    if requirements.requires_batch and _is_blank(batch_number):
        raise MissingTrackingFieldError("batch_number")
    if requirements.requires_expiry and expiry_date is None:
        raise MissingTrackingFieldError("expiry_date")
    if requirements.requires_serial and _is_blank(serial_number):
        raise MissingTrackingFieldError("serial_number")
