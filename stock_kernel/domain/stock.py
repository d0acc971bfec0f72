"""
Stock -- Immutable stock bucket snapshot.

Responsibility:
    Define the value object every allocation-style engine consumes: one
    countable slice of a product at a warehouse (optionally a shelf
    location, batch, serial number and expiry date).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Built by callers from storage reads; never mutated by the engines.

Invariants enforced:
    - ``0 <= reserved_quantity <= quantity``.
    - Available quantity is derived (``quantity - reserved_quantity``),
      never stored.
    - Quantities are Decimal (coerced on construction).

Failure modes:
    - ValueError on construction with negative or over-reserved quantities.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from stock_kernel.domain.rounding import to_decimal


@dataclass(frozen=True, slots=True)
class StockBucket:
    """
    Snapshot of one stock bucket at the time the caller loaded it.

    Contract:
        Frozen dataclass; the owning store mutates the underlying record
        only after an engine's plan is accepted.

    Guarantees:
        - ``available`` is always ``quantity - reserved_quantity`` and >= 0.
        - Hashable and safe to share across threads.

    Non-goals:
        - Does NOT track bucket status (quarantine, damaged); callers pass
          only buckets that are eligible for the operation.
    """

    bucket_id: str
    product_id: str
    warehouse_id: str
    quantity: Decimal
    created_at: datetime
    reserved_quantity: Decimal = Decimal("0")
    expiry_date: datetime | None = None
    location_id: str | None = None
    batch_number: str | None = None
    serial_number: str | None = None
    unit_cost: int | None = None  # minor currency units

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", to_decimal(self.quantity))
        object.__setattr__(self, "reserved_quantity", to_decimal(self.reserved_quantity))
        if self.quantity < 0:
            raise ValueError(
                f"Bucket {self.bucket_id} quantity cannot be negative, got {self.quantity}"
            )
        if self.reserved_quantity < 0:
            raise ValueError(
                f"Bucket {self.bucket_id} reserved quantity cannot be negative, "
                f"got {self.reserved_quantity}"
            )
        if self.reserved_quantity > self.quantity:
            raise ValueError(
                f"Bucket {self.bucket_id} reserved quantity {self.reserved_quantity} "
                f"exceeds quantity {self.quantity}"
            )

    @property
    def available(self) -> Decimal:
        """Quantity not held for other orders."""
        return self.quantity - self.reserved_quantity

    @property
    def has_expiry(self) -> bool:
        return self.expiry_date is not None

    def is_expired(self, now: datetime) -> bool:
        """True if the bucket expires at or before ``now``."""
        return self.expiry_date is not None and self.expiry_date <= now
