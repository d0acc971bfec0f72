"""
Module: stock_engines.shipment
Responsibility:
    Compose a complete shipment for every outstanding line of a sales
    order (smallest-bucket-first per line), and hold the status rules that
    surround shipping.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Composes stock_engines.allocation; may only import stock_kernel
    otherwise.

Invariants enforced:
    - Full-or-nothing: if any outstanding line cannot be covered the whole
      call fails; no partial shipment is ever returned.
    - No double counting: quantity planned for an earlier line is deducted
      from a bucket before later lines of the same order allocate from it.
    - Empty input is a named condition (EmptyShipmentError), never an
      empty success.

Failure modes:
    - LineUnshippableError naming the product of the first uncoverable line.
    - EmptyShipmentError when no line has outstanding quantity.
    - ShipmentQuantityExceededError / OrderNotShippableError from the rules
      helpers.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from stock_engines.allocation import AllocationEngine, AllocationStrategy
from stock_engines.tracer import traced_engine
from stock_kernel.domain.rounding import to_decimal
from stock_kernel.domain.stock import StockBucket
from stock_kernel.exceptions import (
    EmptyShipmentError,
    InsufficientStockError,
    LineUnshippableError,
    OrderNotShippableError,
    ShipmentQuantityExceededError,
)
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.shipment")


class OrderStatus(str, Enum):
    """Sales order lifecycle states."""

    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"
    PARTIALLY_FULFILLED = "PARTIALLY_FULFILLED"
    FULFILLED = "FULFILLED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


ALLOWED_SHIP_ORDER_STATUSES: frozenset[OrderStatus] = frozenset({
    OrderStatus.CONFIRMED,
    OrderStatus.PARTIALLY_FULFILLED,
})


@dataclass(frozen=True)
class OrderLineSnapshot:
    """A sales order line with what has been shipped so far."""

    line_id: str
    product_id: str
    quantity: Decimal
    shipped_quantity: Decimal = Decimal("0")
    sku: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", to_decimal(self.quantity))
        object.__setattr__(self, "shipped_quantity", to_decimal(self.shipped_quantity))

    @property
    def remaining(self) -> Decimal:
        return self.quantity - self.shipped_quantity


@dataclass(frozen=True)
class ShipmentOrder:
    """The order snapshot a shipment is built from."""

    order_id: str
    lines: tuple[OrderLineSnapshot, ...]
    status: OrderStatus = OrderStatus.CONFIRMED


@dataclass(frozen=True)
class ShipmentLine:
    """Quantity of one order line taken from one bucket."""

    order_line_id: str
    bucket_id: str
    product_id: str
    quantity: Decimal


def _with_consumed(bucket: StockBucket, consumed: Decimal) -> StockBucket:
    if not consumed:
        return bucket
    return dataclasses.replace(
        bucket, reserved_quantity=bucket.reserved_quantity + consumed
    )


@traced_engine("shipment", "1.0", fingerprint_fields=("order", "buckets"))
def build_shipment_lines(
    order: ShipmentOrder,
    buckets: Iterable[StockBucket],
    engine: AllocationEngine | None = None,
) -> tuple[ShipmentLine, ...]:
    """
    Plan a complete shipment of every outstanding line.

    Each line with ``remaining > 0`` is allocated smallest-bucket-first over
    buckets of its product.

    Raises:
        LineUnshippableError: A line's remaining quantity cannot be covered.
        EmptyShipmentError: No line has outstanding quantity.
    """
    engine = engine or AllocationEngine()
    snapshot = list(buckets)
    consumed: dict[str, Decimal] = {}
    shipment_lines: list[ShipmentLine] = []

    for line in order.lines:
        remaining = line.remaining
        if remaining <= 0:
            continue

        candidates = [
            _with_consumed(b, consumed.get(b.bucket_id, Decimal("0")))
            for b in snapshot
            if b.product_id == line.product_id
        ]
        try:
            plan = engine.allocate(
                demand_quantity=remaining,
                buckets=candidates,
                strategy=AllocationStrategy.SMALLEST_FIRST,
                product_id=line.product_id,
            )
        except InsufficientStockError as exc:
            logger.warning("shipment_line_unshippable", extra={
                "order_id": order.order_id,
                "line_id": line.line_id,
                "product_id": line.product_id,
                "requested": str(exc.requested),
                "allocated": str(exc.allocated),
            })
            raise LineUnshippableError(
                product_id=line.product_id,
                line_id=line.line_id,
                requested=exc.requested,
                allocated=exc.allocated,
                sku=line.sku,
            ) from exc

        for entry in plan.entries:
            consumed[entry.bucket_id] = (
                consumed.get(entry.bucket_id, Decimal("0")) + entry.quantity_taken
            )
            shipment_lines.append(
                ShipmentLine(
                    order_line_id=line.line_id,
                    bucket_id=entry.bucket_id,
                    product_id=line.product_id,
                    quantity=entry.quantity_taken,
                )
            )

    if not shipment_lines:
        logger.info("shipment_nothing_to_ship", extra={"order_id": order.order_id})
        raise EmptyShipmentError(order.order_id)

    logger.info("shipment_lines_built", extra={
        "order_id": order.order_id,
        "shipment_line_count": len(shipment_lines),
        "bucket_count": len(consumed),
    })
    return tuple(shipment_lines)


# ---------------------------------------------------------------------------
# Shipment rules
# ---------------------------------------------------------------------------


def assert_order_shippable(status: OrderStatus | str) -> None:
    """Raises OrderNotShippableError unless the order may be shipped.

    Status strings are accepted; one outside OrderStatus is not shippable.
    """
    if status not in ALLOWED_SHIP_ORDER_STATUSES:
        label = status.value if isinstance(status, OrderStatus) else str(status)
        raise OrderNotShippableError(label)


def validate_shipment_line_quantity(
    line: OrderLineSnapshot,
    quantity: Decimal | int,
) -> None:
    """Raises ShipmentQuantityExceededError if ``quantity`` exceeds what remains."""
    requested = to_decimal(quantity)
    if requested > line.remaining:
        raise ShipmentQuantityExceededError(line.line_id, requested, line.remaining)


def next_order_status_after_shipment(all_shipped: bool, any_shipped: bool) -> OrderStatus:
    if all_shipped:
        return OrderStatus.FULFILLED
    if any_shipped:
        return OrderStatus.PARTIALLY_FULFILLED
    return OrderStatus.CONFIRMED


def status_after_shipment(
    order: ShipmentOrder,
    shipment_lines: Sequence[ShipmentLine],
) -> OrderStatus:
    """Order status once ``shipment_lines`` are applied to ``order``."""
    shipped_now: dict[str, Decimal] = {}
    for shipment_line in shipment_lines:
        shipped_now[shipment_line.order_line_id] = (
            shipped_now.get(shipment_line.order_line_id, Decimal("0"))
            + shipment_line.quantity
        )

    shipped_after = [
        line.shipped_quantity + shipped_now.get(line.line_id, Decimal("0"))
        for line in order.lines
    ]
    all_shipped = all(
        shipped >= line.quantity for shipped, line in zip(shipped_after, order.lines)
    )
    any_shipped = any(shipped > 0 for shipped in shipped_after)
    return next_order_status_after_shipment(all_shipped, any_shipped)
