"""
Module: stock_engines.order_totals
Responsibility:
    Per-line rounding and order-level aggregation of monetary totals for
    purchase orders and sales orders.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import stock_kernel.

Invariants enforced:
    - Minor units: every monetary output is an ``int`` in minor currency
      units (cents).
    - Eager rounding: a monetary value is rounded half away from zero at
      the point it is first computed; rounding is never deferred to a
      later aggregate step.
    - ``total_amount == subtotal + tax_amount + shipping_cost`` for every
      OrderTotals instance.

Failure modes:
    - None for well-formed input.  Inputs are validated by the caller;
      non-numeric values raise ValueError during coercion.

Two sales-line pricing paths exist and deliberately disagree:

    CREATION      net = round(qty * price * (1 - discount% / 100))
    DRAFT_UPDATE  net = round(qty * price)            (discount ignored)

Order-level aggregation (``compute_sales_order_totals``) always works on
the pre-discount base, so with a discount present the sum of line totals
does not equal ``subtotal + tax``.  Callers pick the path per workflow.

Usage:
    from stock_engines.order_totals import (
        SalesOrderItem, build_sales_order_lines, compute_sales_order_totals,
    )

    lines = build_sales_order_lines([
        SalesOrderItem(product_id="p1", quantity=2, unit_price=1000,
                       tax_rate=18, discount_percent=10),
    ])
    totals = compute_sales_order_totals(lines, shipping_cost=250)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from stock_engines.tracer import traced_engine
from stock_kernel.domain.rounding import round_minor, to_decimal
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.order_totals")

_HUNDRED = Decimal("100")


class SalesLinePricing(str, Enum):
    """Which sales workflow is pricing the lines."""

    CREATION = "creation"  # Discount applied
    DRAFT_UPDATE = "draft_update"  # Discount ignored


@dataclass(frozen=True)
class PurchaseOrderItem:
    """A purchase order line as entered on the draft form."""

    product_id: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal = Decimal("0")
    notes: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", to_decimal(self.quantity))
        object.__setattr__(self, "unit_price", to_decimal(self.unit_price))
        object.__setattr__(self, "tax_rate", to_decimal(self.tax_rate))


@dataclass(frozen=True)
class PurchaseOrderLine:
    """A priced purchase order line.  Tax is carried, not applied."""

    product_id: str
    quantity: Decimal
    unit_price: int
    tax_rate: Decimal
    total_price: int
    notes: str | None = None


@dataclass(frozen=True)
class SalesOrderItem:
    """A sales order line as entered on the order form."""

    product_id: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal = Decimal("0")
    discount_percent: Decimal | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", to_decimal(self.quantity))
        object.__setattr__(self, "unit_price", to_decimal(self.unit_price))
        object.__setattr__(self, "tax_rate", to_decimal(self.tax_rate))
        if self.discount_percent is not None:
            object.__setattr__(
                self, "discount_percent", to_decimal(self.discount_percent)
            )


@dataclass(frozen=True)
class SalesOrderLine:
    """A priced sales order line."""

    product_id: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal
    net_amount: int
    tax_amount: int
    total_price: int
    discount_percent: Decimal | None = None
    notes: str | None = None


@dataclass(frozen=True)
class OrderTotals:
    """
    Order-level monetary totals in minor units.

    Contract:
        Frozen dataclass; each component is rounded independently before
        summation.
    Guarantees:
        - ``total_amount == subtotal + tax_amount + shipping_cost``.
    """

    subtotal: int
    tax_amount: int
    shipping_cost: int
    total_amount: int

    def __post_init__(self) -> None:
        expected = self.subtotal + self.tax_amount + self.shipping_cost
        if self.total_amount != expected:
            raise ValueError(
                f"Order total {self.total_amount} does not equal "
                f"subtotal + tax + shipping ({expected})"
            )


# ---------------------------------------------------------------------------
# Purchase orders
# ---------------------------------------------------------------------------


@traced_engine("order_totals", "1.0", fingerprint_fields=("items",))
def build_purchase_order_lines(
    items: Sequence[PurchaseOrderItem],
) -> tuple[PurchaseOrderLine, ...]:
    """Round unit prices, then line totals.

    The per-line tax rate is kept on the line but not folded into
    ``total_price``; purchase order tax is an order-level amount.
    """
    lines = []
    for item in items:
        unit_price = round_minor(item.unit_price)
        lines.append(
            PurchaseOrderLine(
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=unit_price,
                tax_rate=item.tax_rate,
                total_price=round_minor(item.quantity * unit_price),
                notes=item.notes,
            )
        )
    return tuple(lines)


@traced_engine(
    "order_totals",
    "1.0",
    fingerprint_fields=("lines", "shipping_cost", "tax_amount"),
)
def compute_purchase_order_totals(
    lines: Sequence[PurchaseOrderLine],
    shipping_cost: Decimal | int = 0,
    tax_amount: Decimal | int = 0,
) -> OrderTotals:
    """Aggregate purchase order totals.

    subtotal = sum of line totals; tax and shipping are rounded as entered.
    """
    subtotal = sum(line.total_price for line in lines)
    rounded_tax = round_minor(tax_amount)
    rounded_shipping = round_minor(shipping_cost)

    totals = OrderTotals(
        subtotal=subtotal,
        tax_amount=rounded_tax,
        shipping_cost=rounded_shipping,
        total_amount=subtotal + rounded_tax + rounded_shipping,
    )
    logger.debug("purchase_order_totals_computed", extra={
        "line_count": len(lines),
        "subtotal": totals.subtotal,
        "total_amount": totals.total_amount,
    })
    return totals


# ---------------------------------------------------------------------------
# Sales orders
# ---------------------------------------------------------------------------


def _sales_line_net(item: SalesOrderItem, pricing: SalesLinePricing) -> int:
    gross = item.quantity * item.unit_price
    if pricing is SalesLinePricing.DRAFT_UPDATE or not item.discount_percent:
        return round_minor(gross)
    return round_minor(gross * (1 - item.discount_percent / _HUNDRED))


@traced_engine("order_totals", "1.0", fingerprint_fields=("items", "pricing"))
def build_sales_order_lines(
    items: Sequence[SalesOrderItem],
    pricing: SalesLinePricing = SalesLinePricing.CREATION,
) -> tuple[SalesOrderLine, ...]:
    """Price sales order lines.

    Args:
        items: Lines as entered.
        pricing: CREATION applies ``discount_percent``; DRAFT_UPDATE
            recomputes from the plain ``quantity * unit_price``.

    Returns:
        Lines with ``total_price = net + round(net * tax_rate / 100)``.
    """
    lines = []
    for item in items:
        net = _sales_line_net(item, pricing)
        line_tax = round_minor(net * item.tax_rate / _HUNDRED)
        lines.append(
            SalesOrderLine(
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                tax_rate=item.tax_rate,
                net_amount=net,
                tax_amount=line_tax,
                total_price=net + line_tax,
                discount_percent=item.discount_percent,
                notes=item.notes,
            )
        )
    return tuple(lines)


def build_sales_order_draft_lines(
    items: Sequence[SalesOrderItem],
) -> tuple[SalesOrderLine, ...]:
    """Convenience for the draft re-edit path (discount not applied)."""
    return build_sales_order_lines(items, pricing=SalesLinePricing.DRAFT_UPDATE)


@traced_engine(
    "order_totals",
    "1.0",
    fingerprint_fields=("lines", "shipping_cost", "additional_tax_amount"),
)
def compute_sales_order_totals(
    lines: Sequence[SalesOrderLine | SalesOrderItem],
    shipping_cost: Decimal | int = 0,
    additional_tax_amount: Decimal | int = 0,
) -> OrderTotals:
    """Aggregate sales order totals on the pre-discount base.

    For each line ``base = round(quantity * unit_price)``:
        subtotal = sum(base)
        tax      = sum(round(base * tax_rate / 100)) + round(additional_tax_amount)
        shipping = round(shipping_cost)
    """
    subtotal = 0
    line_tax_total = 0
    for line in lines:
        base = round_minor(line.quantity * line.unit_price)
        subtotal += base
        line_tax_total += round_minor(base * line.tax_rate / _HUNDRED)

    tax_amount = line_tax_total + round_minor(additional_tax_amount)
    rounded_shipping = round_minor(shipping_cost)

    totals = OrderTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        shipping_cost=rounded_shipping,
        total_amount=subtotal + tax_amount + rounded_shipping,
    )
    logger.debug("sales_order_totals_computed", extra={
        "line_count": len(lines),
        "subtotal": totals.subtotal,
        "tax_amount": totals.tax_amount,
        "total_amount": totals.total_amount,
    })
    return totals
