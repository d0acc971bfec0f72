"""
Module: stock_engines.allocation
Responsibility:
    Decide which stock buckets satisfy a quantity demand and in what order,
    under a caller-selected strategy, producing an ordered allocation plan.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import stock_kernel.

Invariants enforced:
    - Conservation: on success, the sum of ``quantity_taken`` equals the
      requested demand exactly.  There is no partial plan; insufficiency is
      an exception.
    - No negative stock: every entry takes at most the bucket's available
      quantity at snapshot time.
    - Expired stock is invisible to picking: EXPIRY_THEN_RECEIPT never
      selects a bucket whose expiry date is at or before ``now``.
    - Determinism: every ordering breaks ties by bucket id ascending, so
      identical snapshots produce identical plans regardless of input order.
    - Purity: ``now`` is passed in; the engine never reads the clock.

Failure modes:
    - InsufficientStockError when eligible buckets cannot cover the demand.
    - ValueError on negative demand, a missing ``now`` for the picking
      strategy, or an unknown strategy.

Usage:
    from stock_engines.allocation import AllocationEngine, AllocationStrategy

    engine = AllocationEngine()
    plan = engine.allocate(
        demand_quantity=Decimal("12"),
        buckets=snapshot,
        strategy=AllocationStrategy.EXPIRY_THEN_RECEIPT,
        now=datetime(2026, 3, 1, tzinfo=UTC),
        product_id="prod-1",
        warehouse_id="wh-1",
    )
    for entry in plan.entries:
        reserve(entry.bucket_id, entry.quantity_taken)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from stock_engines.tracer import traced_engine
from stock_kernel.domain.rounding import to_decimal
from stock_kernel.domain.stock import StockBucket
from stock_kernel.exceptions import InsufficientStockError
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.allocation")


class AllocationStrategy(str, Enum):
    """Bucket selection order."""

    EXPIRY_THEN_RECEIPT = "expiry_then_receipt"  # FEFO, then FIFO for undated stock
    SMALLEST_FIRST = "smallest_first"  # Smallest available bucket first
    COMPONENT_CONSUMPTION = "component_consumption"  # Kit assembly: expiry, then receipt


@dataclass(frozen=True)
class AllocationEntry:
    """
    Quantity taken from a single bucket.

    Contract:
        Frozen dataclass; one per bucket touched by a plan.
    Guarantees:
        - ``0 < quantity_taken <= available_before``.
    """

    bucket_id: str
    product_id: str
    warehouse_id: str
    quantity_taken: Decimal
    available_before: Decimal
    location_id: str | None = None
    batch_number: str | None = None
    serial_number: str | None = None
    expiry_date: datetime | None = None

    @property
    def remaining_in_bucket(self) -> Decimal:
        """Available quantity left in the bucket once this entry is applied."""
        return self.available_before - self.quantity_taken

    @classmethod
    def from_bucket(cls, bucket: StockBucket, quantity_taken: Decimal) -> AllocationEntry:
        return cls(
            bucket_id=bucket.bucket_id,
            product_id=bucket.product_id,
            warehouse_id=bucket.warehouse_id,
            quantity_taken=quantity_taken,
            available_before=bucket.available,
            location_id=bucket.location_id,
            batch_number=bucket.batch_number,
            serial_number=bucket.serial_number,
            expiry_date=bucket.expiry_date,
        )


@dataclass(frozen=True)
class AllocationPlan:
    """
    Ordered allocation plan.

    Contract:
        Frozen dataclass summarising one allocation run.
    Guarantees:
        - ``total_allocated == requested``.
        - Entries appear in consumption order.
    Non-goals:
        - Does not persist reservations; callers apply the plan inside
          their own transaction.
    """

    requested: Decimal
    strategy: AllocationStrategy
    entries: tuple[AllocationEntry, ...]

    @property
    def total_allocated(self) -> Decimal:
        return sum((e.quantity_taken for e in self.entries), Decimal("0"))

    @property
    def bucket_count(self) -> int:
        return len(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def quantity_for(self, bucket_id: str) -> Decimal:
        """Quantity this plan takes from ``bucket_id`` (zero if untouched)."""
        return sum(
            (e.quantity_taken for e in self.entries if e.bucket_id == bucket_id),
            Decimal("0"),
        )


class AllocationEngine:
    """
    Allocate a quantity demand across stock buckets.

    Contract:
        Pure functions over an immutable snapshot.
        No I/O, no clock access, no state between calls.
    Guarantees:
        - Sequential greedy consumption: each bucket in strategy order gives
          ``min(available, remaining)`` until the demand is met.
        - Either the full demand is planned or InsufficientStockError is
          raised carrying requested / allocated / shortfall.
    Non-goals:
        - Does not decide *which* strategy to use; callers select it.
        - Does not guard against concurrent reservations; the store must
          apply the plan under its own concurrency control.
    """

    @traced_engine(
        "allocation",
        "1.0",
        fingerprint_fields=(
            "demand_quantity",
            "buckets",
            "strategy",
            "now",
            "product_id",
            "warehouse_id",
        ),
    )
    def allocate(
        self,
        demand_quantity: Decimal | int,
        buckets: Iterable[StockBucket],
        strategy: AllocationStrategy | str,
        now: datetime | None = None,
        product_id: str | None = None,
        warehouse_id: str | None = None,
    ) -> AllocationPlan:
        """
        Plan how ``demand_quantity`` is taken from ``buckets``.

        Args:
            demand_quantity: Quantity needed (>= 0).
            buckets: Candidate buckets from the snapshot.
            strategy: Selection order, as a member or its string value.
            now: Expiry cutoff; required for EXPIRY_THEN_RECEIPT.
            product_id: Restrict candidates to this product, if given.
            warehouse_id: Restrict candidates to this warehouse, if given.

        Returns:
            AllocationPlan whose entries sum to the demand.

        Raises:
            InsufficientStockError: If eligible stock cannot cover the demand.
            ValueError: On negative demand, missing ``now`` for picking, or
                an unknown strategy.
        """
        demand = to_decimal(demand_quantity)
        if demand < 0:
            raise ValueError(f"Demand quantity cannot be negative, got {demand}")
        strategy = self._coerce_strategy(strategy)

        candidates = [
            b
            for b in buckets
            if (product_id is None or b.product_id == product_id)
            and (warehouse_id is None or b.warehouse_id == warehouse_id)
            and b.available > 0
        ]

        logger.info("allocation_started", extra={
            "demand": str(demand),
            "strategy": strategy.value,
            "candidate_count": len(candidates),
            "product_id": product_id,
            "warehouse_id": warehouse_id,
        })

        match strategy:
            case AllocationStrategy.EXPIRY_THEN_RECEIPT:
                if now is None:
                    raise ValueError("Expiry-then-receipt allocation requires 'now'")
                ordered = self._order_expiry_then_receipt(candidates, now)
            case AllocationStrategy.SMALLEST_FIRST:
                ordered = self._order_smallest_first(candidates)
            case AllocationStrategy.COMPONENT_CONSUMPTION:
                ordered = self._order_component_consumption(candidates)

        return self._allocate_sequential(
            demand, ordered, strategy, product_id, warehouse_id
        )

    def allocate_for_picking(
        self,
        demand_quantity: Decimal | int,
        buckets: Iterable[StockBucket],
        now: datetime,
        product_id: str,
        warehouse_id: str,
    ) -> AllocationPlan:
        """Convenience method for warehouse picking (FEFO, then FIFO)."""
        return self.allocate(
            demand_quantity=demand_quantity,
            buckets=buckets,
            strategy=AllocationStrategy.EXPIRY_THEN_RECEIPT,
            now=now,
            product_id=product_id,
            warehouse_id=warehouse_id,
        )

    def allocate_smallest_first(
        self,
        demand_quantity: Decimal | int,
        buckets: Iterable[StockBucket],
        product_id: str | None = None,
    ) -> AllocationPlan:
        """Convenience method for smallest-bucket-first allocation."""
        return self.allocate(
            demand_quantity=demand_quantity,
            buckets=buckets,
            strategy=AllocationStrategy.SMALLEST_FIRST,
            product_id=product_id,
        )

    @staticmethod
    def _coerce_strategy(strategy: AllocationStrategy | str) -> AllocationStrategy:
        try:
            return AllocationStrategy(strategy)
        except ValueError:
            logger.error("allocation_unknown_strategy", extra={
                "strategy": str(strategy),
            })
            raise ValueError(f"Unknown allocation strategy: {strategy}") from None

    @staticmethod
    def _order_expiry_then_receipt(
        candidates: Sequence[StockBucket],
        now: datetime,
    ) -> list[StockBucket]:
        """Pass 1: unexpired dated stock, earliest expiry first.
        Pass 2: undated stock, oldest receipt first.

        Buckets expiring at or before ``now`` appear in neither pass.
        """
        dated = sorted(
            (b for b in candidates if b.expiry_date is not None and b.expiry_date > now),
            key=lambda b: (b.expiry_date, b.bucket_id),
        )
        undated = sorted(
            (b for b in candidates if b.expiry_date is None),
            key=lambda b: (b.created_at, b.bucket_id),
        )
        return dated + undated

    @staticmethod
    def _order_smallest_first(candidates: Sequence[StockBucket]) -> list[StockBucket]:
        """Smallest available bucket first, to minimise leftover fragments."""
        return sorted(candidates, key=lambda b: (b.available, b.bucket_id))

    @staticmethod
    def _order_component_consumption(
        candidates: Sequence[StockBucket],
    ) -> list[StockBucket]:
        """Dated stock by expiry (undated last), then receipt time."""
        return sorted(
            candidates,
            key=lambda b: (
                (0, b.expiry_date) if b.expiry_date is not None else (1,),
                b.created_at,
                b.bucket_id,
            ),
        )

    def _allocate_sequential(
        self,
        demand: Decimal,
        ordered: Sequence[StockBucket],
        strategy: AllocationStrategy,
        product_id: str | None,
        warehouse_id: str | None,
    ) -> AllocationPlan:
        """
        Take from buckets in order until the demand is exhausted.

        Preconditions:
            - ``ordered`` holds only buckets with ``available > 0``.
        Postconditions:
            - Sum of entries == ``demand``.
        Raises:
            InsufficientStockError: If demand remains after the last bucket.
        """
        remaining = demand
        entries: list[AllocationEntry] = []

        for bucket in ordered:
            if remaining <= 0:
                break
            to_take = min(bucket.available, remaining)
            entries.append(AllocationEntry.from_bucket(bucket, to_take))
            remaining -= to_take

        allocated = demand - remaining

        if remaining > 0:
            logger.warning("allocation_insufficient_stock", extra={
                "strategy": strategy.value,
                "requested": str(demand),
                "allocated": str(allocated),
                "shortfall": str(remaining),
                "product_id": product_id,
                "warehouse_id": warehouse_id,
            })
            raise InsufficientStockError(
                requested=demand,
                allocated=allocated,
                product_id=product_id,
                warehouse_id=warehouse_id,
            )

        plan = AllocationPlan(
            requested=demand,
            strategy=strategy,
            entries=tuple(entries),
        )

        # INVARIANT: conservation -- planned quantity equals the demand
        assert plan.total_allocated == demand, (
            f"Allocation conservation violated: {plan.total_allocated} != {demand}"
        )

        logger.info("allocation_completed", extra={
            "strategy": strategy.value,
            "requested": str(demand),
            "bucket_count": plan.bucket_count,
        })

        return plan
