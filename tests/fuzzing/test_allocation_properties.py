"""
Hypothesis-based property tests for the pure engines.

Properties checked:
- Allocation conservation: a plan always sums to the demand, and no entry
  takes more than its bucket had available.
- Picking never touches stock expiring at or before ``now``.
- Plans do not depend on input order.
- Category hierarchy emits every input id exactly once on arbitrary
  (including cyclic and dangling) parent pointers.
- Ancestry guard terminates on arbitrary parent maps.
- Rounding is half away from zero.
"""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from hypothesis.strategies import composite

from stock_engines.allocation import AllocationEngine, AllocationStrategy
from stock_engines.ancestry import assert_no_category_cycle
from stock_engines.category_hierarchy import CategoryRecord, build_category_hierarchy
from stock_kernel.domain.rounding import round_minor
from stock_kernel.domain.stock import StockBucket
from stock_kernel.exceptions import InsufficientStockError, StructureError

NOW = datetime(2026, 3, 1, tzinfo=UTC)

FUZZ_SETTINGS = settings(
    max_examples=150,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)


@composite
def bucket_snapshots(draw, max_size=12):
    count = draw(st.integers(min_value=0, max_value=max_size))
    buckets = []
    for i in range(count):
        quantity = draw(st.integers(min_value=0, max_value=50))
        reserved = draw(st.integers(min_value=0, max_value=quantity))
        expiry_offset = draw(st.one_of(st.none(), st.integers(min_value=-20, max_value=60)))
        buckets.append(
            StockBucket(
                bucket_id=f"b-{i:02d}",
                product_id="P1",
                warehouse_id="W1",
                quantity=Decimal(quantity),
                reserved_quantity=Decimal(reserved),
                created_at=NOW - timedelta(days=draw(st.integers(min_value=0, max_value=365))),
                expiry_date=(
                    NOW + timedelta(days=expiry_offset) if expiry_offset is not None else None
                ),
            )
        )
    return buckets


@composite
def category_lists(draw):
    count = draw(st.integers(min_value=0, max_value=15))
    ids = [f"c{i}" for i in range(count)]
    parent_choices = st.one_of(st.none(), st.sampled_from(ids + ["ghost"]) if ids else st.none())
    return [
        CategoryRecord(
            category_id=category_id,
            name=draw(st.text(alphabet="abcAB", min_size=1, max_size=3)),
            parent_id=draw(parent_choices),
        )
        for category_id in ids
    ]


class TestAllocationProperties:
    @FUZZ_SETTINGS
    @given(
        buckets=bucket_snapshots(),
        demand=st.integers(min_value=0, max_value=300),
        strategy=st.sampled_from(list(AllocationStrategy)),
    )
    def test_plan_conserves_demand(self, buckets, demand, strategy):
        engine = AllocationEngine()
        try:
            plan = engine.allocate(demand, buckets, strategy, now=NOW)
        except InsufficientStockError as exc:
            assert exc.allocated < exc.requested == Decimal(demand)
            assert exc.shortfall == exc.requested - exc.allocated
            return

        assert plan.total_allocated == Decimal(demand)
        by_id = {b.bucket_id: b for b in buckets}
        for entry in plan.entries:
            assert 0 < entry.quantity_taken <= by_id[entry.bucket_id].available

    @FUZZ_SETTINGS
    @given(buckets=bucket_snapshots(), demand=st.integers(min_value=1, max_value=100))
    def test_picking_skips_expired(self, buckets, demand):
        try:
            plan = AllocationEngine().allocate_for_picking(demand, buckets, NOW, "P1", "W1")
        except InsufficientStockError:
            return

        for entry in plan.entries:
            assert entry.expiry_date is None or entry.expiry_date > NOW

    @FUZZ_SETTINGS
    @given(
        buckets=bucket_snapshots(),
        demand=st.integers(min_value=0, max_value=100),
        strategy=st.sampled_from(list(AllocationStrategy)),
    )
    def test_plan_independent_of_input_order(self, buckets, demand, strategy):
        engine = AllocationEngine()
        try:
            forward = engine.allocate(demand, buckets, strategy, now=NOW)
        except InsufficientStockError:
            with pytest.raises(InsufficientStockError):
                engine.allocate(demand, list(reversed(buckets)), strategy, now=NOW)
            return

        backward = engine.allocate(demand, list(reversed(buckets)), strategy, now=NOW)
        assert forward == backward


class TestStructureProperties:
    @FUZZ_SETTINGS
    @given(categories=category_lists())
    def test_hierarchy_emits_each_id_once(self, categories):
        nodes = build_category_hierarchy(categories)

        emitted = [n.category_id for n in nodes]
        assert len(emitted) == len(set(emitted))
        assert set(emitted) == {c.category_id for c in categories}

    @FUZZ_SETTINGS
    @given(categories=category_lists(), data=st.data())
    def test_ancestry_guard_terminates(self, categories, data):
        if not categories:
            return
        parents = {c.category_id: c.parent_id for c in categories}
        category_id = data.draw(st.sampled_from(sorted(parents)))
        proposed = data.draw(st.sampled_from(sorted(parents)))

        try:
            assert_no_category_cycle(category_id, proposed, parents)
        except StructureError:
            pass


class TestRoundingProperties:
    @FUZZ_SETTINGS
    @given(
        st.decimals(
            min_value=Decimal("-1000000"),
            max_value=Decimal("1000000"),
            allow_nan=False,
            allow_infinity=False,
            places=3,
        )
    )
    def test_half_away_from_zero(self, value):
        rounded = round_minor(value)

        assert abs(value - rounded) <= Decimal("0.5")
        if abs(value - int(value)) == Decimal("0.5"):
            assert abs(rounded) > abs(value)
