"""
Module: stock_engines.kit_assembly
Responsibility:
    Plan the component consumption needed to assemble a number of kits in
    a warehouse: per-component requirements, per-component bucket plans and
    the consumed cost.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Composes stock_engines.allocation (COMPONENT_CONSUMPTION strategy).

Invariants enforced:
    - All-or-nothing: every component is checked for sufficient stock
      before any plan is produced.
    - Consumed cost is rounded once, half away from zero, to minor units.

Failure modes:
    - EmptyBomError if the kit has no components.
    - ComponentShortageError naming the first short component.
    - ValueError on a non-positive kit quantity.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from stock_engines.allocation import AllocationEngine, AllocationPlan, AllocationStrategy
from stock_engines.tracer import traced_engine
from stock_kernel.domain.rounding import round_minor, to_decimal
from stock_kernel.domain.stock import StockBucket
from stock_kernel.exceptions import ComponentShortageError, EmptyBomError
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.kit_assembly")


@dataclass(frozen=True)
class BomComponent:
    """One component line of a kit's bill of materials."""

    component_id: str
    quantity: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", to_decimal(self.quantity))
        if self.quantity <= 0:
            raise ValueError(
                f"BOM quantity for {self.component_id} must be positive, got {self.quantity}"
            )


@dataclass(frozen=True)
class ComponentRequirement:
    component_id: str
    per_kit: Decimal
    required: Decimal


@dataclass(frozen=True)
class KitAssemblyPlan:
    kit_id: str
    warehouse_id: str
    kit_quantity: Decimal
    requirements: tuple[ComponentRequirement, ...]
    component_plans: tuple[AllocationPlan, ...]
    consumed_cost: int

    def plan_for(self, component_id: str) -> AllocationPlan | None:
        for requirement, plan in zip(self.requirements, self.component_plans):
            if requirement.component_id == component_id:
                return plan
        return None


def component_requirements(
    bom: Sequence[BomComponent],
    kit_quantity: Decimal | int,
) -> tuple[ComponentRequirement, ...]:
    """Required quantity of each component for ``kit_quantity`` kits.

    BOM lines naming the same component are merged into one requirement,
    in order of first appearance.
    """
    kits = to_decimal(kit_quantity)
    if kits <= 0:
        raise ValueError(f"Kit quantity must be positive, got {kits}")
    per_kit: dict[str, Decimal] = {}
    for component in bom:
        per_kit[component.component_id] = (
            per_kit.get(component.component_id, Decimal("0")) + component.quantity
        )
    return tuple(
        ComponentRequirement(
            component_id=component_id,
            per_kit=quantity,
            required=quantity * kits,
        )
        for component_id, quantity in per_kit.items()
    )


@traced_engine(
    "kit_assembly",
    "1.0",
    fingerprint_fields=("kit_id", "bom", "buckets", "kit_quantity", "warehouse_id"),
)
def plan_kit_assembly(
    kit_id: str,
    bom: Sequence[BomComponent],
    buckets: Iterable[StockBucket],
    kit_quantity: Decimal | int,
    warehouse_id: str,
    engine: AllocationEngine | None = None,
) -> KitAssemblyPlan:
    """
    Plan consumption of every component for ``kit_quantity`` kits.

    Raises:
        EmptyBomError: The kit has no components.
        ComponentShortageError: Stock of a component in the warehouse is
            below its requirement.
    """
    if not bom:
        raise EmptyBomError(kit_id)

    engine = engine or AllocationEngine()
    requirements = component_requirements(bom, kit_quantity)
    snapshot = [b for b in buckets if b.warehouse_id == warehouse_id]

    for requirement in requirements:
        available = sum(
            (b.available for b in snapshot if b.product_id == requirement.component_id),
            Decimal("0"),
        )
        if available < requirement.required:
            logger.warning("kit_component_shortage", extra={
                "kit_id": kit_id,
                "component_id": requirement.component_id,
                "required": str(requirement.required),
                "available": str(available),
            })
            raise ComponentShortageError(
                requirement.component_id, requirement.required, available
            )

    unit_costs = {b.bucket_id: b.unit_cost or 0 for b in snapshot}
    plans = []
    cost = Decimal("0")
    for requirement in requirements:
        plan = engine.allocate(
            demand_quantity=requirement.required,
            buckets=snapshot,
            strategy=AllocationStrategy.COMPONENT_CONSUMPTION,
            product_id=requirement.component_id,
            warehouse_id=warehouse_id,
        )
        plans.append(plan)
        for entry in plan.entries:
            cost += entry.quantity_taken * unit_costs[entry.bucket_id]

    result = KitAssemblyPlan(
        kit_id=kit_id,
        warehouse_id=warehouse_id,
        kit_quantity=to_decimal(kit_quantity),
        requirements=requirements,
        component_plans=tuple(plans),
        consumed_cost=round_minor(cost),
    )
    logger.info("kit_assembly_planned", extra={
        "kit_id": kit_id,
        "warehouse_id": warehouse_id,
        "kit_quantity": str(result.kit_quantity),
        "component_count": len(requirements),
        "consumed_cost": result.consumed_cost,
    })
    return result
