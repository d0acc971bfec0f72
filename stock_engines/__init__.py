"""
Module: stock_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    inventory computation engines.  This is the canonical import surface
    for the layers that load snapshots and persist results.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import stock_kernel (and sibling engine modules).
    MUST NOT import stock_config; config bridges call into engines, never
    the other way round.

Invariants enforced:
    - Purity: engines NEVER read the clock.  ``now`` is always a parameter.
    - Determinism: identical snapshots always produce identical results.
    - Quantities are Decimal; monetary outputs are int minor units.

Failure modes:
    - Typed StockKernelError subclasses for domain failures.
    - ValueError for malformed inputs.

Usage:
    from stock_engines import AllocationEngine, AllocationStrategy
    from stock_engines import build_shipment_lines, build_category_hierarchy
"""

from stock_kernel.logging_config import get_logger

logger = get_logger("engines")

from stock_engines.allocation import (
    AllocationEngine,
    AllocationEntry,
    AllocationPlan,
    AllocationStrategy,
)
from stock_engines.ancestry import (
    assert_category_parent_exists,
    assert_no_category_cycle,
    parents_from_records,
)
from stock_engines.category_hierarchy import (
    DEFAULT_INDENT_MARKER,
    CategoryRecord,
    HierarchyNode,
    build_category_hierarchy,
)
from stock_engines.expiry import (
    ExpiryAlert,
    ExpiryThresholds,
    ExpiryUrgency,
    classify_expiry_alerts,
    find_expired_buckets,
)
from stock_engines.kit_assembly import (
    BomComponent,
    ComponentRequirement,
    KitAssemblyPlan,
    component_requirements,
    plan_kit_assembly,
)
from stock_engines.kit_graph import (
    KitEdge,
    KitGraph,
    assert_bom_acyclic,
    build_kit_graph,
    has_path,
)
from stock_engines.order_totals import (
    OrderTotals,
    PurchaseOrderItem,
    PurchaseOrderLine,
    SalesLinePricing,
    SalesOrderItem,
    SalesOrderLine,
    build_purchase_order_lines,
    build_sales_order_draft_lines,
    build_sales_order_lines,
    compute_purchase_order_totals,
    compute_sales_order_totals,
)
from stock_engines.putaway import (
    LocationSnapshot,
    LocationType,
    PutawayPolicy,
    PutawaySuggestion,
    suggest_putaway_locations,
)
from stock_engines.shipment import (
    ALLOWED_SHIP_ORDER_STATUSES,
    OrderLineSnapshot,
    OrderStatus,
    ShipmentLine,
    ShipmentOrder,
    assert_order_shippable,
    build_shipment_lines,
    next_order_status_after_shipment,
    status_after_shipment,
    validate_shipment_line_quantity,
)
from stock_engines.tracking import (
    TrackingRequirements,
    validate_required_tracking_fields,
)

__all__ = [
    # Allocation
    "AllocationEngine",
    "AllocationEntry",
    "AllocationPlan",
    "AllocationStrategy",
    # Category structure
    "CategoryRecord",
    "DEFAULT_INDENT_MARKER",
    "HierarchyNode",
    "assert_category_parent_exists",
    "assert_no_category_cycle",
    "build_category_hierarchy",
    "parents_from_records",
    # Expiry
    "ExpiryAlert",
    "ExpiryThresholds",
    "ExpiryUrgency",
    "classify_expiry_alerts",
    "find_expired_buckets",
    # Kits
    "BomComponent",
    "ComponentRequirement",
    "KitAssemblyPlan",
    "KitEdge",
    "KitGraph",
    "assert_bom_acyclic",
    "build_kit_graph",
    "component_requirements",
    "has_path",
    "plan_kit_assembly",
    # Order totals
    "OrderTotals",
    "PurchaseOrderItem",
    "PurchaseOrderLine",
    "SalesLinePricing",
    "SalesOrderItem",
    "SalesOrderLine",
    "build_purchase_order_lines",
    "build_sales_order_draft_lines",
    "build_sales_order_lines",
    "compute_purchase_order_totals",
    "compute_sales_order_totals",
    # Putaway
    "LocationSnapshot",
    "LocationType",
    "PutawayPolicy",
    "PutawaySuggestion",
    "suggest_putaway_locations",
    # Shipment
    "ALLOWED_SHIP_ORDER_STATUSES",
    "OrderLineSnapshot",
    "OrderStatus",
    "ShipmentLine",
    "ShipmentOrder",
    "assert_order_shippable",
    "build_shipment_lines",
    "next_order_status_after_shipment",
    "status_after_shipment",
    "validate_shipment_line_quantity",
    # Tracking
    "TrackingRequirements",
    "validate_required_tracking_fields",
]

logger.debug("engines_package_loaded", extra={"export_count": len(__all__)})
