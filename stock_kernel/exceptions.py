"""
Typed Exception Hierarchy for the Stock Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the computation engines map failures to user-facing messages,
retries, or HTTP responses.  Parsing message strings for that is fragile,
so every failure the engines can signal is:
  1. A TYPED exception class (catch by type, not message)
  2. Tagged with a CODE attribute (machine-readable, API-safe)
  3. Carrying structured DATA (the quantities and ids needed to act)

Example - WRONG way to handle errors:
    try:
        plan = engine.allocate(...)
    except Exception as e:
        if "Insufficient" in str(e):  # FRAGILE
            ...

Example - RIGHT way:
    try:
        plan = engine.allocate(...)
    except InsufficientStockError as e:
        api_response(code=e.code, shortfall=e.shortfall)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from StockKernelError:

    StockKernelError (base)
    |
    +-- AllocationError
    |   +-- InsufficientStockError
    |
    +-- StructureError
    |   +-- CategoryCycleError
    |   |   +-- CategorySelfParentError
    |   +-- CorruptHierarchyError
    |   +-- CategoryParentNotFoundError
    |   +-- KitCycleError
    |       +-- KitSelfReferenceError
    |
    +-- ShipmentError
    |   +-- EmptyShipmentError
    |   +-- LineUnshippableError
    |   +-- ShipmentQuantityExceededError
    |   +-- OrderNotShippableError
    |
    +-- TrackingError
    |   +-- MissingTrackingFieldError
    |
    +-- KitAssemblyError
        +-- EmptyBomError
        +-- ComponentShortageError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Allocation      | INSUFFICIENT_STOCK          | Available stock below demand
----------------|-----------------------------|-----------------------------------------
Structure       | CATEGORY_CYCLE              | Parent edit would close a loop
                | CATEGORY_SELF_PARENT        | Category proposed as its own parent
                | CORRUPT_HIERARCHY           | Stored parent chain already loops
                | CATEGORY_PARENT_NOT_FOUND   | Parent is missing or inactive
                | KIT_CYCLE                   | BOM edit would make a kit need itself
                | KIT_SELF_REFERENCE          | Kit lists itself as a component
----------------|-----------------------------|-----------------------------------------
Shipment        | EMPTY_SHIPMENT              | No line has outstanding quantity
                | LINE_UNSHIPPABLE            | A line cannot be fully covered
                | SHIPMENT_QUANTITY_EXCEEDED  | Shipping more than remains on a line
                | ORDER_NOT_SHIPPABLE         | Order status does not allow shipping
----------------|-----------------------------|-----------------------------------------
Tracking        | MISSING_TRACKING_FIELD      | Batch / expiry / serial required
----------------|-----------------------------|-----------------------------------------
Kit assembly    | EMPTY_BOM                   | Kit has no components configured
                | COMPONENT_SHORTAGE          | Component stock below requirement

===============================================================================
HANDLING PATTERNS
===============================================================================

1. CATCH SPECIFIC EXCEPTIONS, fall back to the category:

    try:
        lines = build_shipment_lines(order, buckets)
    except EmptyShipmentError:
        notify_user("Nothing left to ship")
    except ShipmentError as e:
        log.error(f"Shipment failed: {e.code}")

2. RE-SNAPSHOT ON INSUFFICIENCY:

    The engines never retry.  A caller that suspects a concurrent
    reservation reloads its snapshot and calls the engine again.

3. STRUCTURE ERRORS ARE REJECTIONS, not crashes:

    CategoryCycleError / KitCycleError are raised before any write, so the
    caller simply refuses the edit.  CorruptHierarchyError means stored data
    is already cyclic and needs repair.
"""

from decimal import Decimal


class StockKernelError(Exception):
    """
    Base exception for all stock kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "STOCK_KERNEL_ERROR"


# Allocation exceptions


class AllocationError(StockKernelError):
    """Base exception for stock allocation errors."""

    code: str = "ALLOCATION_ERROR"


class InsufficientStockError(AllocationError):
    """Available stock cannot cover the requested quantity.

    No partial plan accompanies this error; ``allocated`` reports how much
    *could* have been taken so the caller can decide what to do.
    """

    code: str = "INSUFFICIENT_STOCK"

    def __init__(
        self,
        requested: Decimal,
        allocated: Decimal,
        product_id: str | None = None,
        warehouse_id: str | None = None,
    ):
        self.requested = requested
        self.allocated = allocated
        self.shortfall = requested - allocated
        self.product_id = product_id
        self.warehouse_id = warehouse_id
        super().__init__(
            f"Insufficient available stock: could only allocate "
            f"{allocated} of {requested}"
        )


# Structure exceptions


class StructureError(StockKernelError):
    """Base exception for parent / dependency relation errors."""

    code: str = "STRUCTURE_ERROR"


class CategoryCycleError(StructureError):
    """Re-parenting a category would introduce a cycle."""

    code: str = "CATEGORY_CYCLE"

    def __init__(self, category_id: str, attempted_parent_id: str):
        self.category_id = category_id
        self.attempted_parent_id = attempted_parent_id
        super().__init__(
            f"Category {category_id} cannot be moved under {attempted_parent_id}: "
            f"hierarchy cannot contain cycles"
        )


class CategorySelfParentError(CategoryCycleError):
    """A category was proposed as its own parent."""

    code: str = "CATEGORY_SELF_PARENT"


class CorruptHierarchyError(StructureError):
    """
    The stored parent chain already loops.

    Raised when an ancestor walk exceeds the number of known categories,
    which is only possible if an earlier write bypassed the cycle guard.
    """

    code: str = "CORRUPT_HIERARCHY"

    def __init__(self, category_id: str, start_id: str, hops: int):
        self.category_id = category_id
        self.start_id = start_id
        self.hops = hops
        super().__init__(
            f"Ancestor walk from {start_id} exceeded {hops} hops "
            f"while checking category {category_id}"
        )


class CategoryParentNotFoundError(StructureError):
    """Selected parent category does not exist or is inactive."""

    code: str = "CATEGORY_PARENT_NOT_FOUND"

    def __init__(self, parent_id: str):
        self.parent_id = parent_id
        super().__init__(f"Parent category not found: {parent_id}")


class KitCycleError(StructureError):
    """A bill-of-materials edit would make a kit depend on itself."""

    code: str = "KIT_CYCLE"

    def __init__(self, kit_id: str, component_id: str):
        self.kit_id = kit_id
        self.component_id = component_id
        super().__init__(
            f"Circular BOM: kit {kit_id} is reachable from component {component_id}"
        )


class KitSelfReferenceError(KitCycleError):
    """A kit lists itself as one of its own components."""

    code: str = "KIT_SELF_REFERENCE"

    def __init__(self, kit_id: str):
        super().__init__(kit_id, kit_id)


# Shipment exceptions


class ShipmentError(StockKernelError):
    """Base exception for shipment composition errors."""

    code: str = "SHIPMENT_ERROR"


class EmptyShipmentError(ShipmentError):
    """No order line has outstanding quantity to ship."""

    code: str = "EMPTY_SHIPMENT"

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"No remaining lines to ship for order {order_id}")


class LineUnshippableError(ShipmentError):
    """An order line's remaining quantity cannot be fully covered."""

    code: str = "LINE_UNSHIPPABLE"

    def __init__(
        self,
        product_id: str,
        line_id: str,
        requested: Decimal,
        allocated: Decimal,
        sku: str | None = None,
    ):
        self.product_id = product_id
        self.line_id = line_id
        self.requested = requested
        self.allocated = allocated
        self.shortfall = requested - allocated
        self.sku = sku
        super().__init__(
            f"Insufficient available stock to pick {sku or product_id} "
            f"for order line {line_id}"
        )


class ShipmentQuantityExceededError(ShipmentError):
    """Requested shipment quantity exceeds what remains on the line."""

    code: str = "SHIPMENT_QUANTITY_EXCEEDED"

    def __init__(self, line_id: str, requested: Decimal, remaining: Decimal):
        self.line_id = line_id
        self.requested = requested
        self.remaining = remaining
        super().__init__(
            f"Shipment quantity exceeds remaining quantity for order line {line_id}"
        )


class OrderNotShippableError(ShipmentError):
    """Order status does not permit creating a shipment."""

    code: str = "ORDER_NOT_SHIPPABLE"

    def __init__(self, status: str):
        self.status = status
        super().__init__(f'Cannot ship an order in "{status}" status')


# Tracking exceptions


class TrackingError(StockKernelError):
    """Base exception for batch / expiry / serial tracking errors."""

    code: str = "TRACKING_ERROR"


class MissingTrackingFieldError(TrackingError):
    """A tracked product is missing a required tracking value."""

    code: str = "MISSING_TRACKING_FIELD"

    def __init__(self, field_name: str):
        self.field_name = field_name
        label = field_name.replace("_", " ")
        article = "an" if label[:1] in "aeiou" else "a"
        super().__init__(f"This product requires {article} {label}")


# Kit assembly exceptions


class KitAssemblyError(StockKernelError):
    """Base exception for kit assembly planning errors."""

    code: str = "KIT_ASSEMBLY_ERROR"


class EmptyBomError(KitAssemblyError):
    """Kit has no BOM components configured."""

    code: str = "EMPTY_BOM"

    def __init__(self, kit_id: str):
        self.kit_id = kit_id
        super().__init__(f"Kit {kit_id} has no BOM components configured")


class ComponentShortageError(KitAssemblyError):
    """Not enough stock of a component to assemble the requested kits."""

    code: str = "COMPONENT_SHORTAGE"

    def __init__(self, component_id: str, required: Decimal, available: Decimal):
        self.component_id = component_id
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient stock for component {component_id}. "
            f"Required {required}, available {available}"
        )
