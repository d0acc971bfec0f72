"""
Module: stock_engines.ancestry
Responsibility:
    Guard structural writes to the category tree: reject a re-parenting
    that would make a category its own ancestor, and reject parents that
    are not active categories.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import stock_kernel (and sibling engine value types).

Invariants enforced:
    - Acyclic parent relation: checked before every structural write.
    - Bounded walk: the ancestor walk stops after ``len(parents) + 1``
      hops.  Exceeding the cap means the stored data already loops, which
      is reported as CorruptHierarchyError instead of spinning forever.

Failure modes:
    - CategorySelfParentError if the proposed parent is the category itself.
    - CategoryCycleError if the category appears among the proposed
      parent's ancestors.
    - CorruptHierarchyError if the stored chain loops elsewhere.
    - CategoryParentNotFoundError if the parent is missing or inactive.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from stock_engines.category_hierarchy import CategoryRecord
from stock_engines.tracer import traced_engine
from stock_kernel.exceptions import (
    CategoryCycleError,
    CategoryParentNotFoundError,
    CategorySelfParentError,
    CorruptHierarchyError,
)
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.ancestry")


def parents_from_records(categories: Iterable[CategoryRecord]) -> dict[str, str | None]:
    """Map each category id to its parent id."""
    return {category.category_id: category.parent_id for category in categories}


@traced_engine(
    "ancestry",
    "1.0",
    fingerprint_fields=("category_id", "proposed_parent_id"),
)
def assert_no_category_cycle(
    category_id: str,
    proposed_parent_id: str | None,
    parents: Mapping[str, str | None],
) -> None:
    """
    Reject moving ``category_id`` under ``proposed_parent_id`` if that
    closes a loop.

    Args:
        category_id: Category being edited.
        proposed_parent_id: New parent, or None to make it a root.
        parents: Snapshot of category id -> parent id.

    Raises:
        CategorySelfParentError: proposed parent is the category itself.
        CategoryCycleError: category is an ancestor of the proposed parent.
        CorruptHierarchyError: the walk exceeded the hop cap.
    """
    if proposed_parent_id is None:
        return

    if proposed_parent_id == category_id:
        raise CategorySelfParentError(category_id, proposed_parent_id)

    max_hops = len(parents) + 1
    hops = 0
    current: str | None = proposed_parent_id
    while current is not None:
        if current == category_id:
            logger.warning("category_cycle_rejected", extra={
                "category_id": category_id,
                "attempted_parent_id": proposed_parent_id,
                "hops": hops,
            })
            raise CategoryCycleError(category_id, proposed_parent_id)

        hops += 1
        if hops > max_hops:
            logger.error("category_ancestry_walk_exceeded", extra={
                "category_id": category_id,
                "start_id": proposed_parent_id,
                "max_hops": max_hops,
            })
            raise CorruptHierarchyError(category_id, proposed_parent_id, max_hops)

        current = parents.get(current)


def assert_category_parent_exists(
    parent_id: str | None,
    active_ids: Iterable[str],
) -> None:
    """Reject a non-null parent that is not an active category.

    Raises:
        CategoryParentNotFoundError: If ``parent_id`` is not in ``active_ids``.
    """
    if not parent_id:
        return
    if parent_id not in set(active_ids):
        raise CategoryParentNotFoundError(parent_id)
