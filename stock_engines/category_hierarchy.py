"""
Module: stock_engines.category_hierarchy
Responsibility:
    Linearise a flat parent-pointer list of categories into a stable,
    depth-annotated display order (tree pre-order, siblings by name).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import stock_kernel.

Invariants enforced:
    - Completeness: every non-excluded input id is emitted exactly once,
      either in tree order or flat at the end.  Nothing is silently dropped.
    - Termination on corrupt data: the walk uses an explicit stack and a
      visited set, so cyclic or dangling ``parent_id`` values cannot loop.
    - Determinism: siblings sort by name (case-insensitive, then exact
      name, then id).

Exclusion is by explicit id only.  Excluding a category hides it and
detaches its subtree (the descendants are appended flat); it does not
stop a caller from choosing a descendant as the new parent, which
``stock_engines.ancestry`` rejects at write time.

Failure modes:
    - None.  Any input list produces an output list.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from stock_engines.tracer import traced_engine
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.category_hierarchy")

DEFAULT_INDENT_MARKER = "— "


@dataclass(frozen=True)
class CategoryRecord:
    """A category as loaded from storage."""

    category_id: str
    name: str
    parent_id: str | None = None


@dataclass(frozen=True)
class HierarchyNode:
    """A category positioned in display order."""

    category_id: str
    name: str
    parent_id: str | None
    depth: int
    label: str

    @property
    def is_root(self) -> bool:
        return self.depth == 0


def _sibling_key(category: CategoryRecord) -> tuple[str, str, str]:
    return (category.name.casefold(), category.name, category.category_id)


@traced_engine(
    "category_hierarchy",
    "1.0",
    fingerprint_fields=("categories", "excluded_ids", "indent_marker"),
)
def build_category_hierarchy(
    categories: Sequence[CategoryRecord],
    excluded_ids: Iterable[str] = (),
    indent_marker: str = DEFAULT_INDENT_MARKER,
) -> tuple[HierarchyNode, ...]:
    """
    Build the display-ordered hierarchy.

    Args:
        categories: Flat list of categories.
        excluded_ids: Ids to leave out entirely (e.g. the category being
            edited, when building its parent picker).
        indent_marker: Prefix repeated ``depth`` times in each label.

    Returns:
        Nodes in pre-order from the roots, followed by any category the
        walk never reached, unindented, in input order.
    """
    excluded = frozenset(excluded_ids)

    children_by_parent: dict[str | None, list[CategoryRecord]] = defaultdict(list)
    for category in categories:
        children_by_parent[category.parent_id].append(category)
    for siblings in children_by_parent.values():
        siblings.sort(key=_sibling_key)

    output: list[HierarchyNode] = []
    visited: set[str] = set()

    stack: list[tuple[CategoryRecord, int]] = [
        (category, 0) for category in reversed(children_by_parent.get(None, []))
    ]
    while stack:
        category, depth = stack.pop()
        if category.category_id in visited or category.category_id in excluded:
            continue

        visited.add(category.category_id)
        output.append(
            HierarchyNode(
                category_id=category.category_id,
                name=category.name,
                parent_id=category.parent_id,
                depth=depth,
                label=f"{indent_marker * depth}{category.name}",
            )
        )
        for child in reversed(children_by_parent.get(category.category_id, [])):
            stack.append((child, depth + 1))

    tree_count = len(output)

    for category in categories:
        if category.category_id in visited or category.category_id in excluded:
            continue
        visited.add(category.category_id)
        output.append(
            HierarchyNode(
                category_id=category.category_id,
                name=category.name,
                parent_id=category.parent_id,
                depth=0,
                label=category.name,
            )
        )

    if len(output) > tree_count:
        logger.info("category_hierarchy_detached_nodes", extra={
            "detached_count": len(output) - tree_count,
            "category_count": len(categories),
        })

    return tuple(output)
