"""
Module: stock_engines.kit_graph
Responsibility:
    Build the kit -> component dependency graph of bills of materials and
    answer reachability questions, so a BOM edit that would make a kit
    (transitively) contain itself is rejected before any write.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import stock_kernel.

Invariants enforced:
    - Termination: reachability uses an explicit stack and a visited set,
      so arbitrarily deep or already-cyclic graphs never overflow and are
      searched in O(nodes + edges).
    - Paths are non-empty: ``has_path(g, X, X)`` is true only if a cycle
      passes through X (a self-edge included).
    - BOM replacement is wholesale: a kit's component list is replaced,
      never patched.

Failure modes:
    - KitSelfReferenceError when a kit lists itself as a component.
    - KitCycleError when the kit is reachable from a proposed component.

Usage:
    graph = build_kit_graph(kit_ids, edges)
    assert_bom_acyclic(graph, kit_id="K", component_ids=["C1", "C2"])
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from stock_engines.tracer import traced_engine
from stock_kernel.exceptions import KitCycleError, KitSelfReferenceError
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.kit_graph")


@dataclass(frozen=True)
class KitEdge:
    """``kit_id`` directly requires ``component_id``."""

    kit_id: str
    component_id: str


@dataclass(frozen=True, eq=False)
class KitGraph:
    """
    Adjacency map from kit id to its direct component ids.

    Contract:
        Immutable view; ``with_components`` returns a new graph.
    Guarantees:
        - Every node referenced by an edge is present as a key.
        - Component order follows edge order.
    """

    adjacency: Mapping[str, tuple[str, ...]]

    def components_of(self, kit_id: str) -> tuple[str, ...]:
        return self.adjacency.get(kit_id, ())

    @property
    def node_ids(self) -> frozenset[str]:
        return frozenset(self.adjacency)

    @property
    def edge_count(self) -> int:
        return sum(len(children) for children in self.adjacency.values())

    def with_components(self, kit_id: str, component_ids: Iterable[str]) -> KitGraph:
        """Return a copy with ``kit_id``'s BOM replaced by ``component_ids``."""
        components = tuple(component_ids)
        adjacency = dict(self.adjacency)
        adjacency[kit_id] = components
        for component_id in components:
            adjacency.setdefault(component_id, ())
        return KitGraph(adjacency=adjacency)


@traced_engine("kit_graph", "1.0", fingerprint_fields=("kit_ids", "edges"))
def build_kit_graph(kit_ids: Iterable[str], edges: Iterable[KitEdge]) -> KitGraph:
    """Build the dependency graph.

    Ids that appear only in ``edges`` are added implicitly with no
    components of their own.
    """
    adjacency: dict[str, list[str]] = {kit_id: [] for kit_id in kit_ids}
    for edge in edges:
        adjacency.setdefault(edge.kit_id, []).append(edge.component_id)
        adjacency.setdefault(edge.component_id, [])

    graph = KitGraph(
        adjacency={kit_id: tuple(children) for kit_id, children in adjacency.items()}
    )
    logger.debug("kit_graph_built", extra={
        "node_count": len(graph.adjacency),
        "edge_count": graph.edge_count,
    })
    return graph


def _reachable(graph: KitGraph, from_id: str, target_id: str) -> bool:
    visited: set[str] = set()
    stack = list(graph.components_of(from_id))

    while stack:
        current = stack.pop()
        if current == target_id:
            return True
        if current in visited:
            continue
        visited.add(current)
        stack.extend(graph.components_of(current))

    return False


@traced_engine("kit_graph", "1.0", fingerprint_fields=("from_id", "target_id"))
def has_path(graph: KitGraph, from_id: str, target_id: str) -> bool:
    """True if ``target_id`` is reachable from ``from_id`` by one or more edges.

    Before adding component C to kit K, callers test ``has_path(graph, C, K)``:
    a true result means K would transitively depend on itself through C.
    """
    return _reachable(graph, from_id, target_id)


@traced_engine(
    "kit_graph",
    "1.0",
    fingerprint_fields=("kit_id", "component_ids"),
)
def assert_bom_acyclic(
    graph: KitGraph,
    kit_id: str,
    component_ids: Iterable[str],
) -> KitGraph:
    """
    Validate replacing ``kit_id``'s BOM with ``component_ids``.

    Preconditions:
        ``graph`` reflects the stored BOMs of all kits.
    Postconditions:
        Returns the graph with the BOM replaced; it is acyclic through
        ``kit_id``.
    Raises:
        KitSelfReferenceError: If ``kit_id`` is among ``component_ids``.
        KitCycleError: If ``kit_id`` is reachable from any component.
    """
    components = tuple(component_ids)
    if kit_id in components:
        logger.warning("kit_bom_self_reference", extra={"kit_id": kit_id})
        raise KitSelfReferenceError(kit_id)

    replaced = graph.with_components(kit_id, components)
    for component_id in components:
        if _reachable(replaced, component_id, kit_id):
            logger.warning("kit_bom_cycle_detected", extra={
                "kit_id": kit_id,
                "component_id": component_id,
            })
            raise KitCycleError(kit_id, component_id)

    return replaced
