"""
Tests for the kit dependency graph.

Covers:
- Graph construction with implicit nodes
- Reachability (non-empty paths, self-edges, cycles)
- BOM replacement guard
- Termination on deep and cyclic graphs
"""

import pytest

from stock_engines.kit_graph import (
    KitEdge,
    assert_bom_acyclic,
    build_kit_graph,
    has_path,
)
from stock_kernel.exceptions import KitCycleError, KitSelfReferenceError, StructureError


class TestBuildKitGraph:
    def test_edges_add_missing_nodes(self):
        """Ids referenced only by edges become nodes with no components."""
        graph = build_kit_graph(["K1"], [KitEdge("K1", "C1"), KitEdge("K1", "C2")])

        assert graph.node_ids == frozenset({"K1", "C1", "C2"})
        assert graph.components_of("K1") == ("C1", "C2")
        assert graph.components_of("C1") == ()
        assert graph.edge_count == 2

    def test_unknown_node_has_no_components(self):
        graph = build_kit_graph([], [])

        assert graph.components_of("missing") == ()

    def test_with_components_replaces_bom(self):
        """Replacing a BOM returns a new graph and leaves the old one intact."""
        graph = build_kit_graph(["K1"], [KitEdge("K1", "C1")])

        replaced = graph.with_components("K1", ["C2"])

        assert replaced.components_of("K1") == ("C2",)
        assert graph.components_of("K1") == ("C1",)


class TestHasPath:
    def test_direct_and_transitive(self):
        graph = build_kit_graph(
            ["A", "B", "C"], [KitEdge("A", "B"), KitEdge("B", "C")]
        )

        assert has_path(graph, "A", "B")
        assert has_path(graph, "A", "C")
        assert not has_path(graph, "C", "A")

    def test_node_to_itself_false_when_acyclic(self):
        """A path must have at least one edge."""
        graph = build_kit_graph(["A", "B"], [KitEdge("A", "B")])

        assert not has_path(graph, "A", "A")

    def test_self_edge_is_a_path(self):
        graph = build_kit_graph(["A"], [KitEdge("A", "A")])

        assert has_path(graph, "A", "A")

    def test_cycle_through_node(self):
        graph = build_kit_graph(
            ["A", "B", "C"],
            [KitEdge("A", "B"), KitEdge("B", "C"), KitEdge("C", "A")],
        )

        assert has_path(graph, "B", "B")

    def test_terminates_on_cycle_not_containing_target(self):
        """A loop elsewhere in the graph does not trap the search."""
        graph = build_kit_graph(
            ["A", "B", "C", "Z"],
            [KitEdge("A", "B"), KitEdge("B", "C"), KitEdge("C", "B")],
        )

        assert not has_path(graph, "A", "Z")

    def test_deep_chain_no_recursion_limit(self):
        """Ten thousand levels deep is searched iteratively."""
        depth = 10_000
        edges = [KitEdge(f"n{i}", f"n{i + 1}") for i in range(depth)]
        graph = build_kit_graph([], edges)

        assert has_path(graph, "n0", f"n{depth}")
        assert not has_path(graph, f"n{depth}", "n0")


class TestAssertBomAcyclic:
    def setup_method(self):
        # K1 -> K2 -> C1
        self.graph = build_kit_graph(
            ["K1", "K2", "C1"], [KitEdge("K1", "K2"), KitEdge("K2", "C1")]
        )

    def test_valid_bom_returns_replaced_graph(self):
        graph = assert_bom_acyclic(self.graph, "K2", ["C1", "C3"])

        assert graph.components_of("K2") == ("C1", "C3")

    def test_self_reference_rejected(self):
        with pytest.raises(KitSelfReferenceError) as exc_info:
            assert_bom_acyclic(self.graph, "K1", ["C1", "K1"])

        assert exc_info.value.code == "KIT_SELF_REFERENCE"
        assert exc_info.value.kit_id == "K1"

    def test_transitive_cycle_rejected(self):
        """Adding K1 under K2 would make K1 contain itself through K2."""
        with pytest.raises(KitCycleError) as exc_info:
            assert_bom_acyclic(self.graph, "K2", ["C1", "K1"])

        assert exc_info.value.code == "KIT_CYCLE"
        assert exc_info.value.kit_id == "K2"
        assert exc_info.value.component_id == "K1"

    def test_cycle_errors_are_structure_errors(self):
        with pytest.raises(StructureError):
            assert_bom_acyclic(self.graph, "C1", ["K1"])

    def test_replacing_bom_drops_old_edges(self):
        """A former component no longer constrains the new BOM."""
        graph = build_kit_graph(["A", "B"], [KitEdge("A", "B")])

        # B may take A once A no longer lists B.
        graph = assert_bom_acyclic(graph, "A", [])
        graph = assert_bom_acyclic(graph, "B", ["A"])

        assert graph.components_of("B") == ("A",)
