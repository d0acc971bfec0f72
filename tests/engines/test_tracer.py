"""Tests for the STOCK_ENGINE_TRACE decorator."""

from decimal import Decimal

import pytest

from stock_engines.kit_graph import KitEdge, build_kit_graph, has_path
from stock_engines.tracer import compute_input_fingerprint, traced_engine
from stock_kernel.exceptions import InsufficientStockError


def _traces(records):
    return [r for r in records if r["message"] == "STOCK_ENGINE_TRACE"]


class TestComputeInputFingerprint:
    def test_deterministic(self):
        args = {"a": Decimal("1.5"), "b": ["x", "y"]}

        assert compute_input_fingerprint(("a", "b"), args) == compute_input_fingerprint(
            ("a", "b"), dict(args)
        )

    def test_length(self):
        assert len(compute_input_fingerprint(("a",), {"a": 1})) == 16

    def test_mapping_key_order_irrelevant(self):
        fp1 = compute_input_fingerprint(("m",), {"m": {"x": 1, "y": 2}})
        fp2 = compute_input_fingerprint(("m",), {"m": {"y": 2, "x": 1}})

        assert fp1 == fp2

    def test_missing_field_recorded_as_null(self):
        assert compute_input_fingerprint(("a",), {}) == compute_input_fingerprint(
            ("a",), {"a": None}
        )

    def test_different_inputs_differ(self):
        assert compute_input_fingerprint(("a",), {"a": 1}) != compute_input_fingerprint(
            ("a",), {"a": 2}
        )


class TestTracedEngine:
    def test_trace_emitted(self, captured_logs):
        graph = build_kit_graph(["A"], [KitEdge("A", "B")])

        has_path(graph, "A", "B")

        traces = [t for t in _traces(captured_logs()) if t["function"] == "has_path"]
        assert len(traces) == 1
        assert traces[0]["engine_name"] == "kit_graph"
        assert traces[0]["outcome"] == "ok"
        assert len(traces[0]["input_fingerprint"]) == 16

    def test_positional_and_keyword_fingerprints_match(self, captured_logs):
        graph = build_kit_graph(["A"], [])

        has_path(graph, "A", "B")
        has_path(graph, from_id="A", target_id="B")

        traces = [t for t in _traces(captured_logs()) if t["function"] == "has_path"]
        assert traces[0]["input_fingerprint"] == traces[1]["input_fingerprint"]

    def test_error_traced_and_propagated(self, captured_logs):
        @traced_engine("probe", "0.1", fingerprint_fields=("x",))
        def failing(x):
            raise InsufficientStockError(requested=Decimal("2"), allocated=Decimal("0"))

        with pytest.raises(InsufficientStockError):
            failing(1)

        trace = _traces(captured_logs())[-1]
        assert trace["outcome"] == "error"
        assert trace["error_code"] == "INSUFFICIENT_STOCK"

    def test_return_value_unchanged(self):
        @traced_engine("probe", "0.1")
        def identity(x):
            return x

        sentinel = object()
        assert identity(sentinel) is sentinel
