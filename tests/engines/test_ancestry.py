"""Tests for the category ancestry guard."""

import pytest

from stock_engines.ancestry import (
    assert_category_parent_exists,
    assert_no_category_cycle,
    parents_from_records,
)
from stock_engines.category_hierarchy import CategoryRecord
from stock_kernel.exceptions import (
    CategoryCycleError,
    CategoryParentNotFoundError,
    CategorySelfParentError,
    CorruptHierarchyError,
)


class TestAssertNoCategoryCycle:
    def setup_method(self):
        # root <- mid <- leaf ; other
        self.parents = parents_from_records([
            CategoryRecord("root", "Root"),
            CategoryRecord("mid", "Mid", parent_id="root"),
            CategoryRecord("leaf", "Leaf", parent_id="mid"),
            CategoryRecord("other", "Other"),
        ])

    def test_clearing_parent_always_allowed(self):
        assert_no_category_cycle("mid", None, self.parents)

    def test_unrelated_parent_allowed(self):
        assert_no_category_cycle("other", "leaf", self.parents)

    def test_self_parent_rejected(self):
        with pytest.raises(CategorySelfParentError) as exc_info:
            assert_no_category_cycle("mid", "mid", self.parents)

        assert exc_info.value.code == "CATEGORY_SELF_PARENT"

    def test_moving_under_descendant_rejected(self):
        """root cannot move under leaf, which descends from it."""
        with pytest.raises(CategoryCycleError) as exc_info:
            assert_no_category_cycle("root", "leaf", self.parents)

        err = exc_info.value
        assert err.code == "CATEGORY_CYCLE"
        assert err.category_id == "root"
        assert err.attempted_parent_id == "leaf"

    def test_self_parent_is_a_cycle_error(self):
        with pytest.raises(CategoryCycleError):
            assert_no_category_cycle("leaf", "leaf", self.parents)

    def test_unknown_parent_walk_ends(self):
        """A parent missing from the snapshot ends the walk without error."""
        assert_no_category_cycle("leaf", "ghost", self.parents)

    def test_corrupt_loop_detected_not_hung(self):
        """An existing loop that does not include the category is reported."""
        parents = {"a": "b", "b": "a", "c": None}

        with pytest.raises(CorruptHierarchyError) as exc_info:
            assert_no_category_cycle("c", "a", parents)

        assert exc_info.value.code == "CORRUPT_HIERARCHY"
        assert exc_info.value.hops == len(parents) + 1


class TestAssertCategoryParentExists:
    def test_active_parent_accepted(self):
        assert_category_parent_exists("p1", ["p1", "p2"])

    def test_no_parent_accepted(self):
        assert_category_parent_exists(None, [])

    def test_missing_parent_rejected(self):
        with pytest.raises(CategoryParentNotFoundError) as exc_info:
            assert_category_parent_exists("gone", ["p1"])

        assert exc_info.value.parent_id == "gone"
