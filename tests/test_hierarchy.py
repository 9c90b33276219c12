"""Tests for unitlog.hierarchy module."""
import itertools

import pytest

from unitlog.hierarchy import UnitGraph
from unitlog.levels import Level

_uids = itertools.count(1)


class FakeUnit:
    """Minimal unit: a level, an optional pin."""

    def __init__(self, level=None):
        self.uid = next(_uids)
        self.level = level
        self.pinned_level = None

    def _apply_level(self, level):
        self.level = level

    def set_level(self, graph, level):
        self.pinned_level = level
        self.level = level
        return graph.propagate(self, level)


class TestUnitGraph:

    def setup_method(self):
        self.graph = UnitGraph()

    def test_propagates_to_unpinned_child(self):
        """Test a level set on a parent reaches an unpinned child."""
        a, b = FakeUnit(), FakeUnit()
        self.graph.add_parent(b, a)
        assert a.set_level(self.graph, Level.WARN) == 1
        assert b.level is Level.WARN

    def test_pinned_child_keeps_level(self):
        """Test a pinned child ignores later levels of its parent."""
        a, b = FakeUnit(), FakeUnit()
        self.graph.add_parent(b, a)
        a.set_level(self.graph, Level.WARN)
        b.set_level(self.graph, Level.TRACE)
        a.set_level(self.graph, Level.ERROR)
        assert b.level is Level.TRACE

    def test_pinned_unit_shields_descendants(self):
        """Test units below a pinned unit are not reached."""
        a, b, c = FakeUnit(), FakeUnit(), FakeUnit()
        self.graph.add_parent(b, a)
        self.graph.add_parent(c, b)
        b.set_level(self.graph, Level.INFO)
        assert c.level is Level.INFO
        a.set_level(self.graph, Level.ERROR)
        assert b.level is Level.INFO
        assert c.level is Level.INFO

    def test_propagates_through_grandchildren(self):
        """Test propagation walks the whole unpinned subtree."""
        a, b, c = FakeUnit(), FakeUnit(), FakeUnit()
        self.graph.add_parent(b, a)
        self.graph.add_parent(c, b)
        assert a.set_level(self.graph, Level.WARN) == 2
        assert c.level is Level.WARN

    def test_cycle_is_tolerated(self):
        """Test a cycle does not loop forever."""
        a, b, c = FakeUnit(), FakeUnit(), FakeUnit()
        self.graph.add_parent(b, a)
        self.graph.add_parent(c, b)
        self.graph.add_parent(a, c)
        assert a.set_level(self.graph, Level.ERROR) == 2
        assert (b.level, c.level) == (Level.ERROR, Level.ERROR)

    def test_adopts_parent_level_on_link(self):
        """Test an unpinned child adopts the level of a new parent."""
        a, b, c = FakeUnit(Level.WARN), FakeUnit(Level.INFO), FakeUnit()
        self.graph.add_parent(c, b)
        self.graph.add_parent(b, a)
        assert b.level is Level.WARN
        assert c.level is Level.WARN

    def test_pinned_child_does_not_adopt(self):
        """Test linking does not override a pinned level."""
        a, b = FakeUnit(Level.WARN), FakeUnit()
        b.set_level(self.graph, Level.TRACE)
        self.graph.add_parent(b, a)
        assert b.level is Level.TRACE

    def test_last_writer_wins(self):
        """Test a child with two parents follows the last one set."""
        a, b, c = FakeUnit(), FakeUnit(), FakeUnit()
        self.graph.add_parent(c, a)
        self.graph.add_parent(c, b)
        a.set_level(self.graph, Level.ERROR)
        b.set_level(self.graph, Level.TRACE)
        assert c.level is Level.TRACE
        a.set_level(self.graph, Level.WARN)
        assert c.level is Level.WARN

    def test_self_loop_and_duplicate_rejected(self):
        """Test self-loops and duplicate edges are not added."""
        a, b = FakeUnit(), FakeUnit()
        assert not self.graph.add_parent(a, a)
        assert self.graph.add_parent(b, a)
        assert not self.graph.add_parent(b, a)
        assert self.graph.children(a) == [b]
        assert self.graph.parents(b) == [a]

    def test_remove_parents(self):
        """Test a child without parents no longer receives levels."""
        a, b = FakeUnit(), FakeUnit()
        self.graph.add_parent(b, a)
        self.graph.remove_parents(b)
        a.set_level(self.graph, Level.ERROR)
        assert b.level is None
        assert self.graph.children(a) == []

    def test_remove_unit(self):
        """Test removing a unit drops every edge touching it."""
        a, b, c = FakeUnit(), FakeUnit(), FakeUnit()
        self.graph.add_parent(b, a)
        self.graph.add_parent(c, b)
        self.graph.remove(b)
        assert b not in self.graph
        assert self.graph.children(a) == []
        assert self.graph.parents(c) == []
        self.graph.remove(b)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
