"""Parent/child links between logs, used to propagate levels.

Units are kept in an arena keyed by their id, with explicit parent and child
edge lists. Propagation walks the child edges with a visited set, so an
accidental cycle is harmless.
"""
from __future__ import annotations

import threading
from collections import deque
from typing import Protocol

from unitlog.levels import Level

__all__ = ['Unit', 'UnitGraph']


class Unit(Protocol):
    """What the graph needs from a node."""
    uid: int

    @property
    def level(self) -> Level | None: ...

    @property
    def pinned_level(self) -> Level | None: ...

    def _apply_level(self, level: Level | None) -> None: ...


class UnitGraph:
    """Adjacency structure of units.

    A unit whose level was set directly (pinned) ignores what its parents
    push, and shields its own descendants as well: they follow the pinned
    unit instead. With several parents the last level pushed wins.
    """

    def __init__(self) -> None:
        self._units: dict[int, Unit] = {}
        self._parents: dict[int, list[int]] = {}
        self._children: dict[int, list[int]] = {}
        self._lock = threading.RLock()

    def __contains__(self, unit: Unit) -> bool:
        return unit.uid in self._units

    def add(self, unit: Unit) -> None:
        with self._lock:
            if unit.uid not in self._units:
                self._units[unit.uid] = unit
                self._parents[unit.uid] = []
                self._children[unit.uid] = []

    def parents(self, unit: Unit) -> list[Unit]:
        with self._lock:
            return [self._units[uid] for uid in self._parents.get(unit.uid, ())]

    def children(self, unit: Unit) -> list[Unit]:
        with self._lock:
            return [self._units[uid] for uid in self._children.get(unit.uid, ())]

    def add_parent(self, child: Unit, parent: Unit) -> bool:
        """Link `child` under `parent`.

        An unpinned child adopts the parent's current level, if it has one.
        Returns False if the edge already existed or would be a self-loop.
        """
        if child.uid == parent.uid:
            return False
        with self._lock:
            self.add(child)
            self.add(parent)
            if parent.uid in self._parents[child.uid]:
                return False
            self._parents[child.uid].append(parent.uid)
            self._children[parent.uid].append(child.uid)
            if child.pinned_level is None and parent.level is not None:
                child._apply_level(parent.level)
                self.propagate(child, parent.level)
            return True

    def remove_parents(self, child: Unit) -> None:
        with self._lock:
            for uid in self._parents.get(child.uid, ()):
                self._children[uid].remove(child.uid)
            if child.uid in self._parents:
                self._parents[child.uid] = []

    def remove(self, unit: Unit) -> None:
        """Forget a unit and every edge touching it."""
        with self._lock:
            if unit.uid not in self._units:
                return
            self.remove_parents(unit)
            for uid in self._children.pop(unit.uid):
                self._parents[uid].remove(unit.uid)
            del self._parents[unit.uid]
            del self._units[unit.uid]

    def propagate(self, unit: Unit, level: Level | None) -> int:
        """Push `level` to the unpinned descendants of `unit`.

        Returns the number of units that received the level.
        """
        count = 0
        with self._lock:
            visited = {unit.uid}
            queue = deque(self._children.get(unit.uid, ()))
            while queue:
                uid = queue.popleft()
                if uid in visited:
                    continue
                visited.add(uid)
                child = self._units[uid]
                if child.pinned_level is not None:
                    continue
                child._apply_level(level)
                count += 1
                queue.extend(self._children[uid])
        return count
