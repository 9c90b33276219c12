"""Deferred flush scheduling.

A single delay queue, served by one daemon thread, for every sink that batches
its updates. A key can be pending at most once; scheduling it again while it
waits is a no-op.
"""
from __future__ import annotations

import heapq
import itertools
import threading
import time
from collections.abc import Callable, Hashable

from unitlog import _backend

__all__ = ['FlushScheduler']


class FlushScheduler:
    """Min-heap of pending flushes keyed by an arbitrary hashable."""

    def __init__(self, name: str = 'unitlog-flush') -> None:
        self._name = name
        self._heap: list[tuple[float, int, Hashable]] = []
        self._tasks: dict[Hashable, tuple[int, Callable[[], None]]] = {}
        self._seq = itertools.count()
        self._cond = threading.Condition()
        self._thread: threading.Thread | None = None
        self._closed = False

    def schedule(self, key: Hashable, delay_ms: int, callback: Callable[[], None]) -> bool:
        """Run `callback` after `delay_ms` unless `key` is already pending.

        Returns False when the key was already pending or the scheduler is
        closed.
        """
        with self._cond:
            if self._closed or key in self._tasks:
                return False
            seq = next(self._seq)
            self._tasks[key] = (seq, callback)
            heapq.heappush(self._heap, (time.monotonic() + delay_ms / 1000, seq, key))
            self._ensure_thread()
            self._cond.notify()
            return True

    def cancel(self, key: Hashable) -> bool:
        """Drop the pending task for `key`. Returns True if one was pending."""
        with self._cond:
            return self._tasks.pop(key, None) is not None

    def pending(self, key: Hashable) -> bool:
        with self._cond:
            return key in self._tasks

    def __len__(self) -> int:
        with self._cond:
            return len(self._tasks)

    def close(self, timeout: float | None = None) -> None:
        """Stop the thread. Tasks still waiting are discarded."""
        with self._cond:
            self._closed = True
            self._tasks.clear()
            self._heap.clear()
            self._cond.notify_all()
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _ensure_thread(self) -> None:
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._thread.start()

    def _next_due(self) -> Callable[[], None] | None:
        """Wait for the earliest live task and pop it. None means closed."""
        with self._cond:
            while not self._closed:
                # drop heap entries whose task was cancelled or replaced
                while self._heap:
                    _, seq, key = self._heap[0]
                    task = self._tasks.get(key)
                    if task is not None and task[0] == seq:
                        break
                    heapq.heappop(self._heap)
                if not self._heap:
                    self._cond.wait()
                    continue
                due, seq, key = self._heap[0]
                remaining = due - time.monotonic()
                if remaining > 0:
                    self._cond.wait(remaining)
                    continue
                heapq.heappop(self._heap)
                _, callback = self._tasks.pop(key)
                return callback
            return None

    def _run(self) -> None:
        while True:
            callback = self._next_due()
            if callback is None:
                return
            try:
                callback()
            except Exception as e:
                _backend.diagnostic(f'Scheduled flush failed: {e!r}')
