"""Performance mode: log calls are queued and delivered by one worker thread.

The caller only pays for the level check and a queue put; interpolation,
formatting and sink I/O happen on the consumer thread, which wakes up every
`period` milliseconds and drains the whole queue in FIFO order.
"""
from __future__ import annotations

import queue
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from unitlog import _backend
from unitlog import config as config_log
from unitlog.exceptions import DispatchTimeout
from unitlog.levels import Level

if TYPE_CHECKING:
    from unitlog._logger import Logger

__all__ = ['LogEntry', 'PerformanceDispatcher']


@dataclass(frozen=True)
class LogEntry:
    """A log call waiting for delivery. The template is not interpolated yet."""
    logger: Logger
    attachments: tuple
    level: Level
    template: str
    args: tuple[Any, ...] = ()
    created: float = field(default=0.0)

    def dispatch(self) -> None:
        self.logger._dispatch(self)


class PerformanceDispatcher:
    """One unbounded queue and its single consumer thread.

    Starting is a one-way latch; once closed, submissions are refused and
    callers deliver synchronously instead.
    """

    def __init__(self, period: int | None = None, name: str = 'unitlog-perf') -> None:
        self.period = period or config_log.unitlog.performance.period
        self._name = name
        self._queue: queue.SimpleQueue[LogEntry] = queue.SimpleQueue()
        self._lock = threading.Lock()
        self._drain_lock = threading.RLock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._closed = False

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._closed

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self, period: int | None = None) -> bool:
        """Start the consumer. Returns False if it was already started or closed."""
        with self._lock:
            if self._thread is not None or self._closed:
                return False
            if period:
                self.period = period
            self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._thread.start()
            return True

    def submit(self, entry: LogEntry) -> bool:
        """Queue an entry. False means the caller must deliver it itself."""
        with self._lock:
            if self._thread is None or self._closed:
                return False
            self._queue.put(entry)
            return True

    def qsize(self) -> int:
        return self._queue.qsize()

    def drain(self) -> int:
        """Deliver every queued entry, in order, on the calling thread.

        Returns the number of entries delivered.
        """
        count = 0
        with self._drain_lock:
            while True:
                try:
                    entry = self._queue.get_nowait()
                except queue.Empty:
                    return count
                try:
                    entry.dispatch()
                except Exception as e:
                    _backend.diagnostic(f'Queued log entry for [{entry.logger.name}] failed: {e!r}')
                count += 1

    def close(self, timeout: float | None = None) -> None:
        """Refuse new entries, deliver what is queued, stop the worker.

        Raises DispatchTimeout if the worker is still alive after `timeout`
        seconds.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            thread = self._thread
        self.drain()
        self._stop.set()
        if thread is None or thread is threading.current_thread():
            return
        if timeout is None:
            timeout = config_log.unitlog.performance.join_timeout
        thread.join(timeout)
        if thread.is_alive():
            raise DispatchTimeout(f'performance worker [{self._name}] did not stop within {timeout}s')

    def _run(self) -> None:
        while not self._stop.wait(self.period / 1000):
            self.drain()
        self.drain()
