"""Registry of named logs.

The registry maps names to live loggers and remembers which log was created
under which, so closing a log closes the logs below it first. It also owns
the state every logger of the registry shares: the master log, the unit
graph for level propagation, the flush scheduler, the performance dispatcher
and the line layout.
"""
from __future__ import annotations

import atexit
import threading

from unitlog import config as config_log
from unitlog._logger import Logger
from unitlog.dispatch import PerformanceDispatcher
from unitlog.exceptions import NameCollision, NotFound
from unitlog.formatting import Layout
from unitlog.hierarchy import UnitGraph
from unitlog.levels import Level
from unitlog.scheduler import FlushScheduler

__all__ = ['Registry', 'get_registry', 'get_logger', 'install', 'shutdown']


class Registry:
    """Name -> Logger table.

    Args:
        default_level: Level of new logs that get none. Defaults to the
                       CONFIG_UNITLOG_LEVEL setting.
        sink: Default sink kind of new logs.
        master_name: Name of the master log.
        master_level: Level of the master log. The master is silent while it
                      has no level; once it has one, every unpinned log
                      follows it.
        period: Wake-up period of the performance worker, in milliseconds.

    Examples
        >>> registry = Registry()
        >>> a = registry.get_or_create('A')
        >>> registry.get_or_create('A') is a
        True
        >>> registry.get_or_create('A', ensure_new=True)
        Traceback (most recent call last):
        ...
        unitlog.exceptions.NameCollision: log name already present [A]
        >>> registry.close_all()
    """

    def __init__(self, default_level: Level | str | None = None, sink: str | None = None,
                 master_name: str | None = None, master_level: Level | str | None = None,
                 period: int | None = None):
        self._lock = threading.RLock()
        self._loggers: dict[str, Logger] = {}
        self._parents: dict[str, str] = {}
        self._exiting: set[str] = set()
        if default_level is None:
            default_level = config_log.unitlog.level
        self._default_level = Level.parse(default_level)
        self._sink_kind = str(sink or config_log.unitlog.sink)
        self._performance = False
        self.layout = Layout()
        self.graph = UnitGraph()
        self.scheduler = FlushScheduler()
        self.dispatcher = PerformanceDispatcher(period)
        self.master = Logger(master_name or config_log.unitlog.master.name, self, kind=self._sink_kind)
        self.graph.add(self.master)
        if master_level is None:
            master_level = config_log.unitlog.master.level
        if master_level is not None:
            self.master.set_level(master_level)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._loggers

    def __len__(self) -> int:
        with self._lock:
            return len(self._loggers)

    def __getitem__(self, name: str) -> Logger:
        with self._lock:
            try:
                return self._loggers[name]
            except KeyError:
                raise NotFound(name) from None

    def get(self, name: str) -> Logger | None:
        with self._lock:
            return self._loggers.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._loggers)

    def parent_of(self, name: str) -> str | None:
        with self._lock:
            return self._parents.get(name)

    # ------------------------------------------------------------------
    # creation

    def get_or_create(self, name: str, parent: Logger | str | None = None, ensure_new: bool = False,
                      level: Level | str | None = None, kind: str | None = None) -> Logger:
        """Return the live log called `name`, creating it if needed.

        For an existing log the other arguments are ignored, unless
        `ensure_new` is set, in which case NameCollision is raised. `parent`
        only records the link used to close logs in cascade; level
        inheritance goes through `add_parent`.
        """
        if not isinstance(name, str) or not name:
            raise ValueError(f'log name must be a non-empty string, got {name!r}')
        with self._lock:
            logger = self._loggers.get(name)
            if logger is not None:
                if ensure_new:
                    raise NameCollision(name)
                return logger
            logger = Logger(name, self, level=self._default_level, kind=kind or self._sink_kind)
            self._loggers[name] = logger
            parent_name = parent.name if isinstance(parent, Logger) else parent
            if parent_name:
                self._parents[name] = parent_name
            self.graph.add_parent(logger, self.master)
            if level is not None:
                logger.set_level(level)
            self.master.trace('new log [] (count now [])', name, len(self._loggers))
            return logger

    # ------------------------------------------------------------------
    # levels

    @property
    def default_level(self) -> Level:
        return self._default_level

    def set_default_level(self, level: Level | str) -> Level:
        """Set the level of logs created from now on. Returns the previous one."""
        with self._lock:
            previous, self._default_level = self._default_level, Level.parse(level)
            return previous

    def add_parent(self, child: Logger | str, parent: Logger | str) -> bool:
        """Make `child` inherit levels from `parent`."""
        with self._lock:
            return self.graph.add_parent(self._resolve(child), self._resolve(parent))

    def remove_parents(self, child: Logger | str) -> None:
        """Drop every inheritance link of `child` except the one to the master."""
        with self._lock:
            child = self._resolve(child)
            self.graph.remove_parents(child)
            self.graph.add_parent(child, self.master)

    def _resolve(self, unit: Logger | str) -> Logger:
        if isinstance(unit, Logger):
            return unit
        if unit == self.master.name:
            return self.master
        return self[unit]

    # ------------------------------------------------------------------
    # performance mode

    @property
    def performance_mode(self) -> bool:
        return self._performance

    def enable_global_performance_mode(self, period: int | None = None) -> None:
        """Queue log calls for the worker thread from now on. Cannot be undone."""
        with self._lock:
            if self._performance:
                return
            self._performance = True
            self.dispatcher.start(period)
            self.master.trace('performance mode on (period [] ms)', self.dispatcher.period)

    # ------------------------------------------------------------------
    # exit

    def exit(self, name: str, flush_first: bool = False) -> None:
        """Close a log, after closing the logs created under it.

        Raises NotFound if no live log has this name.
        """
        with self._lock:
            if name not in self._loggers:
                raise NotFound(name)
            self._exit(name, flush_first)

    def _exit(self, name: str, flush_first: bool) -> None:
        if name in self._exiting:
            return
        self._exiting.add(name)
        try:
            logger = self._loggers[name]
            logger.trace('log out (logs remaining [])', len(self._loggers) - 1)
            for child in [c for c, p in self._parents.items() if p == name]:
                if child in self._loggers:
                    self._exit(child, flush_first)
            logger._close(flush_first)
            del self._loggers[name]
            self._parents.pop(name, None)
            self.graph.remove(logger)
            self.master.trace('log [] removed (count now [])', name, len(self._loggers))
        finally:
            self._exiting.discard(name)

    def reset_all(self) -> None:
        """Forget every log without closing it."""
        with self._lock:
            self._loggers.clear()
            self._parents.clear()
            self.graph = UnitGraph()
            self.graph.add(self.master)
            self.layout.clear_highlighted()
            if self.master.highlighted:
                self.layout.set_highlighted(self.master.name)

    def close_all(self, flush_first: bool = True, timeout: float | None = None) -> None:
        """Close every log, then the master, then stop the background threads.

        Queued calls are delivered first. Raises DispatchTimeout if the
        performance worker does not stop in time.
        """
        self.dispatcher.drain()
        with self._lock:
            for name in list(self._loggers):
                if name in self._loggers:
                    self._exit(name, flush_first)
            self.master._close(flush_first)
        try:
            self.dispatcher.close(timeout)
        finally:
            self.scheduler.close(timeout)


# Process-wide default registry
_registry: Registry | None = None
_registry_lock = threading.Lock()


def get_registry() -> Registry:
    """Get the default registry (lazy initialization, closed at exit)."""
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = Registry()
            if config_log.unitlog.performance.enabled:
                _registry.enable_global_performance_mode()
            atexit.register(_registry.close_all)
        return _registry


def get_logger(name: str, parent: Logger | str | None = None, ensure_new: bool = False,
               level: Level | str | None = None, kind: str | None = None) -> Logger:
    """Get or create a log in the default registry."""
    return get_registry().get_or_create(name, parent=parent, ensure_new=ensure_new,
                                        level=level, kind=kind)


def shutdown(flush_first: bool = True) -> None:
    """Close the default registry. The next `get_registry` starts a new one."""
    global _registry
    with _registry_lock:
        registry, _registry = _registry, None
    if registry is not None:
        atexit.unregister(registry.close_all)
        registry.close_all(flush_first)


def install(registry: Registry) -> Registry | None:
    """Make `registry` the default registry. Returns the one it replaces, still open."""
    global _registry
    with _registry_lock:
        previous, _registry = _registry, registry
        if previous is not None:
            atexit.unregister(previous.close_all)
        atexit.register(registry.close_all)
    return previous
