"""Named logs.

A Logger owns its sinks and fans every message out to them in attach order.
Loggers are created through a `Registry`, which supplies the shared layout
state, the flush scheduler, the performance dispatcher and the unit graph.
"""
from __future__ import annotations

import functools
import io
import itertools
import threading
import time
import traceback
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from unitlog import _backend
from unitlog import config as config_log
from unitlog.dispatch import LogEntry
from unitlog.exceptions import ConfigurationLocked
from unitlog.formatting import compose
from unitlog.levels import Level
from unitlog.sinks import BackendSink, BufferSink, Sink, StreamSink, make_sink

if TYPE_CHECKING:
    from unitlog.registry import Registry

__all__ = ['BaseLogger', 'Logger', 'LoggerState']

_uids = itertools.count(1)


class LoggerState(StrEnum):
    UNBUILT = 'unbuilt'
    ACTIVE = 'active'
    EXITED = 'exited'


@dataclass(eq=False)
class _Attachment:
    """A sink as attached to one log, with the text not yet handed to it."""
    sink: Sink
    buffer: io.StringIO = field(default_factory=io.StringIO)
    detached: bool = False
    failed: bool = False


class BaseLogger:
    """Convenience calls shared by every logger-like object; subclasses define `log`."""

    def log(self, level: Level, template: str, *args: Any) -> None:
        raise NotImplementedError

    def error(self, message: str, *args: Any) -> None:
        self.log(Level.ERROR, message, *args)

    def warn(self, message: str, *args: Any) -> None:
        self.log(Level.WARN, message, *args)

    def info(self, message: str, *args: Any) -> None:
        self.log(Level.INFO, message, *args)

    def trace(self, message: str, *args: Any) -> None:
        self.log(Level.TRACE, message, *args)

    def exception(self, message: str, *args: Any) -> None:
        """Log an error with the current traceback appended."""
        tb = traceback.format_exc()
        if not tb.startswith('NoneType: None'):
            message = f'{message}\n{tb.rstrip()}'
        self.log(Level.ERROR, message, *args)

    # Aliases
    warning = warn
    debug = trace
    le = error
    lw = warn
    li = info
    lf = trace

    def lr(self, ret: Any, message: str | None = None, *args: Any) -> Any:
        """Trace the value `ret` (and a message), then return it."""
        if message is None:
            self.trace('[]', ret)
        else:
            self.trace('[]: ' + message, ret, *args)
        return ret

    def ler(self, ret: Any, message: str, *args: Any) -> Any:
        """Log an error, then return `ret`."""
        self.error(message, *args)
        return ret

    def dbg(self, flag: Any, message: str, *args: Any) -> None:
        """Trace a message only when `flag` is truthy."""
        if flag:
            self.trace(message, *args)


class Logger(BaseLogger):
    """A named log.

    The effective level is either pinned with `set_level` or inherited from
    parent logs. A log without any level is silent.

    Examples
        >>> from unitlog import Registry, MemorySink
        >>> registry = Registry(default_level='INFO')
        >>> sink = MemorySink(flags=0)
        >>> log = registry.get_or_create('app').attach_sink(sink)
        >>> log.li('i am [] here', 'standing')
        >>> sink.text
        '> i am [standing] here\\n'
        >>> registry.close_all()
    """

    def __init__(self, name: str, registry: Registry, level: Level | str | None = None,
                 kind: str | None = None):
        self.name = name
        self.uid = next(_uids)
        self._registry = registry
        self._level = Level.parse(level) if level is not None else None
        self._pinned: Level | None = None
        self._kind = str(kind or config_log.unitlog.sink)
        self._performance: bool | None = None
        self._highlighted = False
        self._state = LoggerState.UNBUILT
        self._attachments: list[_Attachment] = []
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        level = self._level.name if self._level is not None else None
        return f'Logger({self.name!r}, level={level}, state={self._state})'

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def state(self) -> LoggerState:
        return self._state

    @property
    def level(self) -> Level | None:
        return self._level

    @property
    def pinned_level(self) -> Level | None:
        return self._pinned

    @property
    def highlighted(self) -> bool:
        return self._highlighted

    @property
    def sink_kind(self) -> str:
        return self._kind

    @property
    def sinks(self) -> list[Sink]:
        with self._lock:
            return [att.sink for att in self._attachments]

    @property
    def performance(self) -> bool:
        """True if calls on this log are queued for the worker thread."""
        return self._registry.performance_mode and self._performance is not False

    # ------------------------------------------------------------------
    # configuration

    def set_level(self, level: Level | str) -> Logger:
        """Pin the level of this log and push it to unpinned descendants."""
        level = Level.parse(level)
        with self._lock:
            self._pinned = level
            self._level = level
        self._registry.graph.propagate(self, level)
        return self

    def _apply_level(self, level: Level | None) -> None:
        self._level = level

    def set_highlighted(self, highlighted: bool = True) -> Logger:
        """While any log is highlighted, the lines of the others are indented."""
        self._highlighted = highlighted
        self._registry.layout.set_highlighted(self.name, highlighted)
        return self

    def set_sink_kind(self, kind: str) -> Logger:
        """Choose the default sink built on first use. Only before the build."""
        try:
            with self._lock:
                if self._state is not LoggerState.UNBUILT:
                    raise ConfigurationLocked(self.name, 'sink kind')
                self._kind = str(kind)
        except ConfigurationLocked as e:
            self.error(str(e))
        return self

    def set_performance_mode(self, enabled: bool = True) -> Logger:
        """Queue this log's calls for the worker thread, or keep them synchronous.

        Enabling it turns on the registry's performance mode as well.
        """
        self._performance = enabled
        if enabled:
            self._registry.enable_global_performance_mode()
        return self

    def build(self) -> Logger:
        """Activate the log, creating the default sink if none is attached."""
        with self._lock:
            if self._state is not LoggerState.UNBUILT:
                return self
            if not self._attachments:
                try:
                    self._attachments.append(_Attachment(make_sink(self._kind, self.name)))
                except Exception as e:
                    _backend.diagnostic(f'Could not build [{self._kind}] sink for log [{self.name}]: {e!r}')
            self._state = LoggerState.ACTIVE
        return self

    # ------------------------------------------------------------------
    # sinks

    def attach_sink(self, sink: Sink) -> Logger:
        with self._lock:
            if self._state is LoggerState.EXITED:
                _backend.diagnostic(f'Sink not attached, log [{self.name}] has exited')
            elif self._find(sink) is None:
                self._attachments.append(_Attachment(sink))
        return self

    def detach_sink(self, sink: Sink) -> bool:
        """Flush and release a sink. Returns False if it was not attached."""
        self._drain_queue()
        with self._lock:
            att = self._find(sink)
            if att is None:
                return False
            self._attachments.remove(att)
            self._release(att)
        return True

    def detach_all(self) -> None:
        self._drain_queue()
        with self._lock:
            self._release_all()

    def flush(self) -> None:
        """Deliver everything buffered, including queued calls, now."""
        self._drain_queue()
        with self._lock:
            for att in self._attachments:
                self._flush_attachment(att)

    def _find(self, sink: Sink) -> _Attachment | None:
        for att in self._attachments:
            if att.sink is sink:
                return att
        return None

    def _drain_queue(self) -> None:
        # entries queued before an opt-out still target this log;
        # never call with the logger lock held
        if self._registry.performance_mode:
            self._registry.dispatcher.drain()

    def _release_all(self) -> None:
        attachments, self._attachments = self._attachments, []
        for att in attachments:
            self._release(att)

    def _release(self, att: _Attachment) -> None:
        self._registry.scheduler.cancel(att)
        self._flush_attachment(att)
        att.detached = True
        try:
            att.sink.on_detach()
        except Exception as e:
            self._report(att, 'detach', e)

    def _report(self, att: _Attachment, action: str, error: Exception) -> None:
        if att.failed:
            return
        att.failed = True
        _backend.diagnostic(f'{type(att.sink).__name__} failed to {action} for log [{self.name}]: {error!r}')

    # ------------------------------------------------------------------
    # logging

    def log(self, level: Level | str, template: str, *args: Any) -> None:
        """Log a message. The i-th `[]` in `template` is replaced by the i-th arg."""
        if not isinstance(level, Level):
            level = Level.parse(level)
        if not level.display_with(self._level):
            return
        if self._state is LoggerState.UNBUILT:
            self.build()
        elif self._state is LoggerState.EXITED:
            return
        created = time.time()
        attachments = tuple(self._attachments)
        if self.performance:
            entry = LogEntry(self, attachments, level, template, args, created)
            if self._registry.dispatcher.submit(entry):
                return
        self._deliver(level, compose(template, args), attachments, created)

    def _dispatch(self, entry: LogEntry) -> None:
        self._deliver(entry.level, compose(entry.template, entry.args), entry.attachments, entry.created)

    def _deliver(self, level: Level, message: str, attachments: tuple, created: float) -> None:
        with self._lock:
            for att in attachments:
                if att.detached:
                    continue
                try:
                    self._write(att, level, message, created)
                except Exception as e:
                    self._report(att, 'write', e)

    def _write(self, att: _Attachment, level: Level, message: str, created: float) -> None:
        sink = att.sink
        if isinstance(sink, BackendSink):
            sink.emit(level, self.name, message)
            return
        if sink.uses_custom_format:
            text = sink.format(level, self.name, message)
        else:
            text = self._registry.layout.format_line(self.name, level, message, sink.flags, created)
        if isinstance(sink, StreamSink):
            sink.write(text)
            if sink.period <= 0:
                sink.flush_now()
            else:
                self._schedule(att)
        elif isinstance(sink, BufferSink):
            att.buffer.write(text)
            if sink.period <= 0:
                self._push(att)
            else:
                self._schedule(att)
        else:
            raise TypeError(f'unsupported sink type {type(sink).__name__}')

    def _schedule(self, att: _Attachment) -> None:
        self._registry.scheduler.schedule(att, att.sink.period, functools.partial(self._scheduled_flush, att))

    def _scheduled_flush(self, att: _Attachment) -> None:
        with self._lock:
            if not att.detached:
                self._flush_attachment(att)

    def _flush_attachment(self, att: _Attachment) -> None:
        sink = att.sink
        try:
            if isinstance(sink, StreamSink):
                sink.flush_now()
            elif isinstance(sink, BufferSink):
                self._push(att)
        except Exception as e:
            self._report(att, 'flush', e)

    def _push(self, att: _Attachment) -> None:
        content = att.buffer.getvalue()
        if not content:
            return
        if att.sink.update(content) is False:
            # not delivered; offered again with the next update
            return
        if not att.sink.retain_full_history:
            att.buffer.seek(0)
            att.buffer.truncate()

    # ------------------------------------------------------------------
    # exit

    def exit(self, flush_first: bool = False) -> None:
        """Close this log and, if it is registered, the logs below it."""
        if self._registry.get(self.name) is self:
            self._registry.exit(self.name, flush_first)
        else:
            self._close(flush_first)

    def _close(self, flush_first: bool = False) -> None:
        with self._lock:
            if self._state is LoggerState.EXITED:
                return
        self._drain_queue()
        with self._lock:
            if flush_first:
                for att in self._attachments:
                    self._flush_attachment(att)
            if self._attachments and Level.INFO.display_with(self._level):
                self._deliver(Level.INFO, 'log exit.', tuple(self._attachments), time.time())
            self._state = LoggerState.EXITED
            self._release_all()
        self.set_highlighted(False)
