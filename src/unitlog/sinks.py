"""Sinks - destinations that receive the formatted output of a log.

Three variants:
- stream sinks write each line to a stream (console, stderr, file);
- buffer sinks are handed accumulated text, immediately or on a cadence;
- backend sinks hand the raw message to another logging system (loguru).

Each sink declares its update period in milliseconds (<= 0 means write-through),
the `FormatFlag`s for the default formatter, and optionally a custom formatter.
"""
from __future__ import annotations

import io
import os
import sys
from collections.abc import Callable
from enum import StrEnum
from pathlib import Path
from typing import IO, Any

from loguru import logger as _loguru
from unitlog import config as config_log
from unitlog.formatting import FormatFlag
from unitlog.levels import Level

__all__ = [
    'Sink',
    'StreamSink',
    'ConsoleSink',
    'StderrSink',
    'FileSink',
    'BufferSink',
    'MemorySink',
    'CallbackSink',
    'BackendSink',
    'LoguruSink',
    'SinkKind',
    'register_sink_kind',
    'make_sink',
]

Formatter = Callable[[Level, str, str], str]


class Sink:
    """Base class for all sinks."""

    def __init__(
        self,
        period: int = 0,
        flags: FormatFlag = FormatFlag.NAME,
        formatter: Formatter | None = None,
    ):
        self.period = period
        self.flags = FormatFlag(flags)
        self.formatter = formatter

    @property
    def uses_custom_format(self) -> bool:
        return self.formatter is not None

    def format(self, level: Level, source: str, message: str) -> str:
        """Custom line for a message. Only called if `uses_custom_format`."""
        if self.formatter is None:
            raise NotImplementedError(f'{type(self).__name__} has no custom format')
        return self.formatter(level, source, message)

    def on_detach(self) -> None:
        """Release resources. Called once, when the sink leaves its log."""

    def __repr__(self) -> str:
        return f'{type(self).__name__}(period={self.period}, flags={self.flags!r})'


class StreamSink(Sink):
    """Writes each line to a stream.

    The stream is only closed on detach if the sink owns it. Binary streams
    receive encoded bytes.
    """

    def __init__(self, stream: IO | None = None, *, owns_stream: bool = False,
                 encoding: str = 'utf-8', **kwargs: Any):
        super().__init__(**kwargs)
        self._stream = stream
        self.owns_stream = owns_stream
        self.encoding = encoding

    @property
    def stream(self) -> IO:
        return self._stream

    def write(self, text: str) -> None:
        stream = self.stream
        if isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
            stream.write(text.encode(self.encoding))
        else:
            stream.write(text)

    def flush_now(self) -> None:
        self.stream.flush()

    def on_detach(self) -> None:
        stream = self.stream
        if stream is None or getattr(stream, 'closed', False):
            return
        stream.flush()
        if self.owns_stream:
            stream.close()


class ConsoleSink(StreamSink):
    """Standard output, looked up at each write. Never closed."""

    def __init__(self, **kwargs: Any):
        kwargs.setdefault('flags', FormatFlag.NAME)
        super().__init__(None, owns_stream=False, **kwargs)

    @property
    def stream(self) -> IO:
        return sys.stdout


class StderrSink(ConsoleSink):
    """Standard error, looked up at each write. Never closed."""

    @property
    def stream(self) -> IO:
        return sys.stderr


class FileSink(StreamSink):
    """Appends lines to a file it owns. Parent directories are created."""

    def __init__(self, path: str | os.PathLike, mode: str = 'a',
                 encoding: str = 'utf-8', **kwargs: Any):
        kwargs.setdefault('flags', FormatFlag.NAME | FormatFlag.DETAILED_TIME)
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if 'b' in mode:
            stream = self.path.open(mode)
        else:
            stream = self.path.open(mode, encoding=encoding)
        super().__init__(stream, owns_stream=True, encoding=encoding, **kwargs)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({str(self.path)!r})'


class BufferSink(Sink):
    """Receives accumulated text through `update`.

    If `retain_full_history` is False, every update carries only the text
    written since the previous delivered update. If True, every update carries
    the whole log so far.

    `update` may return False to signal that the content was not delivered;
    it will be offered again, together with newer text, at the next update.
    """
    retain_full_history = False

    def __init__(self, retain_full_history: bool | None = None, **kwargs: Any):
        super().__init__(**kwargs)
        if retain_full_history is not None:
            self.retain_full_history = retain_full_history

    def update(self, content: str) -> bool | None:
        raise NotImplementedError


class MemorySink(BufferSink):
    """Keeps every update it receives, in order."""

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self.updates: list[str] = []

    def update(self, content: str) -> None:
        self.updates.append(content)

    @property
    def text(self) -> str:
        """Everything received so far."""
        if self.retain_full_history:
            return self.updates[-1] if self.updates else ''
        return ''.join(self.updates)

    @property
    def lines(self) -> list[str]:
        return self.text.splitlines()


class CallbackSink(BufferSink):
    """Hands each update to a callable, e.g. a display widget or a reporter.

    The callable's return value is passed through, so a reporter returning
    False gets the same content again next time.
    """

    def __init__(self, callback: Callable[[str], bool | None], **kwargs: Any):
        super().__init__(**kwargs)
        self.callback = callback

    def update(self, content: str) -> bool | None:
        return self.callback(content)


class BackendSink(Sink):
    """Hands the raw message to another logging system, which formats it."""

    def emit(self, level: Level, source: str, message: str) -> None:
        raise NotImplementedError


class LoguruSink(BackendSink):
    """Forwards messages to loguru, bound with `logger_name`."""

    def emit(self, level: Level, source: str, message: str) -> None:
        _loguru.bind(logger_name=source).log(level.loguru_name, message)


class SinkKind(StrEnum):
    """Kinds of default sink a log can build itself with."""
    CONSOLE = 'console'
    STDERR = 'stderr'
    MEMORY = 'memory'
    LOGURU = 'loguru'
    FILE = 'file'


def _file_sink(name: str) -> FileSink:
    directory = config_log.unitlog.file.dir or config_log.tmpdir.dir
    filename = ''.join(c if c.isalnum() or c in '-_.' else '_' for c in name)
    return FileSink(Path(directory) / f'{filename}.log')


_FACTORIES: dict[str, Callable[[str], Sink]] = {
    SinkKind.CONSOLE: lambda name: ConsoleSink(),
    SinkKind.STDERR: lambda name: StderrSink(),
    SinkKind.MEMORY: lambda name: MemorySink(),
    SinkKind.LOGURU: lambda name: LoguruSink(),
    SinkKind.FILE: _file_sink,
}


def register_sink_kind(kind: str, factory: Callable[[str], Sink]) -> None:
    """Register (or replace) the factory for a sink kind.

    The factory receives the name of the log it builds a sink for.
    """
    _FACTORIES[str(kind)] = factory


def make_sink(kind: str, name: str) -> Sink:
    """Build a sink of the given kind for the log `name`."""
    try:
        factory = _FACTORIES[str(kind)]
    except KeyError:
        raise ValueError(f'Unknown sink kind: {kind!r}') from None
    return factory(name)
