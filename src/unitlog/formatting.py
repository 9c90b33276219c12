"""Message composition and the default line format.
"""
from __future__ import annotations

import datetime
import threading
import time
from collections.abc import Sequence
from enum import IntFlag
from typing import Any

from unitlog.levels import Level

__all__ = [
    'ARGUMENT_PLACEHOLDER',
    'ARGUMENT_BEGIN',
    'ARGUMENT_END',
    'RECORD_SEPARATOR',
    'FormatFlag',
    'Layout',
    'compose',
    ]

ARGUMENT_PLACEHOLDER = '[]'
ARGUMENT_BEGIN = '['
ARGUMENT_END = ']'

# Terminates lines meant to be split by a downstream parser instead of by newlines
RECORD_SEPARATOR = chr(30)

INDENT = '\t\t'


class FormatFlag(IntFlag):
    """What the default formatter includes in a line."""
    NONE = 0
    NAME = 1
    TIMESTAMP = 2
    DETAILED_TIME = 4
    REPLACE_ENDLINES = 8


def _decorate(arg: Any) -> str:
    try:
        text = str(arg)
    except Exception:
        text = f'<unprintable {type(arg).__name__}>'
    return f'{ARGUMENT_BEGIN}{text}{ARGUMENT_END}'


def compose(template: str, args: Sequence[Any] = ()) -> str:
    """Substitute positional arguments into the `[]` markers of a template.

    Each argument is wrapped in brackets. Arguments without a marker are
    appended in order; markers without an argument stay as literal text.

    >>> compose('i am [] here', ['standing'])
    'i am [standing] here'
    >>> compose('[]', ['a', 'b'])
    '[a][b]'
    >>> compose('[] and []', ['x'])
    '[x] and []'
    >>> compose('no markers')
    'no markers'
    """
    template = str(template)
    if not args:
        return template
    parts = template.split(ARGUMENT_PLACEHOLDER, len(args))
    out = [parts[0]]
    for arg, part in zip(args, parts[1:]):
        out.append(_decorate(arg))
        out.append(part)
    out.extend(_decorate(arg) for arg in args[len(parts) - 1:])
    return ''.join(out)


class Layout:
    """Formatting state shared by every log of a registry.

    Tracks the widest source name seen so far, so that names line up, and
    the set of highlighted logs. While at least one log is highlighted, the
    lines of the other logs are indented.
    """

    def __init__(self, indent: str = INDENT) -> None:
        self.indent = indent
        self._width = 0
        self._highlighted: set[str] = set()
        self._lock = threading.Lock()

    @property
    def name_width(self) -> int:
        return self._width

    @property
    def highlighted(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._highlighted)

    def set_highlighted(self, name: str, highlighted: bool = True) -> None:
        with self._lock:
            if highlighted:
                self._highlighted.add(name)
            else:
                self._highlighted.discard(name)

    def clear_highlighted(self) -> None:
        with self._lock:
            self._highlighted.clear()

    def is_dimmed(self, name: str) -> bool:
        """True when other logs are highlighted and this one is not."""
        with self._lock:
            return bool(self._highlighted) and name not in self._highlighted

    def pad(self, name: str) -> str:
        with self._lock:
            self._width = max(self._width, len(name))
            return name.ljust(self._width)

    def format_line(self, name: str, level: Level, message: str,
                    flags: FormatFlag = FormatFlag.NAME,
                    created: float | None = None) -> str:
        """Default line: timestamp, glyph, padded name, detailed time, message.

        `created` is the epoch time of the log call; defaults to now.
        """
        if created is None:
            created = time.time()
        line = []
        if flags & FormatFlag.TIMESTAMP:
            line.append(f'{int(created * 1000)} ')
        line.append(f'{level.glyph} ')
        if flags & FormatFlag.NAME:
            line.append(f'[ {self.pad(name)} ] ')
        if flags & FormatFlag.DETAILED_TIME:
            stamp = datetime.datetime.fromtimestamp(created)
            line.append(f'[{stamp:%H:%M:%S}.{stamp.microsecond // 100:04d}]')
        line.append(message)
        if flags & FormatFlag.REPLACE_ENDLINES:
            line.append(RECORD_SEPARATOR)
        else:
            line.append('\n')
        text = ''.join(line)
        if self.is_dimmed(name):
            text = self.indent + text
        return text


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
