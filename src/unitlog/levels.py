"""Severity levels and the display predicate.
"""
from __future__ import annotations

from enum import IntEnum

__all__ = ['Level', 'compare']


class Level(IntEnum):
    """Ordered severity levels.

    The value is the priority: OFF is the most restrictive threshold and ALL
    the most permissive. OFF and ALL are meant as thresholds, not as levels
    of individual messages.
    """
    OFF = 10
    ERROR = 8
    WARN = 7
    INFO = 5
    TRACE = 1
    ALL = 0

    def display_with(self, threshold: Level | None) -> bool:
        """Whether a message at this level is shown under `threshold`.

        >>> Level.WARN.display_with(Level.INFO)
        True
        >>> Level.TRACE.display_with(Level.INFO)
        False
        >>> Level.ERROR.display_with(Level.OFF)
        False
        >>> Level.ERROR.display_with(None)
        False
        """
        if threshold is None or threshold is Level.OFF:
            return False
        return self.value >= threshold.value

    @property
    def glyph(self) -> str:
        """Single character used by the default line format."""
        return _GLYPHS.get(self, ' ')

    @property
    def loguru_name(self) -> str:
        """Name of the closest loguru level."""
        return _LOGURU_NAMES.get(self, 'INFO')

    @classmethod
    def parse(cls, value: Level | str | int) -> Level:
        """Coerce a level name, priority or Level into a Level.

        Names are case insensitive and accept the stdlib spellings.

        >>> Level.parse('warning')
        <Level.WARN: 7>
        >>> Level.parse('debug')
        <Level.TRACE: 1>
        """
        if isinstance(value, Level):
            return value
        if isinstance(value, int):
            return cls(value)
        name = str(value).strip().upper()
        name = _ALIASES.get(name, name)
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f'Unknown level: {value!r}') from None

    @classmethod
    def from_stdlib(cls, levelno: int) -> Level:
        """Map a stdlib `logging` numeric level onto a Level.

        >>> Level.from_stdlib(30)
        <Level.WARN: 7>
        >>> Level.from_stdlib(10)
        <Level.TRACE: 1>
        """
        if levelno >= 40:
            return cls.ERROR
        if levelno >= 30:
            return cls.WARN
        if levelno >= 20:
            return cls.INFO
        return cls.TRACE


_GLYPHS = {
    Level.ERROR: '#',
    Level.WARN: '*',
    Level.INFO: '>',
    Level.TRACE: '.',
}

_LOGURU_NAMES = {
    Level.ERROR: 'ERROR',
    Level.WARN: 'WARNING',
    Level.INFO: 'INFO',
    Level.TRACE: 'TRACE',
    Level.ALL: 'TRACE',
}

_ALIASES = {
    'WARNING': 'WARN',
    'DEBUG': 'TRACE',
    'FINE': 'TRACE',
    'CRITICAL': 'ERROR',
    'FATAL': 'ERROR',
    'NONE': 'OFF',
}


def compare(candidate: Level, threshold: Level | None) -> bool:
    """Return True if `candidate` should be displayed under `threshold`."""
    return candidate.display_with(threshold)


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
