"""Logger-like objects that are not registry logs.

`LogView` hands a component the logging calls of a log without letting it
reconfigure or close that log. `DumbLogger` prints straight to standard
output and needs no registry, for code that runs before logging is set up.
"""
from __future__ import annotations

import sys
from typing import Any

from unitlog._logger import BaseLogger, Logger
from unitlog.formatting import compose
from unitlog.levels import Level

__all__ = ['LogView', 'DumbLogger', 'get_dumb_logger']


class LogView(BaseLogger):
    """Logging-only view of a Logger."""

    def __init__(self, logger: Logger):
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    @property
    def level(self) -> Level | None:
        return self._logger.level

    def log(self, level: Level | str, template: str, *args: Any) -> None:
        self._logger.log(level, template, *args)

    def __repr__(self) -> str:
        return f'LogView({self._logger.name!r})'


class DumbLogger(BaseLogger):
    """Prints every message, whatever its level, behind a short preamble.

    >>> DumbLogger().li('value []', 3)
    # value [3]
    """

    def __init__(self, preamble: str = '#'):
        self.preamble = preamble

    def log(self, level: Level | str, template: str, *args: Any) -> None:
        print(f'{self.preamble} {compose(template, args)}', file=sys.stdout)


_dumb: DumbLogger | None = None


def get_dumb_logger() -> DumbLogger:
    """Shared DumbLogger instance."""
    global _dumb
    if _dumb is None:
        _dumb = DumbLogger()
    return _dumb


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
