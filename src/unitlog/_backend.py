"""Loguru backend - internal implementation detail.

This module is NOT part of the public API. Users should never import from here.
The logging core reports its own trouble (failing sinks, failing scheduled
flushes) through loguru, and stdlib `logging` records are routed into unitlog
logs from here.
"""
from __future__ import annotations

import logging
import traceback
from typing import TYPE_CHECKING

from loguru import logger as _loguru
from unitlog.levels import Level

if TYPE_CHECKING:
    from unitlog.registry import Registry

__all__ = ['diagnostic', 'InterceptHandler', 'intercept_stdlib']


def diagnostic(msg: str) -> None:
    """Report a problem of the logging system itself."""
    _loguru.opt(depth=1).warning(msg)


class InterceptHandler(logging.Handler):
    """Handler that intercepts stdlib logging and forwards to unitlog.

    Each record goes to the registry log named after the stdlib logger, so
    existing code using logging.getLogger('job').info(...) shows up in the
    'job' log with its level mapped.
    """

    def __init__(self, registry: Registry | None = None, level: int = logging.NOTSET):
        super().__init__(level)
        self._registry = registry

    @property
    def registry(self) -> Registry:
        if self._registry is None:
            from unitlog.registry import get_registry
            self._registry = get_registry()
        return self._registry

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            message = f'{record.msg} {record.args}'
        if record.exc_info:
            message += '\n' + ''.join(traceback.format_exception(*record.exc_info)).rstrip()
        try:
            self.registry.get_or_create(record.name).log(Level.from_stdlib(record.levelno), message)
        except Exception:
            self.handleError(record)


def intercept_stdlib(registry: Registry | None = None, logger_names: list[str] | None = None) -> None:
    """Set up stdlib logging interception.

    After calling this, logging.getLogger('name').info(...) will be
    routed through the registry log 'name'.

    Args:
        registry: Target registry. Defaults to the process registry.
        logger_names: Specific logger names to intercept. If None,
                      intercepts the root logger (all loggers).
    """
    # Set up root logger interception
    logging.basicConfig(handlers=[InterceptHandler(registry)], level=0, force=True)

    # Also intercept specific named loggers if provided
    if logger_names:
        for name in logger_names:
            stdlib_logger = logging.getLogger(name)
            stdlib_logger.handlers = [InterceptHandler(registry)]
            stdlib_logger.propagate = False
            stdlib_logger.setLevel(logging.DEBUG)  # Let unitlog handle filtering
