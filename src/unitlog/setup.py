"""Logging configuration helpers for applications.
"""
from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

from unitlog import config as config_log
from unitlog import registry as registry_log
from unitlog._backend import intercept_stdlib
from unitlog.levels import Level

__all__ = [
    'configure_logging',
    'log_exception',
    'class_logger',
    'set_level',
]


def configure_logging(
    level: Level | str | None = None,
    sink: str | None = None,
    performance: bool | None = None,
    period: int | None = None,
    master_level: Level | str | None = None,
    stdlib: bool | list[str] = False,
) -> registry_log.Registry:
    """Replace the default registry with a freshly configured one.

    The previous default registry, if any, is closed first.

    Args:
        level: Level of new logs (defaults to CONFIG_UNITLOG_LEVEL)
        sink: Default sink kind ('console', 'stderr', 'memory', 'loguru', 'file')
        performance: Queue log calls for a worker thread
                     (defaults to CONFIG_UNITLOG_PERFORMANCE)
        period: Wake-up period of the worker thread, in milliseconds
        master_level: Global level followed by every log without its own
        stdlib: Route stdlib logging into the registry. True intercepts the
                root logger; a list intercepts those named loggers as well.

    Returns
        The new default registry.
    """
    registry_log.shutdown()
    registry = registry_log.Registry(
        default_level=level,
        sink=sink,
        master_level=master_level,
        period=period,
    )
    registry_log.install(registry)

    if performance is None:
        performance = config_log.unitlog.performance.enabled
    if performance:
        registry.enable_global_performance_mode(period)

    if stdlib:
        intercept_stdlib(registry, stdlib if isinstance(stdlib, list) else None)

    return registry


def set_level(levelname: Level | str) -> None:
    """Set the global level: every log of the default registry without a
    level of its own follows it.
    """
    registry_log.get_registry().master.set_level(levelname)


def class_logger(cls: type, level: Level | str | None = None) -> type:
    """Add a `log` attribute to a class.

    The log is named after the class's module and name and lives in the
    default registry.
    """
    logger = registry_log.get_logger(f'{cls.__module__}.{cls.__name__}', level=level)
    cls._should_log_trace = lambda self: Level.TRACE.display_with(logger.level)
    cls._should_log_info = lambda self: Level.INFO.display_with(logger.level)
    cls.log = logger
    return cls


def log_exception(logger: Any) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator that logs exceptions and re-raises them.

    Works with unitlog loggers and with stdlib loggers.
    """
    def wrapper(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped_fn(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except Exception as exc:
                if hasattr(logger, 'exception'):
                    logger.exception(str(exc))
                raise
        return wrapped_fn
    return wrapper
