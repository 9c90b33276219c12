"""Named logs with level inheritance, multi-sink fan-out and an optional
background delivery mode.

Public API - users should only import from this module.

Usage:
    import unitlog

    # Configure the default registry
    unitlog.configure_logging(level='INFO', sink='console')

    # Module-level logging
    unitlog.info('Application started')
    unitlog.error('Something failed: []', reason)

    # Named logs
    db = unitlog.get_logger('database', level='TRACE')
    db.trace('Query [] took [] ms', query, elapsed)

    # Child logs close with their parent, and inherit its level if linked
    pool = unitlog.get_logger('database.pool', parent=db)
    unitlog.get_registry().add_parent(pool, db)

    # Extra destinations
    sink = unitlog.MemorySink(period=500)
    db.attach_sink(sink)

    # Queue log calls for a worker thread
    unitlog.get_registry().enable_global_performance_mode()
"""
from unitlog._backend import InterceptHandler, intercept_stdlib
from unitlog._logger import Logger, LoggerState
from unitlog.adapters import DumbLogger, LogView, get_dumb_logger
from unitlog.exceptions import ConfigurationLocked, DispatchTimeout
from unitlog.exceptions import NameCollision, NotFound, UnitlogError
from unitlog.formatting import FormatFlag, compose
from unitlog.levels import Level
from unitlog.registry import Registry, get_logger, get_registry, shutdown
from unitlog.setup import class_logger, configure_logging, log_exception
from unitlog.setup import set_level
from unitlog.sinks import BackendSink, BufferSink, CallbackSink, ConsoleSink
from unitlog.sinks import FileSink, LoguruSink, MemorySink, Sink, SinkKind
from unitlog.sinks import StderrSink, StreamSink, make_sink, register_sink_kind

# Name of the log behind the module-level functions
MODULE_LOG = 'main'


def _module_logger() -> Logger:
    return get_logger(MODULE_LOG)


# Module-level convenience functions
def trace(msg: str, *args) -> None:
    """Log a trace message."""
    _module_logger().trace(msg, *args)


def info(msg: str, *args) -> None:
    """Log an info message."""
    _module_logger().info(msg, *args)


def warning(msg: str, *args) -> None:
    """Log a warning message."""
    _module_logger().warning(msg, *args)


def error(msg: str, *args) -> None:
    """Log an error message."""
    _module_logger().error(msg, *args)


def exception(msg: str, *args) -> None:
    """Log an error message with the current traceback."""
    _module_logger().exception(msg, *args)


# Aliases
debug = trace
warn = warning


__all__ = [
    # Configuration
    'configure_logging',
    'set_level',
    'shutdown',
    # Logs and registry
    'get_logger',
    'get_registry',
    'Registry',
    'Logger',
    'LoggerState',
    'Level',
    'LogView',
    'DumbLogger',
    'get_dumb_logger',
    # Logging methods
    'trace',
    'debug',
    'info',
    'warning',
    'warn',
    'error',
    'exception',
    # Sinks
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
    'make_sink',
    'register_sink_kind',
    # Formatting
    'FormatFlag',
    'compose',
    # Errors
    'UnitlogError',
    'NameCollision',
    'NotFound',
    'ConfigurationLocked',
    'DispatchTimeout',
    # Utilities
    'InterceptHandler',
    'intercept_stdlib',
    'class_logger',
    'log_exception',
]
