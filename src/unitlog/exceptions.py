"""Errors raised by the logging core.

Only the registry errors and the shutdown timeout ever reach application code;
everything else is contained inside the logging system.
"""
__all__ = [
    'UnitlogError',
    'NameCollision',
    'NotFound',
    'ConfigurationLocked',
    'DispatchTimeout',
    ]


class UnitlogError(Exception):
    """Base class for all unitlog errors."""


class NameCollision(UnitlogError):
    """A new log was required but the name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f'log name already present [{name}]')
        self.name = name


class NotFound(UnitlogError, KeyError):
    """The named log is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f'log not present [{name}]')
        self.name = name

    def __str__(self) -> str:
        return self.args[0]


class ConfigurationLocked(UnitlogError):
    """Build-time configuration was changed after the log became active."""

    def __init__(self, name: str, setting: str) -> None:
        super().__init__(f'configuration of log [{name}] is locked; cannot change [{setting}]')
        self.name = name
        self.setting = setting


class DispatchTimeout(UnitlogError, TimeoutError):
    """The performance-mode worker did not stop within the join timeout."""
