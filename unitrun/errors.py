"""Error types raised by the test harness."""

import click


class UnitrunError(Exception):
    """Base class for harness errors."""


class NoSuchSetting(UnitrunError, KeyError):
    """Raised when a configuration mapping names an unknown setting."""

    def __init__(self, keys: list[str]):
        self.keys = list(keys)
        super().__init__(f"no such setting -- {', '.join(self.keys)}")

    def __str__(self) -> str:
        return self.args[0]


class ConfigFileNotFound(UnitrunError, FileNotFoundError):
    """Raised when a config file does not resolve to an existing file."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"config file not found -- `{path}'")

    def __str__(self) -> str:
        return self.args[0]


class UnknownFormat(UnitrunError, ValueError):
    """Raised when no reporter is registered for a format name."""


class ReporterStateError(UnitrunError, RuntimeError):
    """Raised when a reporter receives an event in the wrong state."""


class UsageError(click.UsageError):
    """Command line usage error."""


class Pending(Exception):
    """Raised by a test unit that is not implemented yet."""


class Omit(Exception):
    """Raised by a test unit that should be skipped."""
