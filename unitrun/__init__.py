"""unitrun - configurable test runner with streaming reporters."""

from .config import Config, ConfigBuilder, ConfigRegistry
from .errors import (
    ConfigFileNotFound,
    NoSuchSetting,
    Omit,
    Pending,
    ReporterStateError,
    UnitrunError,
    UnknownFormat,
    UsageError,
)
from .reporting import OutcomeDetail, OutcomeKind, Reporter, make_reporter
from .runner import RunContext, Runner, Unit

__version__ = "0.1.0"

__all__ = [
    "Config",
    "ConfigBuilder",
    "ConfigFileNotFound",
    "ConfigRegistry",
    "NoSuchSetting",
    "Omit",
    "OutcomeDetail",
    "OutcomeKind",
    "Pending",
    "Reporter",
    "ReporterStateError",
    "RunContext",
    "Runner",
    "Unit",
    "UnitrunError",
    "UnknownFormat",
    "UsageError",
    "make_reporter",
]
