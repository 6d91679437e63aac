"""Runner module - Test orchestration."""

from .context import RunContext
from .executor import SuiteExecutor, SuiteResult, Unit, collect_units, expand_files, select_units
from .orchestrator import Runner

__all__ = [
    "RunContext",
    "Runner",
    "SuiteExecutor",
    "SuiteResult",
    "Unit",
    "collect_units",
    "expand_files",
    "select_units",
]
