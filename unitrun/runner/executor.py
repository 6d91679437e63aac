"""Suite executor - collects test units and runs them in order.

Coordinates the test flow:
1. Collect units from test files (or use a given suite)
2. Filter by tags, unit names and description matches
3. Invoke each unit and classify its outcome
4. Stream outcomes to the reporter
"""

import glob
import logging
import runpy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from ..config.settings import Config
from ..errors import Omit, Pending
from ..reporting import OutcomeKind, Reporter

logger = logging.getLogger(__name__)

UNIT_PREFIX = "test_"


@dataclass
class Unit:
    """A runnable test unit."""
    name: str
    func: Callable[[], Any]
    module: str = ""
    tags: tuple[str, ...] = ()
    description: str = ""

    def __str__(self) -> str:
        return f"{self.module}.{self.name}" if self.module else self.name

    @classmethod
    def from_callable(cls, func: Callable[[], Any], module: str = "") -> "Unit":
        tags = getattr(func, "tags", ())
        if isinstance(tags, str):
            tags = (tags,)
        return cls(
            name=getattr(func, "__name__", repr(func)),
            func=func,
            module=module,
            tags=tuple(str(t) for t in tags),
            description=(getattr(func, "__doc__", None) or "").strip(),
        )


@dataclass
class SuiteResult:
    """Outcome of a suite run."""
    success: bool
    counts: dict[str, int] = field(default_factory=dict)


def expand_files(patterns: Iterable[str]) -> list[Path]:
    """Expand glob patterns into existing files, keeping order."""
    files: list[Path] = []
    for pattern in patterns:
        matches = sorted(glob.glob(pattern, recursive=True)) or [pattern]
        for match in matches:
            path = Path(match)
            if path.is_dir():
                candidates = sorted(path.rglob(f"{UNIT_PREFIX}*.py"))
            else:
                candidates = [path]
            for candidate in candidates:
                if candidate not in files:
                    files.append(candidate)
    return files


def collect_units(path: Path) -> list[Unit]:
    """Run a test file and collect its module-level ``test_*`` callables."""
    logger.debug("collecting units from %s", path)
    namespace = runpy.run_path(str(path), run_name=path.stem)
    return [
        Unit.from_callable(value, module=path.stem)
        for name, value in namespace.items()
        if name.startswith(UNIT_PREFIX) and callable(value)
    ]


def select_units(units: Iterable[Unit], config: Config) -> list[Unit]:
    """Apply the tag, unit and match filters of a config."""
    selected = []
    for unit in units:
        if config.tags and not set(config.tags) & set(unit.tags):
            continue
        if config.units and not any(u in str(unit) for u in config.units):
            continue
        if config.match and not any(
            m in unit.name or m in unit.description for m in config.match
        ):
            continue
        selected.append(unit)
    return selected


class SuiteExecutor:
    """Runs test units sequentially and reports each outcome."""

    def __init__(self, config: Config, reporter: Reporter, suite: Optional[list] = None):
        """Initialize executor.

        Args:
            config: Finalized run configuration.
            reporter: Reporter receiving outcomes.
            suite: Pre-built units or callables. Files are collected if None.
        """
        self.config = config
        self.reporter = reporter
        self.suite = suite

    def units(self) -> list[Unit]:
        if self.suite is not None:
            units = [
                item if isinstance(item, Unit) else Unit.from_callable(item)
                for item in self.suite
            ]
        else:
            units = []
            for path in expand_files(self.config.files):
                units.extend(collect_units(path))
        return select_units(units, self.config)

    def execute(self) -> SuiteResult:
        units = self.units()
        self.reporter.begin_suite(units)
        for unit in units:
            self._run_unit(unit)
        self.reporter.end_suite(units)
        return SuiteResult(success=self.reporter.success, counts=self.reporter.counts)

    def _run_unit(self, unit: Unit) -> None:
        try:
            unit.func()
        except AssertionError as e:
            self.reporter.outcome(OutcomeKind.FAIL, unit, e)
        except (Pending, NotImplementedError) as e:
            self.reporter.outcome(OutcomeKind.TODO, unit, e)
        except Omit as e:
            self.reporter.outcome(OutcomeKind.OMIT, unit, e)
        except Exception as e:
            self.reporter.outcome(OutcomeKind.ERROR, unit, e)
        else:
            self.reporter.outcome(OutcomeKind.PASS, unit)
