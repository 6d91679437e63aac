"""Base reporter.

A reporter serves exactly one suite run. It moves from ``idle`` to
``running`` on the first event and to ``finalized`` on ``end_suite``,
after which it accepts no more events.
"""

import linecache
import time
from enum import Enum
from typing import Any, Callable, Optional, TextIO

import click

from ..errors import ReporterStateError
from .outcome import DETAIL_KINDS, OutcomeDetail, OutcomeKind

Entry = tuple[str, OutcomeDetail]


class ReporterState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    FINALIZED = "finalized"


class Reporter:
    """Accumulates outcomes and renders them.

    Subclasses override ``on_begin``, ``on_outcome`` and ``on_end``.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        verbose: bool = False,
        ansi: Optional[bool] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        """Initialize reporter.

        Args:
            stream: Output stream. Defaults to stdout.
            verbose: Include omissions in the final report.
            ansi: Colored output. None means decide by terminal.
            clock: Time source for the elapsed-time stamp.
        """
        self.stream = stream
        self.verbose = verbose
        self.ansi = ansi
        self.clock = clock
        self.state = ReporterState.IDLE
        self.pass_count = 0
        self.record: dict[OutcomeKind, list[Entry]] = {kind: [] for kind in DETAIL_KINDS}
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None

    # -- events --------------------------------------------------------

    def begin_suite(self, suite: Any = None) -> None:
        if self.state is not ReporterState.IDLE:
            raise ReporterStateError(f"suite already {self.state.value}")
        self._start()
        self.on_begin(suite)

    def outcome(self, kind: OutcomeKind, unit: Any, detail: Any = None) -> None:
        """Record one test outcome and emit its progress output."""
        if self.state is ReporterState.FINALIZED:
            raise ReporterStateError("reporter is finalized")
        if self.state is ReporterState.IDLE:
            self._start()

        kind = OutcomeKind(kind)
        label = "" if unit is None else str(unit)
        info = None
        if kind is OutcomeKind.PASS:
            self.pass_count += 1
        else:
            info = OutcomeDetail.coerce(detail)
            self.record[kind].append((label, info))

        self.on_outcome(kind, label, info)

    def passed(self, unit: Any) -> None:
        self.outcome(OutcomeKind.PASS, unit)

    def failed(self, unit: Any, detail: Any) -> None:
        self.outcome(OutcomeKind.FAIL, unit, detail)

    def errored(self, unit: Any, detail: Any) -> None:
        self.outcome(OutcomeKind.ERROR, unit, detail)

    def todo(self, unit: Any, detail: Any) -> None:
        self.outcome(OutcomeKind.TODO, unit, detail)

    def omit(self, unit: Any, detail: Any) -> None:
        self.outcome(OutcomeKind.OMIT, unit, detail)

    def end_suite(self, suite: Any = None) -> None:
        """Finalize the run and render the report."""
        if self.state is ReporterState.FINALIZED:
            raise ReporterStateError("reporter is finalized")
        if self.state is ReporterState.IDLE:
            self._start()
        self._end_time = self.clock()
        self.state = ReporterState.FINALIZED
        self.on_end(suite)

    def _start(self) -> None:
        self._start_time = self.clock()
        self.state = ReporterState.RUNNING

    # -- hooks ---------------------------------------------------------

    def on_begin(self, suite: Any) -> None:
        pass

    def on_outcome(self, kind: OutcomeKind, unit: str, detail: Optional[OutcomeDetail]) -> None:
        pass

    def on_end(self, suite: Any) -> None:
        pass

    # -- results -------------------------------------------------------

    @property
    def counts(self) -> dict[str, int]:
        counts = {"pass": self.pass_count}
        for kind in DETAIL_KINDS:
            counts[kind.value] = len(self.record[kind])
        return counts

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def success(self) -> bool:
        return not self.record[OutcomeKind.FAIL] and not self.record[OutcomeKind.ERROR]

    @property
    def elapsed(self) -> float:
        if self._start_time is None:
            return 0.0
        end = self._end_time if self._end_time is not None else self.clock()
        return end - self._start_time

    # -- rendering helpers ---------------------------------------------

    def write(self, text: str = "", nl: bool = True) -> None:
        """Write to the stream. ``click.echo`` flushes after every call."""
        click.echo(text, file=self.stream, nl=nl, color=self.ansi)

    def style(self, text: str, **styles) -> str:
        return click.style(text, **styles)

    def timestamp(self) -> str:
        return f"Finished in {self.elapsed:.5f}s"

    def tally(self) -> str:
        counts = self.counts
        return (
            f"{self.total} tests, {counts['pass']} pass, {counts['fail']} fail, "
            f"{counts['error']} errors, {counts['todo']} todo, {counts['omit']} omit"
        )

    def file_and_line(self, detail: OutcomeDetail) -> Optional[str]:
        return detail.location

    def code(self, detail: OutcomeDetail, radius: int = 2) -> Optional[str]:
        """Source lines around the failing line, or None if unreadable."""
        if not detail.file or not detail.line:
            return None

        first = max(1, detail.line - radius)
        lines = []
        for number in range(first, detail.line + radius + 1):
            source = linecache.getline(detail.file, number)
            if not source:
                continue
            marker = "=>" if number == detail.line else "  "
            lines.append(f"    {marker} {number:>4} {source.rstrip()}")

        return "\n".join(lines) if lines else None
