"""Reporting module - outcome recording and report formats."""

from typing import Optional, TextIO

from ..errors import UnknownFormat
from .base import Reporter, ReporterState
from .dotprogress import DotProgressReporter
from .outcome import OutcomeDetail, OutcomeKind
from .tap import TapJReporter, TapYReporter

REPORTERS: dict[str, type[Reporter]] = {
    "dotprogress": DotProgressReporter,
    "tapj": TapJReporter,
    "tapy": TapYReporter,
}


def make_reporter(
    name: str,
    stream: Optional[TextIO] = None,
    verbose: bool = False,
    ansi: Optional[bool] = None,
) -> Reporter:
    """Create a reporter for a format name.

    Raises:
        UnknownFormat: If no reporter is registered under ``name``.
    """
    try:
        reporter_class = REPORTERS[name.lower()]
    except KeyError:
        raise UnknownFormat(
            f"unknown report format '{name}'. Must be one of: {', '.join(sorted(REPORTERS))}"
        ) from None
    return reporter_class(stream=stream, verbose=verbose, ansi=ansi)


__all__ = [
    "REPORTERS",
    "DotProgressReporter",
    "OutcomeDetail",
    "OutcomeKind",
    "Reporter",
    "ReporterState",
    "TapJReporter",
    "TapYReporter",
    "make_reporter",
]
