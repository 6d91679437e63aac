"""TAP-Y and TAP-J reporters.

Stream machine-readable documents: one ``suite`` document, one ``test``
document per outcome, and a ``final`` document with the tally. TAP-J
writes each document as a line of JSON, TAP-Y as a YAML document.
"""

import json
from datetime import datetime, timezone
from typing import Any, Optional

import yaml

from .base import Reporter
from .outcome import OutcomeDetail, OutcomeKind

REVISION = 5


class TapReporter(Reporter):
    """Builds TAP documents. Subclasses decide the encoding."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._suite_emitted = False

    def emit(self, document: dict[str, Any]) -> None:
        raise NotImplementedError

    def on_begin(self, suite: Any) -> None:
        self._emit_suite(suite)

    def on_outcome(self, kind: OutcomeKind, unit: str, detail: Optional[OutcomeDetail]) -> None:
        if not self._suite_emitted:
            self._emit_suite(None)

        document: dict[str, Any] = {
            "type": "test",
            "status": kind.value,
            "label": unit,
            "time": round(self.elapsed, 6),
        }
        if detail is not None:
            document["exception"] = {
                "message": detail.description,
                "class": detail.error_class,
                "file": detail.file,
                "line": detail.line,
            }
        self.emit(document)

    def on_end(self, suite: Any) -> None:
        if not self._suite_emitted:
            self._emit_suite(suite)
        counts = self.counts
        self.emit({
            "type": "final",
            "time": round(self.elapsed, 6),
            "counts": {"total": self.total, **counts},
        })

    def _emit_suite(self, suite: Any) -> None:
        self._suite_emitted = True
        document: dict[str, Any] = {
            "type": "suite",
            "start": datetime.now(timezone.utc).isoformat(),
            "rev": REVISION,
        }
        if suite is not None:
            try:
                document["count"] = len(suite)
            except TypeError:
                pass
        self.emit(document)


class TapJReporter(TapReporter):
    """One JSON document per line."""

    def emit(self, document: dict[str, Any]) -> None:
        self.write(json.dumps(document, ensure_ascii=False))


class TapYReporter(TapReporter):
    """YAML document stream, terminated by ``...``."""

    def emit(self, document: dict[str, Any]) -> None:
        text = yaml.safe_dump(document, explicit_start=True, sort_keys=False)
        self.write(text, nl=False)

    def on_end(self, suite: Any) -> None:
        super().on_end(suite)
        self.write("...")
