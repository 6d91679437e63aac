"""Dot-progress reporter."""

from typing import Any, Optional

from .base import Reporter
from .outcome import OutcomeDetail, OutcomeKind

MARKS = {
    OutcomeKind.PASS: (".", {}),
    OutcomeKind.FAIL: ("F", {"fg": "red"}),
    OutcomeKind.ERROR: ("E", {"fg": "red", "bold": True}),
    OutcomeKind.TODO: ("P", {"fg": "yellow"}),
    OutcomeKind.OMIT: ("O", {"fg": "cyan"}),
}

# Section title and whether to show a source excerpt.
SECTIONS = (
    (OutcomeKind.TODO, "PENDING", True),
    (OutcomeKind.FAIL, "FAILURES", True),
    (OutcomeKind.ERROR, "ERRORS", True),
)


class DotProgressReporter(Reporter):
    """Prints one character per test, then a summary."""

    def on_outcome(self, kind: OutcomeKind, unit: str, detail: Optional[OutcomeDetail]) -> None:
        mark, styles = MARKS[kind]
        self.write(self.style(mark, **styles) if styles else mark, nl=False)

    def on_end(self, suite: Any) -> None:
        self.write()
        self.write()
        self.write(self.timestamp())
        self.write()

        if self.verbose and self.record[OutcomeKind.OMIT]:
            self._section("OMISSIONS", self.record[OutcomeKind.OMIT], with_code=False)

        for kind, title, with_code in SECTIONS:
            if self.record[kind]:
                self._section(title, self.record[kind], with_code)

        self.write(self.tally())

    def _section(self, title: str, entries, with_code: bool) -> None:
        self.write(f"{title}\n")
        for unit, detail in entries:
            if unit:
                self.write(self.style(f"    {unit}", bold=True))
            self.write(f"    {detail}")
            location = self.file_and_line(detail)
            if location:
                self.write(f"    {location}")
            if with_code:
                excerpt = self.code(detail)
                if excerpt:
                    self.write(excerpt)
            self.write()
