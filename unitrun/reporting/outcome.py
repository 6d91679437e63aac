"""Outcome kinds and failure details."""

import traceback
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

# Frames inside this package are skipped when locating a failure.
_PACKAGE_DIR = str(Path(__file__).resolve().parent.parent)


class OutcomeKind(str, Enum):
    """Classification of a single test unit's result."""
    PASS = "pass"
    FAIL = "fail"
    ERROR = "error"
    TODO = "todo"
    OMIT = "omit"


# Kinds whose entries are recorded with details.
DETAIL_KINDS = (OutcomeKind.FAIL, OutcomeKind.ERROR, OutcomeKind.TODO, OutcomeKind.OMIT)


@dataclass(frozen=True)
class OutcomeDetail:
    """Description of a non-passing outcome and where it came from."""
    description: str
    file: Optional[str] = None
    line: Optional[int] = None
    error_class: Optional[str] = None

    def __str__(self) -> str:
        return self.description

    @property
    def location(self) -> Optional[str]:
        """``file:line``, or None if either is unknown."""
        if self.file and self.line:
            return f"{self.file}:{self.line}"
        return None

    @classmethod
    def from_exception(cls, error: BaseException) -> "OutcomeDetail":
        file, line = _origin(error)
        return cls(
            description=str(error) or type(error).__name__,
            file=file,
            line=line,
            error_class=type(error).__name__,
        )

    @classmethod
    def coerce(cls, detail: Any) -> "OutcomeDetail":
        """Build a detail from an exception, string or existing detail."""
        if isinstance(detail, OutcomeDetail):
            return detail
        if isinstance(detail, BaseException):
            try:
                return cls.from_exception(detail)
            except Exception:
                return cls(description=repr(detail))
        if detail is None:
            return cls(description="")
        return cls(description=str(detail))


def _origin(error: BaseException) -> tuple[Optional[str], Optional[int]]:
    """Innermost traceback frame outside this package."""
    frames = traceback.extract_tb(error.__traceback__) if error.__traceback__ else []
    for frame in reversed(frames):
        if not frame.filename.startswith(_PACKAGE_DIR):
            return frame.filename, frame.lineno
    if frames:
        return frames[-1].filename, frames[-1].lineno
    return None, None
