"""Process state shared by the command line, runner and reporters."""

import importlib
import logging
import runpy
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, TextIO

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """Load path, color and debug settings for one run.

    Attributes:
        ansi: Colored output. None means decide by terminal.
        debug: Let errors propagate instead of reporting them.
        load_path: Directories searched for imports, first wins.
        stdout: Report stream. None means standard output.
        stderr: Error stream. None means standard error.
    """
    ansi: Optional[bool] = None
    debug: bool = False
    load_path: list[str] = field(default_factory=list)
    stdout: Optional[TextIO] = None
    stderr: Optional[TextIO] = None
    loaded: set[str] = field(default_factory=set)

    def prepend_load_path(self, paths: Iterable[str]) -> None:
        """Put paths at the front of the load path, keeping their order."""
        for path in reversed(list(paths)):
            path = str(path)
            if path in self.load_path:
                self.load_path.remove(path)
            self.load_path.insert(0, path)
            logger.debug("load path += %s", path)

    def install_load_path(self) -> None:
        """Mirror the load path onto ``sys.path``."""
        for path in reversed(self.load_path):
            if path in sys.path:
                sys.path.remove(path)
            sys.path.insert(0, path)

    def require(self, name: str) -> bool:
        """Load a module or script once.

        Names ending in ``.py`` or naming an existing file are executed
        as scripts, anything else is imported as a module.

        Returns:
            True if loaded now, False if it was loaded before.
        """
        path = Path(name)
        if name.endswith(".py") or path.is_file():
            key = str(path.resolve())
        else:
            key = name

        if key in self.loaded:
            return False

        self.install_load_path()
        logger.debug("require %s", name)
        if key == name:
            importlib.import_module(name)
        else:
            runpy.run_path(key, run_name=path.stem)
        self.loaded.add(key)
        return True
