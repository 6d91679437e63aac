"""Run configuration for the test harness.

A ``ConfigBuilder`` collects settings from presets, environment variables,
config files and command line flags. ``build()`` finalizes it into an
immutable ``Config`` that is handed to the execution engine.
"""

import logging
import os
import re
import runpy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Union

from ..errors import ConfigFileNotFound, NoSuchSetting

logger = logging.getLogger(__name__)

# Default report is the "dot-progress" format.
DEFAULT_FORMAT = "dotprogress"

# Environment variables are named ENV_PREFIX + field name.
ENV_PREFIX = "unitrun_"

CONFIG_SUFFIX = ".py"

TRUTHY = {"1", "true", "yes", "on", "y", "t"}

LIST_FIELDS = ("files", "tags", "units", "match", "loadpath", "requires")

ENV_FIELDS = (
    "format",
    "autopath",
    "files",
    "match",
    "tags",
    "units",
    "requires",
    "loadpath",
)

_SPLIT = re.compile(r"[:;]")

Hook = Callable[[], Any]


def makelist(value: Any) -> list[str]:
    """Normalize a list setting.

    A string is split at ``:`` and ``;`` markers. Anything else is
    coerced to a list of strings. Blank entries are dropped.
    """
    if value is None:
        items: list[str] = []
    elif isinstance(value, str):
        items = _SPLIT.split(value)
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = [str(v) for v in value]
    else:
        items = [str(value)]
    return [item for item in items if item.strip()]


def truthy(value: str) -> bool:
    return value.strip().lower() in TRUTHY


def lookup_env(name: str, environ=None) -> Optional[str]:
    """Find ``unitrun_<name>`` in the environment, ignoring prefix case."""
    environ = os.environ if environ is None else environ
    wanted = f"{ENV_PREFIX}{name}".lower()
    for key, value in environ.items():
        if key.lower() == wanted:
            return value
    return None


@dataclass(frozen=True)
class Config:
    """Finalized, immutable run configuration."""
    format: str = DEFAULT_FORMAT
    files: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    units: tuple[str, ...] = ()
    match: tuple[str, ...] = ()
    loadpath: tuple[str, ...] = ()
    requires: tuple[str, ...] = ()
    autopath: Optional[bool] = None
    verbose: bool = False
    hard: bool = False
    chdir: Optional[str] = None
    name: Optional[str] = None
    mode: Optional[str] = None
    before: Optional[Hook] = field(default=None, compare=False)
    after: Optional[Hook] = field(default=None, compare=False)

    def to_shell_representation(self) -> list[str]:
        """Convert configuration to command line arguments.

        Parsing the result with the ``unitrun`` command reconstructs an
        equivalent configuration. Hooks, ``name`` and ``mode`` are not
        serialized.

        Returns:
            Argument list, test files last after a ``--`` separator.
        """
        argv = []
        if self.autopath is True:
            argv.append("--autopath")
        elif self.autopath is False:
            argv.append("--no-autopath")
        if self.verbose:
            argv.append("--verbose")
        argv.append(f"--format={self.format}")
        if self.chdir:
            argv.append(f"--chdir={self.chdir}")
        if self.tags:
            argv.append(f"--tag={';'.join(self.tags)}")
        if self.match:
            argv.append(f"--match={';'.join(self.match)}")
        if self.units:
            argv.append(f"--unit={';'.join(self.units)}")
        if self.loadpath:
            argv.append(f"--loadpath={';'.join(self.loadpath)}")
        if self.requires:
            argv.append(f"--require={';'.join(self.requires)}")
        if self.files:
            argv.append("--")
            argv.extend(self.files)
        return argv


class ConfigBuilder:
    """Mutable run configuration.

    Every setting has an accessor that reads the current value when
    called without arguments, and merges (lists) or sets (scalars) when
    called with arguments. ``set_<name>`` always replaces.
    """

    def __init__(self, settings: Optional[dict] = None, loaded: Optional[set] = None):
        """Initialize a builder.

        Args:
            settings: Initial settings, applied with ``apply``.
            loaded: Set of already loaded config files, shared with the
                    registry so ``load_config`` runs each file once.
        """
        self._format: Optional[str] = None
        self._autopath: Optional[bool] = None
        self._verbose: Optional[bool] = None
        self._hard: Optional[bool] = None
        self._chdir: Optional[str] = None
        self._name: Optional[str] = None
        self._mode: Optional[str] = None
        self._before: Optional[Hook] = None
        self._after: Optional[Hook] = None
        self._lists: dict[str, list[str]] = {name: [] for name in LIST_FIELDS}
        self._loaded = loaded if loaded is not None else set()

        if settings:
            self.apply(settings)

    def __repr__(self) -> str:
        return f"<ConfigBuilder name={self._name!r} format={self.format()!r}>"

    # -- list settings -------------------------------------------------

    def _merge(self, name: str, entries: tuple) -> list[str]:
        for entry in entries:
            self._lists[name].extend(makelist(entry))
        return self._lists[name]

    def files(self, *entries) -> list[str]:
        """Test files to run. Entries can be glob patterns."""
        return self._merge("files", entries)

    def set_files(self, value) -> None:
        self._lists["files"] = makelist(value)

    def tags(self, *entries) -> list[str]:
        """Tags for selecting tests."""
        return self._merge("tags", entries)

    def set_tags(self, value) -> None:
        self._lists["tags"] = makelist(value)

    def units(self, *entries) -> list[str]:
        """Names matched against module and function names of tests."""
        return self._merge("units", entries)

    def set_units(self, value) -> None:
        self._lists["units"] = makelist(value)

    def match(self, *entries) -> list[str]:
        """Description matches for selecting tests."""
        return self._merge("match", entries)

    def set_match(self, value) -> None:
        self._lists["match"] = makelist(value)

    def loadpath(self, *entries) -> list[str]:
        """Paths to add to the import path."""
        return self._merge("loadpath", entries)

    def set_loadpath(self, value) -> None:
        self._lists["loadpath"] = makelist(value)

    def requires(self, *entries) -> list[str]:
        """Modules or scripts to load before the test files."""
        return self._merge("requires", entries)

    def set_requires(self, value) -> None:
        self._lists["requires"] = makelist(value)

    test_files = files
    set_test_files = set_files
    load_path = loadpath
    set_load_path = set_loadpath

    # -- scalar settings -----------------------------------------------

    def format(self, name: Optional[str] = None) -> str:
        """Name of the report format, ``dotprogress`` by default."""
        if name:
            self._format = str(name)
        return self._format or DEFAULT_FORMAT

    def set_format(self, name) -> None:
        self._format = str(name) if name else None

    def autopath(self, flag: Optional[bool] = None) -> Optional[bool]:
        """Add the project's library directory to the import path?

        ``None`` means unset.
        """
        if flag is not None:
            self._autopath = bool(flag)
        return self._autopath

    def set_autopath(self, flag) -> None:
        self._autopath = None if flag is None else bool(flag)

    def verbose(self, flag: Optional[bool] = None) -> bool:
        if flag is not None:
            self._verbose = bool(flag)
        return bool(self._verbose)

    def set_verbose(self, flag) -> None:
        self._verbose = bool(flag)

    def hard(self, flag: Optional[bool] = None) -> bool:
        """Hard mode, passed through to the execution engine. Off by default."""
        if flag is not None:
            self._hard = bool(flag)
        return bool(self._hard)

    def set_hard(self, flag) -> None:
        self._hard = bool(flag)

    def chdir(self, path: Optional[Union[str, Path]] = None) -> Optional[str]:
        """Directory to change to before running tests."""
        if path:
            self._chdir = str(path)
        return self._chdir

    def set_chdir(self, path) -> None:
        self._chdir = str(path) if path else None

    def name(self, name: Optional[str] = None) -> Optional[str]:
        if name:
            self._name = str(name)
        return self._name

    def set_name(self, name) -> None:
        self._name = str(name) if name else None

    def mode(self, mode: Optional[str] = None) -> Optional[str]:
        """Opaque mode string for the host environment."""
        if mode:
            self._mode = str(mode)
        return self._mode

    def set_mode(self, mode) -> None:
        self._mode = str(mode) if mode else None

    def before(self, hook: Optional[Hook] = None) -> Optional[Hook]:
        """Procedure to call just before running tests.

        Can be used as a decorator.
        """
        if hook is not None:
            self._before = hook
        return self._before

    def set_before(self, hook) -> None:
        self._before = hook

    def after(self, hook: Optional[Hook] = None) -> Optional[Hook]:
        """Procedure to call just after running tests.

        Can be used as a decorator.
        """
        if hook is not None:
            self._after = hook
        return self._after

    def set_after(self, hook) -> None:
        self._after = hook

    # -- bulk operations -----------------------------------------------

    def apply(self, mapping: dict) -> "ConfigBuilder":
        """Apply settings from a mapping of setting name to value.

        Every key is checked before any value is applied.

        Raises:
            NoSuchSetting: If a key has no corresponding setter.
        """
        unknown = [str(key) for key in mapping if str(key) not in SETTERS]
        if unknown:
            raise NoSuchSetting(unknown)
        for key, value in mapping.items():
            SETTERS[str(key)](self, value)
        return self

    def update(self, other: "ConfigBuilder") -> "ConfigBuilder":
        """Merge the explicitly set values of another builder into this one."""
        for name in LIST_FIELDS:
            self._lists[name].extend(other._lists[name])
        for attr in (
            "_format", "_autopath", "_verbose", "_hard", "_chdir",
            "_mode", "_before", "_after",
        ):
            value = getattr(other, attr)
            if value is not None:
                setattr(self, attr, value)
        return self

    def apply_environment_overrides(self, environ=None) -> None:
        """Apply environment variables, replacing any configured value."""
        for name in ENV_FIELDS:
            value = lookup_env(name, environ)
            if value is not None:
                self._set_from_env(name, value)

    def apply_environment_defaults(self, environ=None) -> None:
        """Apply environment variables only to settings that are unset."""
        for name in ENV_FIELDS:
            if not self._is_unset(name):
                continue
            value = lookup_env(name, environ)
            if value is not None:
                self._set_from_env(name, value)

    def _is_unset(self, name: str) -> bool:
        if name in LIST_FIELDS:
            return not self._lists[name]
        return getattr(self, f"_{name}") is None

    def _set_from_env(self, name: str, value: str) -> None:
        logger.debug("environment sets %s=%r", name, value)
        if name in LIST_FIELDS:
            self._lists[name] = makelist(value)
        elif name == "autopath":
            self._autopath = truthy(value)
        else:
            setattr(self, f"_{name}", value)

    def load_config(self, path: Union[str, Path]) -> bool:
        """Load a configuration file.

        The path is resolved against ``chdir`` if set, otherwise the
        current directory. A ``.py`` suffix is assumed if the path has
        no extension. The file runs with this builder bound to
        ``config`` in its globals.

        Returns:
            True if the file was loaded, False if it already had been.

        Raises:
            ConfigFileNotFound: If the resolved file does not exist.
        """
        path = Path(path)
        if not path.suffix:
            path = path.with_suffix(CONFIG_SUFFIX)

        base = Path(self._chdir) if self._chdir else Path.cwd()
        resolved = (base / path).resolve()

        if not resolved.is_file():
            raise ConfigFileNotFound(base / path)

        if resolved in self._loaded:
            return False

        self._loaded.add(resolved)
        logger.debug("loading config file %s", resolved)
        runpy.run_path(str(resolved), init_globals={"config": self})
        return True

    def build(self) -> Config:
        """Finalize into an immutable Config."""
        return Config(
            format=self.format(),
            files=tuple(self._lists["files"]),
            tags=tuple(self._lists["tags"]),
            units=tuple(self._lists["units"]),
            match=tuple(self._lists["match"]),
            loadpath=tuple(self._lists["loadpath"]),
            requires=tuple(self._lists["requires"]),
            autopath=self._autopath,
            verbose=self.verbose(),
            hard=self.hard(),
            chdir=self._chdir,
            name=self._name,
            mode=self._mode,
            before=self._before,
            after=self._after,
        )


SETTERS: dict[str, Callable[[ConfigBuilder, Any], None]] = {
    "files": ConfigBuilder.set_files,
    "test_files": ConfigBuilder.set_files,
    "tags": ConfigBuilder.set_tags,
    "units": ConfigBuilder.set_units,
    "match": ConfigBuilder.set_match,
    "loadpath": ConfigBuilder.set_loadpath,
    "load_path": ConfigBuilder.set_loadpath,
    "requires": ConfigBuilder.set_requires,
    "format": ConfigBuilder.set_format,
    "autopath": ConfigBuilder.set_autopath,
    "verbose": ConfigBuilder.set_verbose,
    "hard": ConfigBuilder.set_hard,
    "chdir": ConfigBuilder.set_chdir,
    "name": ConfigBuilder.set_name,
    "mode": ConfigBuilder.set_mode,
    "before": ConfigBuilder.set_before,
    "after": ConfigBuilder.set_after,
}
