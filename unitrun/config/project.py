"""Project root discovery and load path setup."""

import logging
from pathlib import Path
from typing import Optional, Union

import yaml

logger = logging.getLogger(__name__)

# Entries that mark a project root directory.
ROOT_MARKERS = (".index", "pyproject.toml", "setup.py", ".git", ".hg", "_darcs", "lib/")

INDEX_FILE = ".index"


def find_root(start: Optional[Union[str, Path]] = None) -> Path:
    """Find the project root directory.

    Walks up from ``start`` (current directory by default) to the first
    directory holding a root marker.

    Returns:
        Project root, or ``start`` itself if no marker is found.
    """
    start = Path(start or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        # the filesystem root is never a project root
        if directory == directory.parent:
            break
        for marker in ROOT_MARKERS:
            candidate = directory / marker.rstrip("/")
            if marker.endswith("/"):
                if candidate.is_dir():
                    return directory
            elif candidate.exists():
                return directory
    return start


def load_index(root: Union[str, Path]) -> dict:
    """Load a project's ``.index`` file.

    Returns:
        Parsed YAML mapping, or an empty dict if the file is missing or
        unreadable.
    """
    path = Path(root) / INDEX_FILE
    if not path.is_file():
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.debug("ignoring unreadable %s: %s", path, e)
        return {}

    return data if isinstance(data, dict) else {}


def library_paths(root: Union[str, Path]) -> list[str]:
    """Directories to seed the load path with.

    Uses ``paths.lib`` from the ``.index`` file if present, otherwise
    ``lib/`` under the root if it exists.
    """
    root = Path(root)
    paths = load_index(root).get("paths") or {}
    lib = paths.get("lib") if isinstance(paths, dict) else None

    if lib:
        if isinstance(lib, str):
            lib = [lib]
        return [str(root / entry) for entry in lib]

    typical = root / "lib"
    if typical.is_dir():
        return [str(typical)]
    return []


def load_path_setup(context, root: Optional[Union[str, Path]] = None) -> list[str]:
    """Prepend the project's library directories to the context load path.

    Returns:
        The directories added.
    """
    root = find_root() if root is None else Path(root)
    paths = library_paths(root)
    context.prepend_load_path(paths)
    return paths
