"""Config module - run configuration and profiles."""

from .project import find_root, library_paths, load_index, load_path_setup
from .registry import COMMON_PROFILE, DEFAULT_PROFILE, ConfigRegistry
from .settings import (
    DEFAULT_FORMAT,
    ENV_PREFIX,
    Config,
    ConfigBuilder,
    makelist,
)

__all__ = [
    "COMMON_PROFILE",
    "DEFAULT_PROFILE",
    "DEFAULT_FORMAT",
    "ENV_PREFIX",
    "Config",
    "ConfigBuilder",
    "ConfigRegistry",
    "find_root",
    "library_paths",
    "load_index",
    "load_path_setup",
    "makelist",
]
