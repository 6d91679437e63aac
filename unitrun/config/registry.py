"""Named configuration profiles."""

import logging
import runpy
from pathlib import Path
from typing import Callable, Optional, Union

from .settings import ConfigBuilder

logger = logging.getLogger(__name__)

# Profile applied to every run before command line parsing.
COMMON_PROFILE = "common"

# Profile applied after parsing when no preset flag was given.
DEFAULT_PROFILE = "default"

# Project config files, relative to the project root. First found wins.
PROJECT_CONFIG_FILES = (".unitrun.py", "etc/unitrun.py")

Initializer = Callable[[ConfigBuilder], object]


class ConfigRegistry:
    """Store of named configuration profiles.

    The empty name ``""`` is the default profile. Profiles other than
    the default, ``common`` and ``default`` are exposed as command line
    presets.
    """

    def __init__(self):
        self.profiles: dict[str, ConfigBuilder] = {}
        self.loaded_files: set[Path] = set()
        self._reconfigurable = False

    @property
    def reconfigurable(self) -> bool:
        return self._reconfigurable

    def _new_builder(self, name: str) -> ConfigBuilder:
        builder = ConfigBuilder(loaded=self.loaded_files)
        builder.set_name(name)
        return builder

    def configure(
        self,
        profile: Optional[str] = None,
        initializer: Optional[Initializer] = None,
    ):
        """Configure a profile.

        Normally a fresh builder replaces any prior profile of the same
        name. Once the registry is reconfigurable the existing builder
        is updated in place instead.

        When ``initializer`` is omitted this returns a decorator::

            @registry.configure("coverage")
            def _(config):
                config.requires("coverage_setup")

        Returns:
            The configured builder, or a decorator.
        """
        if initializer is None:
            def decorator(fn: Initializer) -> Initializer:
                self.configure(profile, fn)
                return fn
            return decorator

        name = str(profile or "")
        if self._reconfigurable:
            builder = self.configuration(name)
        else:
            builder = self._new_builder(name)
            self.profiles[name] = builder

        logger.debug("configuring profile %r (reconfigure=%s)", name, self._reconfigurable)
        initializer(builder)
        return builder

    def configuration(
        self,
        profile: Optional[str] = None,
        make_reconfigurable: bool = False,
    ) -> ConfigBuilder:
        """Get the builder for a profile, creating an empty one if needed.

        Args:
            profile: Profile name, default profile if omitted.
            make_reconfigurable: Switch the registry to reconfigure mode.
        """
        if make_reconfigurable:
            self._reconfigurable = True
        name = str(profile or "")
        if name not in self.profiles:
            self.profiles[name] = self._new_builder(name)
        return self.profiles[name]

    def get(self, profile: str) -> Optional[ConfigBuilder]:
        return self.profiles.get(profile)

    def presets(self) -> dict[str, ConfigBuilder]:
        """Profiles selectable as command line flags."""
        return {
            name: builder
            for name, builder in self.profiles.items()
            if name and name not in (COMMON_PROFILE, DEFAULT_PROFILE)
        }

    def load_project_config(self, root: Union[str, Path]) -> Optional[Path]:
        """Run the project's config file, if it has one.

        The file runs with ``configure``, ``configuration`` and
        ``registry`` in its globals.

        Returns:
            Path of the loaded file, or None.
        """
        root = Path(root)
        for candidate in PROJECT_CONFIG_FILES:
            path = (root / candidate).resolve()
            if not path.is_file():
                continue
            if path not in self.loaded_files:
                self.loaded_files.add(path)
                logger.debug("loading project config %s", path)
                runpy.run_path(
                    str(path),
                    init_globals={
                        "configure": self.configure,
                        "configuration": self.configuration,
                        "registry": self,
                    },
                )
            return path
        return None
