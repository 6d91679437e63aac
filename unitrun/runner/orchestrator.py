"""Runner - ties configuration, execution engine and reporter together."""

import contextlib
import logging
from typing import Optional

from ..config.registry import COMMON_PROFILE, DEFAULT_PROFILE, ConfigRegistry
from ..config.settings import Config, ConfigBuilder
from ..reporting import make_reporter
from .context import RunContext
from .executor import SuiteExecutor, SuiteResult

logger = logging.getLogger(__name__)


class Runner:
    """One test run.

    Holds the configuration being assembled for the run along with the
    registry of presets and the run context.
    """

    def __init__(
        self,
        registry: Optional[ConfigRegistry] = None,
        context: Optional[RunContext] = None,
        config: Optional[ConfigBuilder] = None,
        suite: Optional[list] = None,
    ):
        """Initialize runner.

        Args:
            registry: Profiles and presets. A fresh registry if None.
            context: Run context. A default context if None.
            config: Starting configuration. A copy of the registry's
                    default profile if None.
            suite: Pre-built test units, bypassing file collection.
        """
        self.registry = registry or ConfigRegistry()
        self.context = context or RunContext()
        self.suite = suite
        self.presets_selected: list[str] = []
        self.result: Optional[SuiteResult] = None

        if config is None:
            config = ConfigBuilder(loaded=self.registry.loaded_files)
            default = self.registry.get("")
            if default is not None:
                config.update(default)
        self.config = config

    def apply_common(self) -> bool:
        """Apply the ``common`` profile if there is one."""
        return self._apply_profile(COMMON_PROFILE)

    def apply_default(self) -> bool:
        """Apply the ``default`` profile unless a preset was selected."""
        if self.presets_selected:
            return False
        return self._apply_profile(DEFAULT_PROFILE)

    def use_preset(self, name: str) -> None:
        """Apply a named preset to this run."""
        self.presets_selected.append(name)
        self._apply_profile(name)

    def _apply_profile(self, name: str) -> bool:
        profile = self.registry.get(name)
        if profile is None:
            return False
        logger.debug("applying profile %r", name)
        self.config.update(profile)
        return True

    def run(self) -> bool:
        """Run the tests.

        Returns:
            True if no test failed or errored.
        """
        config = self.config.build()
        directory = config.chdir or "."
        with contextlib.chdir(directory):
            return self._run(config)

    def _run(self, config: Config) -> bool:
        # paths already on the load path keep their place
        self.context.prepend_load_path(
            [path for path in config.loadpath if path not in self.context.load_path]
        )
        self.context.install_load_path()
        for name in config.requires:
            self.context.require(name)

        reporter = make_reporter(
            config.format,
            stream=self.context.stdout,
            verbose=config.verbose,
            ansi=self.context.ansi,
        )

        if config.before:
            config.before()
        try:
            self.result = SuiteExecutor(config, reporter, suite=self.suite).execute()
        finally:
            if config.after:
                config.after()

        return self.result.success
