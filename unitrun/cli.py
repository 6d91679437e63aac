"""CLI entry point for the test harness.

Usage:
    unitrun [options] [files ...]

Options are processed in command line order, so preset flags and
format shortcuts take effect in the order they are given.
"""

import logging
import sys
from typing import Optional, Sequence

import click

from .config.project import find_root, load_path_setup
from .config.registry import ConfigRegistry
from .config.settings import makelist
from .errors import UsageError
from .runner import RunContext, Runner

logger = logging.getLogger(__name__)

PROG_NAME = "unitrun"
FILES_KEY = "unitrun.files"

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _runner(ctx: click.Context) -> Runner:
    return ctx.find_object(Runner)


def _set_format(ctx, runner, value):
    if not value.strip():
        raise UsageError("format name must not be empty", ctx=ctx)
    runner.config.format(value)


def _format_shortcut(name: str):
    def action(ctx, runner, value):
        runner.config.format(name)
    return action


def _append(field: str):
    def action(ctx, runner, value):
        getattr(runner.config, field)(value)
    return action


def _loadpath(ctx, runner, value):
    paths = makelist(value)
    runner.config.loadpath(paths)
    runner.context.prepend_load_path(paths)


def _require(ctx, runner, value):
    for name in makelist(value):
        runner.config.requires(name)
        runner.context.require(name)


def _preset(name: str):
    def action(ctx, runner, value):
        logger.debug("preset --%s selected", name)
        runner.use_preset(name)
    return action


def _chdir(ctx, param, value):
    if value:
        _runner(ctx).config.chdir(value)


def _autopath(ctx, param, value):
    if value is not None:
        _runner(ctx).config.autopath(value)


def _verbose(ctx, param, value):
    if value:
        _runner(ctx).config.verbose(True)


def _ansi(ctx, param, value):
    if value is not None:
        _runner(ctx).context.ansi = value


def _debug(ctx, param, value):
    if value:
        _runner(ctx).context.debug = True
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)


def _files(ctx, param, values):
    if values:
        ctx.meta[FILES_KEY] = list(values)


class OrderedOption(click.Option):
    """Option applied once per occurrence, in command line order.

    click runs a callback once per option, at its first position, with
    the last value. Ordered options carry an ``action(ctx, runner,
    value)`` instead, which RunnerCommand replays for every occurrence.
    """

    def __init__(self, param_decls, action, **attrs):
        attrs.setdefault("expose_value", False)
        super().__init__(param_decls, **attrs)
        self.action = action


class RunnerCommand(click.Command):
    """Command that applies the ``common`` and ``default`` profiles
    around option parsing."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        runner = _runner(ctx)
        runner.apply_common()
        argv = list(args)
        rest = super().parse_args(ctx, args)
        self.apply_in_order(ctx, runner, argv)
        runner.apply_default()
        files = ctx.meta.get(FILES_KEY)
        if files:
            runner.config.set_files(files)
        runner.config.apply_environment_defaults()
        return rest

    def apply_in_order(self, ctx: click.Context, runner: Runner, argv: list[str]) -> None:
        """Replay every occurrence of the ordered options in ``argv``."""
        opts, _, order = self.make_parser(ctx).parse_args(args=argv)
        pending: dict[str, list] = {}
        for param in order:
            if not isinstance(param, OrderedOption):
                continue
            if param.multiple:
                values = pending.setdefault(param.name, list(opts[param.name]))
                param.action(ctx, runner, values.pop(0))
            else:
                param.action(ctx, runner, param.flag_value)


def _option(*decls, **attrs) -> click.Option:
    attrs.setdefault("expose_value", False)
    return click.Option(list(decls), **attrs)


def _ordered(*decls, **attrs) -> OrderedOption:
    return OrderedOption(list(decls), **attrs)


def build_command(registry: ConfigRegistry) -> click.Command:
    """Build the command line interface for a registry's presets."""
    params: list[click.Parameter] = []
    builtin = {
        "format", "tapy", "tapj", "tag", "unit", "match", "loadpath",
        "require", "chdir", "autopath", "verbose", "ansi", "debug", "help",
    }

    for name in registry.presets():
        if name in builtin or name.startswith("no-"):
            logger.warning("preset '%s' clashes with a built-in option, skipped", name)
            continue
        params.append(_ordered(
            f"--{name}", is_flag=True, action=_preset(name),
            help=f"apply the '{name}' preset",
        ))

    params.extend([
        _ordered("-f", "--format", metavar="NAME", multiple=True, action=_set_format,
                 help="report format"),
        _ordered("-y", "--tapy", is_flag=True, action=_format_shortcut("tapy"),
                 help="shortcut for -f tapy"),
        _ordered("-j", "--tapj", is_flag=True, action=_format_shortcut("tapj"),
                 help="shortcut for -f tapj"),
        _ordered("-t", "--tag", multiple=True, action=_append("tags"),
                 help="select tests by tag"),
        _ordered("-u", "--unit", multiple=True, action=_append("units"),
                 help="select tests by software unit"),
        _ordered("-m", "--match", metavar="TEXT", multiple=True, action=_append("match"),
                 help="select tests by description"),
        _ordered("-I", "--loadpath", metavar="PATH", multiple=True, action=_loadpath,
                 help="add to the import path (colon or semicolon separated)"),
        _ordered("-r", "--require", metavar="FILE", multiple=True, action=_require,
                 help="require module or file"),
        _option("--chdir", metavar="DIR", callback=_chdir,
                help="change to directory before running tests"),
        _option("--autopath/--no-autopath", default=None, callback=_autopath,
                help="add the project's lib directory to the import path"),
        _option("-v", "--verbose", is_flag=True, callback=_verbose,
                help="provide extra detailed report"),
        _option("--ansi/--no-ansi", default=None, callback=_ansi,
                help="turn on/off ANSI colors"),
        _option("--debug", is_flag=True, callback=_debug,
                help="turn on debugging mode"),
        click.Argument(["files"], nargs=-1, expose_value=False, callback=_files),
    ])

    return RunnerCommand(
        PROG_NAME,
        params=params,
        callback=_run,
        context_settings=CONTEXT_SETTINGS,
        help="Run tests and report the results.",
    )


@click.pass_context
def _run(ctx: click.Context) -> None:
    runner = _runner(ctx)

    if runner.config.autopath() is not False:
        load_path_setup(runner.context, find_root(runner.config.chdir()))

    try:
        success = runner.run()
    except Exception as e:
        if runner.context.debug:
            raise
        click.echo(f"ERROR: {e}", file=runner.context.stderr, err=True)
        ctx.exit(1)

    if not success:
        ctx.exit(1)


def parse_args(argv: Sequence[str], registry: Optional[ConfigRegistry] = None) -> Runner:
    """Parse command line arguments into a Runner without running it."""
    registry = registry or ConfigRegistry()
    runner = Runner(registry=registry)
    command = build_command(registry)
    with command.make_context(PROG_NAME, list(argv), obj=runner):
        pass
    return runner


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main CLI entry point."""
    registry = ConfigRegistry()
    registry.load_project_config(find_root())

    runner = Runner(registry=registry, context=RunContext())
    command = build_command(registry)
    command.main(
        args=list(sys.argv[1:] if argv is None else argv),
        prog_name=PROG_NAME,
        obj=runner,
    )


if __name__ == "__main__":
    main()
