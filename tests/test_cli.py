from __future__ import annotations

import io
import sys

import pytest
from click.testing import CliRunner

from unitrun.cli import build_command, main, parse_args
from unitrun.runner import RunContext, Runner

PASSING = "def test_ok():\n    assert True\n"
FAILING = "def test_bad():\n    assert False, 'nope'\n"


def invoke(registry, args):
    runner = Runner(registry=registry, context=RunContext(ansi=False))
    return CliRunner().invoke(build_command(registry), args, obj=runner)


class TestParseArgs:
    def test_filters_accumulate(self, registry):
        runner = parse_args(["-t", "a", "--tag", "b;c", "-u", "Foo", "-m", "renders"], registry)
        assert runner.config.tags() == ["a", "b", "c"]
        assert runner.config.units() == ["Foo"]
        assert runner.config.match() == ["renders"]

    def test_format_shortcuts_follow_argv_order(self, registry):
        assert parse_args(["-y", "-f", "custom"], registry).config.format() == "custom"
        assert parse_args(["-f", "custom", "-j"], registry).config.format() == "tapj"
        assert parse_args(["--tapy"], registry).config.format() == "tapy"

    def test_repeated_format_flags_apply_each_time(self, registry):
        assert parse_args(["-f", "custom", "-y", "-f", "tapj"], registry).config.format() == "tapj"
        assert parse_args(["-j", "-f", "custom", "--tapj", "-y"], registry).config.format() == "tapy"

    def test_loadpath_before_require(self, registry, tmp_path, monkeypatch):
        monkeypatch.setattr(sys, "path", list(sys.path))
        monkeypatch.delitem(sys.modules, "unitrun_ordered_helper", raising=False)
        (tmp_path / "unitrun_ordered_helper.py").write_text("")
        runner = parse_args(["-r", "json", "-I", str(tmp_path), "-r", "unitrun_ordered_helper"], registry)
        assert runner.config.requires() == ["json", "unitrun_ordered_helper"]
        assert "unitrun_ordered_helper" in runner.context.loaded

    def test_loadpath_keeps_listed_order(self, registry):
        runner = parse_args(["-I", "first:second"], registry)
        assert runner.context.load_path[:2] == ["first", "second"]
        assert runner.config.loadpath() == ["first", "second"]

    def test_require_loads_immediately(self, registry):
        runner = parse_args(["-r", "json"], registry)
        assert "json" in runner.context.loaded
        assert runner.config.requires() == ["json"]

    def test_positional_files_replace(self, registry):
        registry.configure(None, lambda c: c.files("configured.py"))
        assert parse_args([], registry).config.files() == ["configured.py"]
        assert parse_args(["a.py", "b.py"], registry).config.files() == ["a.py", "b.py"]

    def test_positional_files_replace_default_profile(self, registry):
        registry.configure("default", lambda c: c.files("all_tests.py"))
        assert parse_args([], registry).config.files() == ["all_tests.py"]
        assert parse_args(["a.py"], registry).config.files() == ["a.py"]

    def test_switches(self, registry):
        runner = parse_args(["-v", "--no-ansi", "--debug", "--no-autopath"], registry)
        assert runner.config.verbose() is True
        assert runner.context.ansi is False
        assert runner.context.debug is True
        assert runner.config.autopath() is False

    def test_environment_fills_unset_values(self, registry, monkeypatch):
        monkeypatch.setenv("unitrun_tags", "env")
        assert parse_args([], registry).config.tags() == ["env"]
        assert parse_args(["-t", "cli"], registry).config.tags() == ["cli"]


class TestPresetOrder:
    @pytest.fixture
    def presets(self, registry):
        for name in ("common", "default", "one", "two"):
            registry.configure(name, lambda c, name=name: c.tags(name))

    def test_common_then_presets_in_argv_order(self, registry, presets):
        runner = parse_args(["--two", "--one"], registry)
        assert runner.config.tags() == ["common", "two", "one"]
        assert runner.presets_selected == ["two", "one"]

    def test_default_when_no_preset(self, registry, presets):
        runner = parse_args(["-v"], registry)
        assert runner.config.tags() == ["common", "default"]

    def test_presets_interleave_with_options(self, registry, presets):
        runner = parse_args(["-t", "a", "--one", "-t", "b"], registry)
        assert runner.config.tags() == ["common", "a", "one", "b"]


class TestCommand:
    def test_help(self, registry):
        registry.configure("ci", lambda c: c.format("tapj"))
        result = invoke(registry, ["-h"])
        assert result.exit_code == 0
        assert "--ci" in result.output
        assert "--format" in result.output

    def test_help_short_circuits(self, registry):
        result = invoke(registry, ["-h", "missing_test.py"])
        assert result.exit_code == 0
        assert "ERROR:" not in result.output

    def test_unknown_flag(self, registry):
        result = invoke(registry, ["--bogus"])
        assert result.exit_code == 2
        assert "No such option" in result.output

    def test_empty_format(self, registry):
        result = invoke(registry, ["--format", " "])
        assert result.exit_code == 2

    def test_success(self, registry, tmp_path):
        path = tmp_path / "test_pass.py"
        path.write_text(PASSING)
        result = invoke(registry, [str(path)])
        assert result.exit_code == 0
        assert "1 tests, 1 pass" in result.output

    def test_failure(self, registry, tmp_path):
        path = tmp_path / "test_fail.py"
        path.write_text(FAILING)
        result = invoke(registry, [str(path)])
        assert result.exit_code == 1
        assert "FAILURES" in result.output
        assert "nope" in result.output

    def test_error_is_reported(self, registry, in_tmp):
        result = invoke(registry, ["missing_test.py"])
        assert result.exit_code == 1
        assert "ERROR:" in result.output

    def test_error_goes_to_context_stderr(self, registry, in_tmp):
        errors = io.StringIO()
        runner = Runner(registry=registry, context=RunContext(ansi=False, stderr=errors))
        result = CliRunner().invoke(build_command(registry), ["missing_test.py"], obj=runner)
        assert result.exit_code == 1
        assert errors.getvalue().startswith("ERROR:")

    def test_debug_propagates_error(self, registry, in_tmp):
        result = invoke(registry, ["--debug", "missing_test.py"])
        assert isinstance(result.exception, FileNotFoundError)

    def test_tapj_output(self, registry, tmp_path):
        path = tmp_path / "test_pass.py"
        path.write_text(PASSING)
        result = invoke(registry, ["-j", str(path)])
        assert result.exit_code == 0
        assert '"type": "final"' in result.output


class TestMain:
    def test_project_presets(self, in_tmp, capsys):
        (in_tmp / ".unitrun.py").write_text(
            "@configure('quiet')\n"
            "def _(config):\n"
            "    config.format('tapj')\n"
        )
        (in_tmp / "test_pass.py").write_text(PASSING)
        with pytest.raises(SystemExit) as info:
            main(["--quiet", "test_pass.py"])
        assert info.value.code == 0
        assert '"type": "suite"' in capsys.readouterr().out
