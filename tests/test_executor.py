from __future__ import annotations

import sys

import pytest

from unitrun.config import ConfigBuilder
from unitrun.errors import Omit, Pending, UnknownFormat
from unitrun.reporting import DotProgressReporter
from unitrun.runner import Runner, SuiteExecutor, Unit, collect_units, expand_files

SAMPLE = '''
def test_ok():
    """adds numbers"""
    assert 1 + 1 == 2

def test_broken():
    assert 1 == 2, "math"

test_broken.tags = ["slow"]

def helper():
    raise RuntimeError("not a test")
'''


def ok():
    pass


def broken():
    assert False, "boom"


def crash():
    raise RuntimeError("kaput")


def later():
    raise Pending("write me")


def unfinished():
    raise NotImplementedError


def skipped():
    raise Omit("not on this platform")


def reporter_for(stream):
    return DotProgressReporter(stream=stream, ansi=False, clock=lambda: 0.0)


class TestSuiteExecutor:
    def test_classifies_outcomes(self, stream):
        suite = [ok, broken, crash, later, unfinished, skipped]
        executor = SuiteExecutor(ConfigBuilder().build(), reporter_for(stream), suite=suite)
        result = executor.execute()
        assert stream.getvalue().startswith(".FEPPO")
        assert result.success is False
        assert result.counts == {"pass": 1, "fail": 1, "error": 1, "todo": 2, "omit": 1}

    def test_success_when_no_failures(self, stream):
        executor = SuiteExecutor(ConfigBuilder().build(), reporter_for(stream), suite=[ok, skipped])
        assert executor.execute().success is True

    def test_keeps_running_after_errors(self, stream):
        executor = SuiteExecutor(ConfigBuilder().build(), reporter_for(stream), suite=[crash, ok])
        result = executor.execute()
        assert result.counts["pass"] == 1
        assert result.counts["error"] == 1


class TestSelection:
    def units(self):
        fast = Unit(name="test_fast", func=ok, module="widgets", tags=("fast",))
        slow = Unit(name="test_slow", func=ok, module="gadgets", tags=("slow",),
                    description="renders the page")
        return [fast, slow]

    def run(self, stream, **settings):
        config = ConfigBuilder(settings).build()
        executor = SuiteExecutor(config, reporter_for(stream), suite=self.units())
        return [str(u) for u in executor.units()]

    def test_no_filters(self, stream):
        assert self.run(stream) == ["widgets.test_fast", "gadgets.test_slow"]

    def test_tags(self, stream):
        assert self.run(stream, tags=["slow"]) == ["gadgets.test_slow"]

    def test_units(self, stream):
        assert self.run(stream, units=["widgets"]) == ["widgets.test_fast"]

    def test_match(self, stream):
        assert self.run(stream, match=["renders"]) == ["gadgets.test_slow"]


class TestCollection:
    def test_collects_test_functions(self, tmp_path):
        path = tmp_path / "test_sample.py"
        path.write_text(SAMPLE)
        units = collect_units(path)
        assert [u.name for u in units] == ["test_ok", "test_broken"]
        assert units[0].description == "adds numbers"
        assert units[1].tags == ("slow",)
        assert str(units[0]) == "test_sample.test_ok"

    def test_expand_globs_and_directories(self, tmp_path):
        (tmp_path / "test_a.py").write_text("")
        (tmp_path / "test_b.py").write_text("")
        (tmp_path / "other.py").write_text("")
        by_glob = expand_files([str(tmp_path / "test_*.py")])
        by_dir = expand_files([str(tmp_path)])
        assert [p.name for p in by_glob] == ["test_a.py", "test_b.py"]
        assert by_dir == by_glob


class TestRunner:
    def test_runs_files(self, tmp_path, context, stream):
        (tmp_path / "test_sample.py").write_text(SAMPLE)
        runner = Runner(context=context)
        runner.config.apply({"files": [str(tmp_path / "test_sample.py")]})
        assert runner.run() is False
        assert stream.getvalue().startswith(".F")
        assert "test_sample.test_broken" in stream.getvalue()

    def test_hooks_run_around_suite(self, context):
        calls = []
        runner = Runner(context=context, suite=[lambda: calls.append("unit")])
        runner.config.before(lambda: calls.append("before"))
        runner.config.after(lambda: calls.append("after"))
        assert runner.run() is True
        assert calls == ["before", "unit", "after"]

    def test_after_runs_when_engine_raises(self, in_tmp, context):
        calls = []
        runner = Runner(context=context)
        runner.config.apply({"files": "missing_test.py", "after": lambda: calls.append("after")})
        with pytest.raises(OSError):
            runner.run()
        assert calls == ["after"]

    def test_unknown_format_fails_before_hooks(self, context):
        calls = []
        runner = Runner(context=context)
        runner.config.apply({"format": "html", "before": lambda: calls.append("before")})
        with pytest.raises(UnknownFormat):
            runner.run()
        assert calls == []

    def test_chdir_and_loadpath(self, tmp_path, context, monkeypatch):
        monkeypatch.setattr(sys, "path", list(sys.path))
        lib = tmp_path / "lib"
        lib.mkdir()
        (lib / "unitrun_fixture_mod.py").write_text("VALUE = 42\n")
        (tmp_path / "test_uses_lib.py").write_text(
            "import unitrun_fixture_mod\n"
            "def test_value():\n"
            "    assert unitrun_fixture_mod.VALUE == 42\n"
        )
        runner = Runner(context=context)
        runner.config.apply({
            "chdir": str(tmp_path),
            "loadpath": "lib",
            "files": "test_uses_lib.py",
        })
        assert runner.run() is True
        assert context.load_path[0] == "lib"

    def test_presets(self, registry, context):
        registry.configure("common", lambda c: c.tags("common"))
        registry.configure("default", lambda c: c.tags("default"))
        registry.configure("ci", lambda c: c.format("tapj"))

        runner = Runner(registry=registry, context=context)
        runner.apply_common()
        runner.use_preset("ci")
        runner.apply_default()
        assert runner.config.tags() == ["common"]
        assert runner.config.format() == "tapj"

    def test_default_profile_seeds_config(self, registry, context):
        registry.configure(None, lambda c: c.units("Widget"))
        runner = Runner(registry=registry, context=context)
        assert runner.config.units() == ["Widget"]
        runner.config.units("Gadget")
        assert registry.configuration().units() == ["Widget"]

    def test_loadpath_already_in_place_keeps_its_position(self, context, monkeypatch):
        monkeypatch.setattr(sys, "path", list(sys.path))
        context.load_path[:] = ["/project/lib", "extra"]
        runner = Runner(context=context, suite=[ok])
        runner.config.loadpath("extra")
        runner.config.loadpath("more")
        assert runner.run() is True
        assert context.load_path == ["more", "/project/lib", "extra"]
