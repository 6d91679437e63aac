"""Pytest configuration and fixtures for unitrun tests."""

import io
import os

import pytest

from unitrun.config import ConfigRegistry
from unitrun.runner import RunContext


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove unitrun_* variables so the host environment can't leak in."""
    for key in list(os.environ):
        if key.lower().startswith("unitrun_"):
            monkeypatch.delenv(key)


@pytest.fixture
def registry():
    return ConfigRegistry()


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def context(stream):
    return RunContext(ansi=False, stdout=stream)


@pytest.fixture
def in_tmp(tmp_path, monkeypatch):
    """Run the test from inside a temporary directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
