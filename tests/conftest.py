"""Shared fixtures for the reporter tests."""

import textwrap
from pathlib import Path

import pytest

from junit_reporter.config import CONFIG_KEYS

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture
def sample_report() -> Path:
    """Report with two failing classes (3 + 2 failures) and some passing tests."""
    return DATA_DIR / "TEST-junit-jupiter.xml"


@pytest.fixture
def write_report(tmp_path):
    """Write XML text to a report file and return its path."""

    def _write(xml: str, name: str = "report.xml") -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(xml).strip(), encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep developer .env files and JUNIT_* variables out of the tests."""
    for key in CONFIG_KEYS + ["JUNIT_REPORTER_CONFIG"]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("JUNIT_REPORTER_CONFIG", str(tmp_path / "missing.env"))
    monkeypatch.chdir(tmp_path)
