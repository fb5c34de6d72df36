"""Shared fixtures for termcourse tests."""
import pytest

from termcourse.settings import ENV_VARS


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep the user's ~/.termcourse and TERMCOURSE_* variables out of tests."""
    monkeypatch.setenv("TERMCOURSE_DIR", str(tmp_path / "termcourse-config"))
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
