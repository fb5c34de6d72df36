"""
Root conftest.py: registers the `live` marker.

  @pytest.mark.live  needs a real chafa or viu on PATH; skipped unless
                     --live is passed or LIVE_TESTS=1 is set
"""
from __future__ import annotations

import os

import pytest


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "live: test runs a real image renderer (run with LIVE_TESTS=1 or --live flag)",
    )


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run tests marked with @pytest.mark.live (requires chafa or viu)",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip @pytest.mark.live tests unless --live flag or LIVE_TESTS=1 is set."""
    run_live = config.getoption("--live") or os.environ.get("LIVE_TESTS", "").lower() in ("1", "true", "yes")
    skip_live = pytest.mark.skip(reason="Live renderer test: run with --live or LIVE_TESTS=1")
    for item in items:
        if "live" in item.keywords and not run_live:
            item.add_marker(skip_live)
