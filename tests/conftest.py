"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "mysql: mark test as requiring a live MySQL server")


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--mysql",
        action="store_true",
        default=False,
        help="Run tests against the MySQL server configured in .env",
    )


def pytest_collection_modifyitems(config, items):
    """Skip mysql tests unless --mysql flag is provided."""
    if config.getoption("--mysql"):
        return

    skip_mysql = pytest.mark.skip(reason="Need --mysql option to run")
    for item in items:
        if "mysql" in item.keywords:
            item.add_marker(skip_mysql)
