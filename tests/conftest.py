"""Pytest Configuration and Shared Fixtures

This file is automatically loaded by pytest and makes all fixtures available to all tests.
"""
import os
import sys
import tempfile
from pathlib import Path

# Keep test runs from writing into the working copy's log directory
os.environ.setdefault(
    "LOGGER__FILE_PATH",
    str(Path(tempfile.gettempdir()) / "market_analysis_tests" / "test.log")
)
os.environ.setdefault("LOGGER__DEFAULT_LEVEL", "DEBUG")

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Import all fixture modules to register them
pytest_plugins = [
    "tests.fixtures.synthetic_data",
]


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: Integration tests across loader, engine and CLI"
    )
    config.addinivalue_line(
        "markers",
        "unit: Unit tests of a single module (fast)"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
