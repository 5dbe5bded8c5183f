"""Pytest configuration and shared fixtures."""

import pytest

# The watchdrift plugin is registered via a ``pytest11`` entry point for
# external consumers.  Here it is disabled (``-p no:watchdrift``) and
# loaded through conftest instead, so its imports happen after
# ``pytest-cov`` starts tracing.
pytest_plugins = ["watchdrift.testing._plugin"]


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers",
        "integration: Integration tests (real SQLite file, fake network and input)",
    )
