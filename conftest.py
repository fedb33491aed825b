"""Pytest configuration for Tombstone."""

import pytest

from tombstone.config import set_config


def pytest_configure(config):
    """Configure pytest with custom settings."""
    config.addinivalue_line(
        "markers", "soft_delete: mark test as soft delete lifecycle test"
    )


@pytest.fixture
def reset_config():
    """Drop the global configuration before and after a test."""
    set_config(None)
    yield
    set_config(None)
