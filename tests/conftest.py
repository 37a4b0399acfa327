"""
Shared pytest fixtures and configuration for pathstore tests.
"""

import pytest

from pathstore import Store
from pathstore.flags import FlagContext


@pytest.fixture(autouse=True)
def reset_flags():
    """Reset the flag stacks before each test to prevent state leakage."""
    FlagContext._reset_state()
    yield
    FlagContext._reset_state()


@pytest.fixture
def store():
    """Provide a fresh Store instance for tests that need it."""
    return Store()
