"""
Shared test fixtures for the class-action test suite.
"""

import pytest

from classaction.config import ClassActionConfig, set_config

# Import fixtures so pytest can discover them
from classaction.testing.fixtures import (  # noqa: F401
    classaction_config,
    make_controller,
)

from support import FakeController


@pytest.fixture(autouse=True)
def default_config():
    """Every test starts from the default configuration."""
    set_config(ClassActionConfig())
    yield
    set_config(None)


@pytest.fixture
def controller():
    return FakeController()
