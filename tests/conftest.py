"""Shared pytest fixtures for keywire tests."""

import pytest

from keywire.collection import ServiceCollection
from keywire.container import ServiceContainer

pytest_plugins = ["keywire.integrations.pytest_plugin"]


@pytest.fixture()
def services() -> ServiceCollection:
    """Empty service collection."""
    return ServiceCollection()


@pytest.fixture()
def empty_container() -> ServiceContainer:
    """Root container without records."""
    return ServiceCollection().build_container()
