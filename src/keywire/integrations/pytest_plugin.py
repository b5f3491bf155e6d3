from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any, TypeVar

import pytest

from keywire.collection import ServiceCollection
from keywire.container import ServiceContainer
from keywire.testing import InteractionContext, create_interaction_context

T = TypeVar("T")


@pytest.fixture()
def keywire_services() -> ServiceCollection:
    """Create a per-test service collection.

    Override this fixture to start every test from shared registrations.

    Returns:
        A new ``ServiceCollection`` instance.

    """
    return ServiceCollection()


@pytest.fixture()
def keywire_container(keywire_services: ServiceCollection) -> Iterator[ServiceContainer]:
    """Build a container from ``keywire_services`` and dispose it at teardown.

    Registrations must be made before the fixture is first requested; the
    container only sees the records present when it is built.

    Yields:
        The container built from ``keywire_services``.

    """
    container = keywire_services.build_container()
    try:
        yield container
    finally:
        container.dispose()


@pytest.fixture()
def keywire_interaction() -> Iterator[Callable[[type[Any]], InteractionContext[Any]]]:
    """Return a factory of mock-backed interaction contexts.

    Containers built by the contexts created in a test are disposed at teardown.

    Yields:
        ``create_interaction_context`` bound to the test's lifetime.

    """
    contexts: list[InteractionContext[Any]] = []

    def factory(cls: type[T]) -> InteractionContext[T]:
        context = create_interaction_context(cls)
        contexts.append(context)
        return context

    yield factory

    for context in contexts:
        if context.is_container_created:
            context.container.dispose()
