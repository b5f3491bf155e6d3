"""Helpers for unit-testing classes that use constructor injection.

``create_interaction_context`` registers a ``MagicMock`` under every key the
class under test declares with ``Inject``, so a test only arranges the
collaborators it cares about.

Examples:
    .. code-block:: python

        context = create_interaction_context(Target)
        context.class_under_test.execute()
        context.mock_for("dependency").handle.assert_called_once_with()

"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar
from unittest.mock import MagicMock

from keywire.collection import ServiceCollection
from keywire.container import ServiceContainer
from keywire.metadata import get_dependency_metadata

T = TypeVar("T")

_NOT_CREATED: Any = object()


class Lazy(Generic[T]):
    """A value created on first access and recreated after ``reset``."""

    __slots__ = ("_factory", "_value")

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._value: T = _NOT_CREATED

    @property
    def is_value_created(self) -> bool:
        return self._value is not _NOT_CREATED

    @property
    def value(self) -> T:
        if self._value is _NOT_CREATED:
            self._value = self._factory()
        return self._value

    def reset(self) -> None:
        self._value = _NOT_CREATED


class InteractionContext(Generic[T]):
    """The services, container and instance of one class under test.

    Reading ``services`` discards the built container and instance, so
    registrations changed through it are picked up on the next access.
    """

    def __init__(self, services: ServiceCollection, cls: type[T]) -> None:
        self._services = services
        self._container: Lazy[ServiceContainer] = Lazy(lambda: self._services.build_container())
        self._class_under_test: Lazy[T] = Lazy(lambda: self.container.resolve(cls))

    @property
    def services(self) -> ServiceCollection:
        self._container.reset()
        self._class_under_test.reset()
        return self._services

    @property
    def is_container_created(self) -> bool:
        return self._container.is_value_created

    @property
    def container(self) -> ServiceContainer:
        return self._container.value

    @property
    def class_under_test(self) -> T:
        return self._class_under_test.value

    def mock_for(self, key: str) -> MagicMock:
        """Return the value registered for ``key``, usually the generated mock."""
        return self.container.get(key)


def create_interaction_context(cls: type[T]) -> InteractionContext[T]:
    """Create an ``InteractionContext`` with a mock bound to each dependency of ``cls``."""
    services = ServiceCollection()
    for entry in get_dependency_metadata(cls):
        services.singleton(entry.dependency_key, MagicMock(name=entry.dependency_key))
    return InteractionContext(services, cls)
