from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from typing_extensions import Self

from keywire.container import ServiceContainer
from keywire.dependencies import ArrayDependency, ConfiguredDependency, create_auto_wire_factory
from keywire.exceptions import KeywireInvalidRegistrationError
from keywire.lock_mode import LockMode

if TYPE_CHECKING:
    from keywire.dependencies import DependencyRecord
    from keywire.types import ValueFactory

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ServiceRegistry(Protocol):
    """A reusable group of registrations."""

    def configure_services(self, services: ServiceCollection) -> None: ...  # noqa: D102


class ServiceCollection:
    """A collection of configured dependencies registered against unique keys.

    Registration methods return the collection so calls can be chained.
    """

    def __init__(self, values: dict[str, DependencyRecord[Any]] | None = None) -> None:
        self._values: dict[str, DependencyRecord[Any]] = values if values is not None else {}

    def register(self, key: str, value: T | ValueFactory) -> Self:
        """Register ``key``, replacing any previous record.

        Callables are factories receiving the resolving container; anything
        else is bound as a constant.
        """
        self._values[key] = ConfiguredDependency(key, value)
        return self

    def singleton(self, key: str, value: object) -> Self:
        """Register ``value`` as a constant, even when it is callable."""
        self._values[key] = ConfiguredDependency.from_value(key, value)
        return self

    def use(self, key: str, cls: type[T]) -> Self:
        """Register an auto-wired instance of ``cls`` for ``key``."""
        return self.register(key, create_auto_wire_factory(cls))

    def add(self, key: str, cls: type[T]) -> Self:
        """Append an auto-wired ``cls`` to the list of dependencies registered for ``key``."""
        self._get_array(key).push(cls)
        return self

    def add_dependency(self, key: str, value: T | ValueFactory) -> Self:
        """Append a value (or value factory) to the list of dependencies registered for ``key``."""
        self._get_array(key).register(value)
        return self

    def is_registered(self, key: str) -> bool:
        return key in self._values

    def get_values(self) -> dict[str, DependencyRecord[Any]]:
        """Return the underlying mapping of configured dependencies."""
        return self._values

    def import_collection(self, collection: ServiceCollection) -> None:
        """Copy the records of ``collection`` into this one.

        On a key collision the imported record wins.
        """
        self._values = {**self._values, **collection._values}

    def include(self, registry: ServiceRegistry) -> None:
        """Run ``registry`` against a fresh collection and import the result."""
        services = ServiceCollection()
        registry.configure_services(services)
        self.import_collection(services)

    def import_registry(self, registry: type[ServiceRegistry]) -> None:
        """Instantiate ``registry`` with no arguments and include it."""
        self.include(registry())

    def build_container(self, *, lock_mode: LockMode = LockMode.NONE) -> ServiceContainer:
        """Create a root container holding copies of the records registered so far.

        Each container owns its records: values it resolves are cached and
        disposed independently of other containers built from this collection,
        and later registrations do not reach it.
        """
        logger.debug("Building container with %d record(s)", len(self._values))
        values = {key: record.clone() for key, record in self._values.items()}
        return ServiceContainer(values, lock_mode=lock_mode)

    def resolve(self, key: str) -> Any:
        """Resolve ``key`` from a throwaway container.

        Use with care: only the records registered so far are visible, so call
        order matters. Intended for reading settings while registering.

        The lookup runs in a child of a temporary container, so registered
        constants are not disposed.
        """
        container = self.build_container().create_child_container("ServiceCollection.resolve")
        try:
            return container.get(key)
        finally:
            container.dispose()

    def _get_array(self, key: str) -> ArrayDependency[Any]:
        dependency = self._values.get(key)
        if dependency is None:
            dependency = self._values[key] = ArrayDependency(key)
        if not isinstance(dependency, ArrayDependency):
            msg = f"Cannot append to {key!r}: it is registered as a single dependency"
            raise KeywireInvalidRegistrationError(msg)
        return dependency

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)
