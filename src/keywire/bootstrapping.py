"""Compose service modules into a container and run its activators."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Final, Generic, Protocol, TypeVar, runtime_checkable

from keywire.collection import ServiceCollection
from keywire.container import ServiceContainer
from keywire.lock_mode import LockMode

OptionsT = TypeVar("OptionsT")

logger = logging.getLogger(__name__)


class IServiceModule(Protocol):
    """A named set of services to be registered in a container."""

    @property
    def name(self) -> str: ...  # noqa: D102

    def configure_services(self, services: ServiceCollection) -> None: ...  # noqa: D102


@runtime_checkable
class Activator(Protocol):
    """Code that runs once, right after the container is bootstrapped."""

    def activate(self) -> None: ...  # noqa: D102


class BootstrappingServices:
    """Keys reserved by the bootstrapping process."""

    ACTIVATORS: Final = "activators"
    """Multi-binding of ``Activator`` instances run by ``create_container``."""


@dataclass(frozen=True, slots=True)
class BootstrapOptions:
    """Options of ``create_container``."""

    run_activators: bool = True
    """Whether to run every ``Activator`` registered under ``BootstrappingServices.ACTIVATORS``."""

    lock_mode: LockMode = LockMode.NONE
    """Lock mode of the bootstrapped container."""


class ServiceModule:
    """A service module backed by a registration callback."""

    __slots__ = ("_configure", "name")

    def __init__(self, name: str, configure: Callable[[ServiceCollection], None]) -> None:
        self.name = name
        self._configure = configure

    def configure_services(self, services: ServiceCollection) -> None:
        self._configure(services)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class ServiceModuleWithOptions(Generic[OptionsT]):
    """A service module whose registration callback also receives an options value."""

    __slots__ = ("_configure", "name", "options")

    def __init__(
        self,
        name: str,
        options: OptionsT,
        configure: Callable[[ServiceCollection, OptionsT], None],
    ) -> None:
        self.name = name
        self.options = options
        self._configure = configure

    def configure_services(self, services: ServiceCollection) -> None:
        self._configure(services, self.options)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, options={self.options!r})"


def create_service_module(
    name: str,
    configure: Callable[[ServiceCollection], None],
) -> ServiceModule:
    """Create a service module to participate in the bootstrapping process."""
    return ServiceModule(name, configure)


def create_service_module_with_options(
    name: str,
    configure: Callable[[ServiceCollection, OptionsT], None],
) -> Callable[[OptionsT], ServiceModuleWithOptions[OptionsT]]:
    """Create a factory of service modules parameterized by an options value.

    Examples:
        .. code-block:: python

            def configure(services: ServiceCollection, options: MyOptions) -> None:
                if options.register_something:
                    services.use("something", Something)


            use_my_api = create_service_module_with_options("my-api", configure)
            container = create_container([use_my_api(MyOptions(register_something=True))])

    """

    def factory(options: OptionsT) -> ServiceModuleWithOptions[OptionsT]:
        return ServiceModuleWithOptions(name, options, configure)

    return factory


def create_container(
    modules: Iterable[IServiceModule],
    options: BootstrapOptions | None = None,
) -> ServiceContainer:
    """Create a container from ``modules``, applied in order to one collection.

    When ``options.run_activators`` is set (the default), every activator
    registered under ``BootstrappingServices.ACTIVATORS`` is activated in
    registration order before the container is returned.
    """
    options = options or BootstrapOptions()
    services = ServiceCollection()
    for module in modules:
        logger.debug("Configuring service module %r", module.name)
        module.configure_services(services)

    container = services.build_container(lock_mode=options.lock_mode)
    if options.run_activators and services.is_registered(BootstrappingServices.ACTIVATORS):
        activators: list[Any] = container.get(BootstrappingServices.ACTIVATORS)
        for activator in activators or ():
            logger.debug("Running activator %s", type(activator).__qualname__)
            activator.activate()

    return container
