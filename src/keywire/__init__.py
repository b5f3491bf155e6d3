from keywire.bootstrapping import (
    Activator,
    BootstrapOptions,
    BootstrappingServices,
    IServiceModule,
    ServiceModule,
    ServiceModuleWithOptions,
    create_container,
    create_service_module,
    create_service_module_with_options,
)
from keywire.collection import ServiceCollection, ServiceRegistry
from keywire.container import ServiceContainer
from keywire.dependencies import ArrayDependency, ConfiguredDependency, create_auto_wire_factory
from keywire.exceptions import (
    KeywireContainerNotSetError,
    KeywireDependencyExtractionError,
    KeywireDependencyNotRegisteredError,
    KeywireError,
    KeywireInvalidRegistrationError,
    KeywireUnsupportedBatchSizeError,
)
from keywire.lock_mode import LockMode
from keywire.markers import Inject
from keywire.metadata import (
    DependencyMetadata,
    define_dependency_metadata,
    get_dependency_metadata,
    injectable,
)
from keywire.stack import ServiceContainerStack, Stack
from keywire.types import Disposable

__all__ = [
    "Activator",
    "ArrayDependency",
    "BootstrapOptions",
    "BootstrappingServices",
    "ConfiguredDependency",
    "DependencyMetadata",
    "Disposable",
    "IServiceModule",
    "Inject",
    "KeywireContainerNotSetError",
    "KeywireDependencyExtractionError",
    "KeywireDependencyNotRegisteredError",
    "KeywireError",
    "KeywireInvalidRegistrationError",
    "KeywireUnsupportedBatchSizeError",
    "LockMode",
    "ServiceCollection",
    "ServiceContainer",
    "ServiceContainerStack",
    "ServiceModule",
    "ServiceModuleWithOptions",
    "ServiceRegistry",
    "Stack",
    "create_auto_wire_factory",
    "create_container",
    "create_service_module",
    "create_service_module_with_options",
    "define_dependency_metadata",
    "get_dependency_metadata",
    "injectable",
]
