from __future__ import annotations

from typing import Any


class KeywireError(Exception):
    """Represent a base class for all keywire-specific failures.

    Catch this type when you want to handle any keywire error path without
    matching each concrete exception class individually.
    """


class KeywireInvalidRegistrationError(KeywireError):
    """Signal an invalid registration.

    Raised by ``ServiceCollection.add`` and ``ServiceCollection.add_dependency``
    when the key already holds a single (non-array) dependency, and by the
    auto-wire factory when constructor metadata cannot be mapped onto the
    constructor's parameters.

    Typical fixes include registering multi-bindings under a dedicated key or
    marking every leading constructor parameter with ``Inject``.
    """


class KeywireDependencyNotRegisteredError(KeywireError, KeyError):
    """Signal that a dependency key has no record.

    Raised by ``ServiceContainer.get`` when the key is missing from the
    container and from every parent container above it.

    Typical fixes include registering the key on the ``ServiceCollection``
    before calling ``build_container`` or resolving from a child of the
    container that owns the key.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"Unrecognized service: {self.key!r} is not registered"


class KeywireUnsupportedBatchSizeError(KeywireError, ValueError):
    """Signal a batch lookup with an unsupported number of keys.

    Raised by ``ServiceContainer.get`` when it receives a sequence of keys
    whose length is outside the supported range.

    Typical fix is resolving a single key with ``get(key)`` or splitting the
    batch into smaller lookups.
    """

    def __init__(self, size: int, minimum: int, maximum: int) -> None:
        self.size = size
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"Unsupported batch size {size}: get() accepts between {minimum} and {maximum} keys",
        )


class KeywireDependencyExtractionError(KeywireError):
    """Signal that constructor injection metadata could not be read.

    Raised while scanning ``__init__`` annotations for ``Inject`` markers when
    the annotations reference names that cannot be evaluated.
    """

    def __init__(self, constructor: Any, error: Exception) -> None:
        self.constructor = constructor
        self.error = error
        name = getattr(constructor, "__qualname__", repr(constructor))
        super().__init__(f"Failed to read injection metadata of {name}: {error}")


class KeywireContainerNotSetError(KeywireError):
    """Signal use of a ``ServiceContainerStack`` that holds no container.

    Raised by ``ServiceContainerStack.current`` after every container has been
    popped, including the root.
    """
