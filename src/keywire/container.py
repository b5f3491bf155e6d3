from __future__ import annotations

import contextlib
import logging
import threading
from typing import TYPE_CHECKING, Any, TypeVar, overload

from typing_extensions import Self

from keywire.dependencies import create_auto_wire_factory
from keywire.exceptions import (
    KeywireDependencyNotRegisteredError,
    KeywireUnsupportedBatchSizeError,
)
from keywire.lock_mode import LockMode

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from types import TracebackType

    from keywire.dependencies import DependencyRecord

T = TypeVar("T")

logger = logging.getLogger(__name__)

MIN_BATCH_SIZE = 2
MAX_BATCH_SIZE = 10


class ServiceContainer:
    """Resolve registered dependencies by key.

    Every record is resolved at most once per container and cached until the
    container is disposed. Keys missing locally are delegated to the parent
    container, if any.

    Containers are usually created with ``ServiceCollection.build_container``
    or ``ServiceContainer.create_child_container``.
    """

    __slots__ = ("_lock", "_lock_mode", "_parent", "_provenance", "_values")

    def __init__(
        self,
        values: Mapping[str, DependencyRecord[Any]] | None = None,
        parent: ServiceContainer | None = None,
        provenance: str | None = None,
        *,
        lock_mode: LockMode = LockMode.NONE,
    ) -> None:
        self._values: dict[str, DependencyRecord[Any]] = dict(values or {})
        self._parent = parent
        self._provenance = provenance
        self._lock_mode = lock_mode
        self._lock: contextlib.AbstractContextManager[Any] = (
            threading.RLock() if lock_mode is LockMode.THREAD else contextlib.nullcontext()
        )

    @property
    def parent(self) -> ServiceContainer | None:
        return self._parent

    @property
    def provenance(self) -> str | None:
        return self._provenance

    @property
    def lock_mode(self) -> LockMode:
        return self._lock_mode

    @overload
    def get(self, key: str, /) -> Any: ...

    @overload
    def get(self, keys: Sequence[str], /) -> tuple[Any, ...]: ...

    def get(self, key: str | Sequence[str], /) -> Any:
        """Resolve one key, or a sequence of 2 to 10 keys into a tuple.

        Args:
            key: A dependency key, or a sequence of keys resolved in order.

        Returns:
            The resolved value, or a tuple of values in the order of ``key``.

        Raises:
            KeywireDependencyNotRegisteredError: If a key is not registered on
                this container or any of its parents.
            KeywireUnsupportedBatchSizeError: If a sequence of keys has fewer
                than 2 or more than 10 items.

        """
        if isinstance(key, str):
            return self._get_service(key)

        keys = list(key)
        if not MIN_BATCH_SIZE <= len(keys) <= MAX_BATCH_SIZE:
            raise KeywireUnsupportedBatchSizeError(len(keys), MIN_BATCH_SIZE, MAX_BATCH_SIZE)
        return tuple(self._get_service(k) for k in keys)

    def resolve(self, cls: type[T]) -> T:
        """Instantiate ``cls``, resolving its ``Inject`` dependencies from this container.

        The instance itself is not cached.
        """
        return create_auto_wire_factory(cls)(self)

    def is_registered(self, key: str) -> bool:
        """Return True when ``key`` is held by this container or one of its parents."""
        if key in self._values:
            return True
        return self._parent is not None and self._parent.is_registered(key)

    def create_child_container(self, provenance: str | None = None) -> ServiceContainer:
        """Fork a child container that falls back to this one.

        The child receives fresh copies of the records that are still unresolved
        here, so it builds and caches its own instances of them. Keys already
        resolved here are not copied; the child reads them through this container.
        Resolving a key before forking therefore shares that instance with the child.
        """
        with self._lock:
            values = {
                key: record.clone() for key, record in self._values.items() if not record.is_resolved()
            }
        logger.debug(
            "Created child container %r of %r with %d unresolved record(s)",
            provenance,
            self._provenance,
            len(values),
        )
        return ServiceContainer(values, self, provenance, lock_mode=self._lock_mode)

    def destroy(self, key: str) -> None:
        """Dispose and forget the cached value of one local key.

        Unknown and unresolved keys are ignored. Parent containers are never touched.
        """
        with self._lock:
            record = self._values.get(key)
            if record is not None and record.is_resolved():
                record.reset()

    def dispose(self) -> None:
        """Dispose and forget every value this container resolved.

        A value exposing ``dispose()`` has it called once. Disposing twice is a no-op.
        """
        with self._lock:
            resolved = [key for key, record in self._values.items() if record.is_resolved()]
            for key in resolved:
                self.destroy(key)
        if resolved:
            logger.debug("Disposed %d resolved record(s) of container %r", len(resolved), self._provenance)

    def _get_service(self, key: str) -> Any:
        with self._lock:
            record = self._values.get(key)
            if record is not None:
                return record.resolve_value(self)
        if self._parent is not None:
            return self._parent.get(key)
        raise KeywireDependencyNotRegisteredError(key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.is_registered(key)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.dispose()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(provenance={self._provenance!r}, records={len(self._values)})"
