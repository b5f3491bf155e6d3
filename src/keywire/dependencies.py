from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar, cast

from typing_extensions import Self

from keywire.exceptions import KeywireInvalidRegistrationError
from keywire.metadata import DependencyMetadata, get_dependency_metadata
from keywire.types import dispose_value

if TYPE_CHECKING:
    from keywire.container import ServiceContainer
    from keywire.types import ValueFactory

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<unset>"


_UNSET: Any = _Unset()


class DependencyRecord(Protocol[T_co]):
    """A registered binding: a key plus a value or the factory that produces it."""

    @property
    def key(self) -> str: ...  # noqa: D102

    def is_resolved(self) -> bool: ...  # noqa: D102

    def resolve_value(self, container: ServiceContainer) -> T_co: ...  # noqa: D102

    def clone(self) -> DependencyRecord[T_co]: ...  # noqa: D102

    def reset(self) -> None: ...  # noqa: D102


class ConfiguredDependency(Generic[T]):
    """A single binding resolved at most once.

    Callables passed as ``value`` are treated as factories receiving the
    resolving container. Any other value is a constant and the record starts
    out resolved. Use ``from_value`` to bind a callable object as a constant.
    """

    __slots__ = ("_constant", "_key", "factory", "value")

    def __init__(self, key: str, value: T | ValueFactory) -> None:
        self._key = key
        self.factory: ValueFactory
        self.value: T = _UNSET
        self._constant: T = _UNSET
        self._assign(value)

    @classmethod
    def from_value(cls, key: str, value: T) -> Self:
        """Create a record that always resolves to ``value``, even when it is callable."""
        dependency = cls(key, _constant_factory(value))
        dependency.value = value
        dependency._constant = value
        return dependency

    @property
    def key(self) -> str:
        return self._key

    def is_resolved(self) -> bool:
        return self.value is not _UNSET

    def resolve_value(self, container: ServiceContainer) -> T:
        if self.value is _UNSET:
            self.value = self.factory(container)
        return self.value

    def replace_value(self, value: T | ValueFactory) -> None:
        """Swap the factory (or constant) and drop any cached value."""
        self.value = _UNSET
        self._constant = _UNSET
        self._assign(value)

    def clone(self) -> ConfiguredDependency[T]:
        if self._constant is not _UNSET:
            return ConfiguredDependency.from_value(self._key, self._constant)
        return ConfiguredDependency(self._key, self.factory)

    def reset(self) -> None:
        """Dispose the cached value (when it has a ``dispose`` hook) and clear it."""
        if self.value is _UNSET:
            return
        value, self.value = self.value, _UNSET
        dispose_value(value)

    def _assign(self, value: T | ValueFactory) -> None:
        if callable(value):
            self.factory = cast("ValueFactory", value)
            return
        self.factory = _constant_factory(value)
        self.value = value
        self._constant = value

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self._key!r}, resolved={self.is_resolved()})"


class ArrayDependency(Generic[T]):
    """An ordered multi-binding resolved as a list.

    Each entry is a ``ConfiguredDependency`` keyed ``"{key}-{position}"``.
    Resolution is fail-fast: the first failing entry aborts the batch, and the
    entries that attempt created are disposed again.
    """

    __slots__ = ("_key", "_resolved", "values")

    def __init__(self, key: str, values: list[ConfiguredDependency[T]] | None = None) -> None:
        self._key = key
        self.values: list[ConfiguredDependency[T]] = values if values is not None else []
        self._resolved = False

    @property
    def key(self) -> str:
        return self._key

    def is_resolved(self) -> bool:
        return self._resolved

    def resolve_value(self, container: ServiceContainer) -> list[T]:
        created: list[ConfiguredDependency[T]] = []
        resolved: list[T] = []
        try:
            for entry in self.values:
                if not entry.is_resolved():
                    created.append(entry)
                resolved.append(entry.resolve_value(container))
        except Exception:
            for entry in created:
                entry.reset()
            raise
        self._resolved = True
        return resolved

    def register(self, value: T | ValueFactory) -> None:
        """Append a value or value factory."""
        self.values.append(ConfiguredDependency(self._next_key(), value))

    def push(self, cls: type[T]) -> None:
        """Append an auto-wired entry for ``cls``."""
        self.values.append(ConfiguredDependency(self._next_key(), create_auto_wire_factory(cls)))

    def clone(self) -> ArrayDependency[T]:
        return ArrayDependency(self._key, [entry.clone() for entry in self.values])

    def reset(self) -> None:
        for entry in self.values:
            entry.reset()
        self._resolved = False

    def _next_key(self) -> str:
        return f"{self._key}-{len(self.values)}"

    def __len__(self) -> int:
        return len(self.values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self._key!r}, entries={len(self.values)})"


def create_auto_wire_factory(cls: type[T]) -> Callable[[ServiceContainer], T]:
    """Build a factory that instantiates ``cls`` with its ``Inject`` dependencies.

    The factory resolves every declared dependency key from the container it
    receives, in ascending parameter order. There is no cycle detection: two
    constructors that depend on each other recurse until ``RecursionError``.
    """

    def factory(container: ServiceContainer) -> T:
        metadata = get_dependency_metadata(cls)
        if not metadata:
            return cls()

        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for entry in metadata:
            value = container.get(entry.dependency_key)
            if not kwargs and entry.parameter_index == len(args):
                args.append(value)
                continue
            kwargs[_keyword_for(cls, entry)] = value
        return cls(*args, **kwargs)

    factory.__qualname__ = f"create_auto_wire_factory.<{cls.__qualname__}>"
    return factory


def _keyword_for(cls: type, entry: DependencyMetadata) -> str:
    # Past a gap in the parameter indices positional passing is impossible.
    if entry.member_key is None:
        msg = (
            f"Cannot auto-wire {cls.__qualname__}: parameter {entry.parameter_index} "
            f"({entry.dependency_key!r}) follows an unmarked parameter and has no name"
        )
        raise KeywireInvalidRegistrationError(msg)
    return entry.member_key


def _constant_factory(value: T) -> Callable[[ServiceContainer], T]:
    def factory(_container: ServiceContainer) -> T:
        return value

    return factory
