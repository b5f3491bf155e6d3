from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from typing_extensions import TypeAlias

if TYPE_CHECKING:
    from collections.abc import Callable

    from keywire.container import ServiceContainer

ValueFactory: TypeAlias = "Callable[[ServiceContainer], Any]"
"""A factory that receives the resolving container and returns the dependency value."""


@runtime_checkable
class Disposable(Protocol):
    """An object that releases its resources when the owning container is disposed."""

    def dispose(self) -> None: ...  # noqa: D102


def dispose_value(value: object) -> None:
    """Call ``value.dispose()`` when the value exposes a callable ``dispose`` member."""
    dispose = getattr(value, "dispose", None)
    if callable(dispose):
        dispose()
