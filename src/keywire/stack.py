from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Generic, TypeVar

from keywire.exceptions import KeywireContainerNotSetError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from keywire.container import ServiceContainer

T = TypeVar("T")


class Stack(Generic[T]):
    """A last-in-first-out collection."""

    __slots__ = ("_storage",)

    def __init__(self) -> None:
        self._storage: list[T] = []

    def push(self, item: T) -> None:
        self._storage.append(item)

    def pop(self) -> T | None:
        """Remove and return the top item, or None when the stack is empty."""
        if not self._storage:
            return None
        return self._storage.pop()

    def peek(self) -> T | None:
        """Return the top item without removing it, or None when the stack is empty."""
        if not self._storage:
            return None
        return self._storage[-1]

    def size(self) -> int:
        return len(self._storage)

    def __len__(self) -> int:
        return len(self._storage)


class ServiceContainerStack:
    """The active containers of one unit of work, innermost last.

    The stack is an explicit object owned by the caller and passed to the code
    that needs it. It is not bound to a thread or task.

    Examples:
        .. code-block:: python

            containers = ServiceContainerStack(root)
            with containers.child("request") as request_container:
                handler = request_container.get("handler")

    """

    __slots__ = ("_stack",)

    def __init__(self, root: ServiceContainer) -> None:
        self._stack: Stack[ServiceContainer] = Stack()
        self._stack.push(root)

    def current(self) -> ServiceContainer:
        """Return the innermost container.

        Raises:
            KeywireContainerNotSetError: If every container has been popped.

        """
        container = self._stack.peek()
        if container is None:
            msg = "No container found: the container stack is empty"
            raise KeywireContainerNotSetError(msg)
        return container

    def push(self, container: ServiceContainer) -> None:
        self._stack.push(container)

    def pop(self) -> ServiceContainer | None:
        return self._stack.pop()

    @contextmanager
    def child(self, provenance: str | None = None) -> Iterator[ServiceContainer]:
        """Push a child of the current container for the duration of the block.

        The child is popped and disposed on exit, also when the block raises.
        """
        container = self.current().create_child_container(provenance)
        self.push(container)
        try:
            yield container
        finally:
            self.pop()
            container.dispose()

    def __len__(self) -> int:
        return len(self._stack)
