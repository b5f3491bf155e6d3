from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for container resolution and disposal.

    Resolution is synchronous, so there is no async variant. Child containers
    inherit the mode of the container they were forked from.
    """

    THREAD = "thread"
    """Guard resolution, ``dispose`` and ``destroy`` with a ``threading.RLock``."""

    NONE = "none"
    """Disable locking; concurrent use of one container is the caller's responsibility."""
