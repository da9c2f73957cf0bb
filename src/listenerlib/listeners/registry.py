"""ListenerRegistry: names of the listeners currently alive."""

from __future__ import annotations

import logging
import threading

from listenerlib.core.errors import DuplicateNameError

logger = logging.getLogger(__name__)


class ListenerRegistry:
    """Thread-safe set of active listener names.

    Passed explicitly to every listener; two listeners sharing a registry
    cannot share a name.  Independent registries (one per test, one per
    process component) never interfere with each other.
    """

    def __init__(self) -> None:
        self._names: set[str] = set()
        self._lock = threading.Lock()

    def register(self, name: str) -> None:
        with self._lock:
            if name in self._names:
                raise DuplicateNameError(
                    f"Tried to create multiple listeners with the name {name!r}"
                )
            self._names.add(name)
        logger.debug("Registered listener %r", name)

    def release(self, name: str) -> None:
        """Forget *name*.  Releasing an unknown name is a no-op."""
        with self._lock:
            self._names.discard(name)
        logger.debug("Released listener %r", name)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._names)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._names

    def __len__(self) -> int:
        with self._lock:
            return len(self._names)
