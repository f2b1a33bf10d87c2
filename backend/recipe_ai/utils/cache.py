"""In-memory TTL store shared by the response and image caches.

Process-level map with lazy expiry: nothing runs in the background, entries
are checked when read and swept when the owning cache asks for it.
"""

import time
from collections.abc import Callable
from threading import Lock
from typing import Generic, Protocol, TypeVar


class Expirable(Protocol):
    created_at: float


E = TypeVar("E", bound=Expirable)

Clock = Callable[[], float]


class ExpiringStore(Generic[E]):
    """String-keyed map of entries that carry their own ``created_at``.

    ``is_expired`` decides per entry whether it is still valid, so the
    response cache (per-entry TTL) and the image cache (fixed TTL) can share
    the same storage and locking.
    """

    def __init__(self, is_expired: Callable[[E, float], bool], clock: Clock = time.time) -> None:
        self._entries: dict[str, E] = {}
        self._is_expired = is_expired
        self._clock = clock
        self.lock = Lock()

    def now(self) -> float:
        return self._clock()

    def get(self, key: str) -> E | None:
        """Return a live entry, dropping it first if it has expired.

        Callers must hold ``lock``.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry, self.now()):
            del self._entries[key]
            return None
        return entry

    def put(self, key: str, entry: E) -> None:
        self._entries[key] = entry

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def sweep(self) -> int:
        """Remove every expired entry and return how many were dropped."""
        now = self.now()
        expired = [k for k, e in self._entries.items() if self._is_expired(e, now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def oldest(self, count: int) -> list[str]:
        """Keys of the ``count`` entries with the smallest ``created_at``."""
        if count <= 0:
            return []
        ordered = sorted(self._entries.items(), key=lambda item: item[1].created_at)
        return [key for key, _ in ordered[:count]]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
