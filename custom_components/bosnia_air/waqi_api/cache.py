"""In-memory freshness cache for air quality payloads."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
import logging
import threading
import time
from typing import Any, Callable, Hashable

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A cached payload.

    Attributes:
        payload   -- The cached value.
        stored_at -- Clock reading when the payload was stored.
    """

    payload: Any
    stored_at: float


class FreshnessCache:
    """
    Key/value cache where freshness is decided per lookup.

    Each lookup supplies its own time-to-live, so entries of different kinds can
    share one cache. An entry is fresh while its age is below the TTL; a stale
    entry is evicted by the lookup that finds it.

    Access to a key is serialized by a lock for that key only. No operation
    awaits, so the cache can be used from the event loop and from executor
    threads alike.
    """

    _entries: dict[Hashable, CacheEntry]
    _locks: dict[Hashable, threading.Lock]
    _registry_lock: threading.Lock
    _clock: Callable[[], float]

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Create a new, empty cache using the given monotonic clock (in seconds)."""

        self._entries = {}
        self._locks = {}
        self._registry_lock = threading.Lock()
        self._clock = clock

    def __len__(self) -> int:
        """Get the number of entries, fresh or not."""
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        """Check if an entry, fresh or not, exists for the key."""
        return key in self._entries

    def get(self, key: Hashable, ttl: timedelta) -> tuple[Any, bool]:
        """
        Look up a key.

        Returns (payload, True) if an entry younger than ttl exists, otherwise
        (None, False). A stale entry is removed. A ttl of zero is always a miss.
        """

        with self._lock_for(key):
            entry = self._entries.get(key)
            if entry is None:
                return (None, False)

            age = self._clock() - entry.stored_at
            if age < ttl.total_seconds():
                return (entry.payload, True)

            del self._entries[key]
            _LOGGER.debug("evicted stale entry %s (age %.1fs)", key, age)
            return (None, False)

    def set(self, key: Hashable, payload: Any) -> None:
        """Store a payload, replacing any previous entry for the key."""

        with self._lock_for(key):
            self._entries[key] = CacheEntry(payload=payload, stored_at=self._clock())

    def invalidate(self, key: Hashable) -> None:
        """Remove the entry for a key if present."""

        with self._lock_for(key):
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove every entry."""

        with self._registry_lock:
            keys = list(self._entries)

        for key in keys:
            self.invalidate(key)

    def _lock_for(self, key: Hashable) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()

            return lock
