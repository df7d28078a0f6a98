"""In-memory TTL cache for check results.

One Cache instance is owned by the CheckRegistry and shared by every
CheckEntry. Expired entries are evicted lazily, at the moment a read
observes them; there is no background sweep.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, replace

from .models import CheckResponse

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass
class CacheEntry:
    """A memoized response and the window it stays valid for."""

    name: str
    response: CheckResponse
    ttl: int
    created: float

    @property
    def expires(self) -> float:
        return self.created + self.ttl

    def valid_for(self, now: float) -> float:
        return self.expires - now


class Cache:
    """Thread-safe name → CheckResponse store with per-entry TTL.

    All map operations happen under a single lock. Callers must not hold
    the lock while running a check, so the lock is never exposed.
    """

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def set(self, name: str, response: CheckResponse, ttl: int) -> None:
        """Insert or overwrite the entry for ``name``, starting its TTL now."""
        snapshot = replace(response, from_cache=False, cache_ttl=0)
        with self._lock:
            self._entries[name] = CacheEntry(
                name=name, response=snapshot, ttl=ttl, created=self._clock(),
            )
        logger.debug("Caching %s for %d seconds", name, ttl)

    def get(self, name: str) -> tuple[CheckResponse, int] | None:
        """Return ``(response, seconds_remaining)`` or None on a miss.

        A stale entry counts as a miss and is deleted before returning.
        """
        with self._lock:
            entry = self._entries.get(name)
            if entry is None:
                logger.debug("No cache entry for %s", name)
                return None

            remaining = entry.valid_for(self._clock())
            if remaining <= 0:
                del self._entries[name]
                logger.debug("Cache for %s expired %.0fs ago", name, -remaining)
                return None

        # ceil keeps a live entry strictly positive and never above its ttl
        seconds = math.ceil(remaining)
        logger.debug("Cache hit for %s, expires in %d", name, seconds)
        return replace(entry.response), seconds

    def delete(self, name: str) -> None:
        with self._lock:
            removed = self._entries.pop(name, None)
        if removed is not None:
            logger.debug("Removed cache entry %s", name)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
