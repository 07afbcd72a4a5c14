"""Process-local cache backend with absolute and sliding expiration.

Each entry carries two deadlines:
  - absolute: fixed at set() time, never extended.
  - sliding: pushed forward on every read, capped at the absolute deadline.
An entry is dead once either deadline passes.  Expired entries are dropped on
access, and set() sweeps the whole cache at most once per purge_interval.
Past max_size live entries the least recently used one is evicted.

Values are stored as-is; callers store immutable values (frozen entities,
tuples) so a hit can be returned without copying.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from threading import Lock
from typing import Any

from encounter_tracker.domain.services.caching import Cache


@dataclass
class _Entry:
    value: Any
    absolute_deadline: float | None
    sliding: float | None
    sliding_deadline: float | None

    def expired(self, now: float) -> bool:
        if self.absolute_deadline is not None and now >= self.absolute_deadline:
            return True
        return self.sliding_deadline is not None and now >= self.sliding_deadline

    def touch(self, now: float) -> None:
        if self.sliding is None:
            return
        deadline = now + self.sliding
        if self.absolute_deadline is not None:
            deadline = min(deadline, self.absolute_deadline)
        self.sliding_deadline = deadline


class MemoryCache(Cache):
    """
    In-memory LRU cache for a single process.

    Example:
        >>> cache = MemoryCache(max_size=1000)
        >>> await cache.set("Persona:42", persona, absolute_expiration=timedelta(minutes=30))
        >>> await cache.get("Persona:42")
    """

    def __init__(
        self,
        max_size: int = 10000,
        purge_interval: timedelta = timedelta(minutes=1),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._purge_interval = purge_interval.total_seconds()
        self._clock = clock
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._next_purge = clock() + self._purge_interval
        self._lock = Lock()

    async def get(self, key: str) -> Any | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expired(now):
                del self._entries[key]
                return None
            entry.touch(now)
            self._entries.move_to_end(key)
            return entry.value

    async def set(
        self,
        key: str,
        value: Any,
        absolute_expiration: timedelta | None = None,
        sliding_expiration: timedelta | None = None,
    ) -> None:
        now = self._clock()
        absolute = now + absolute_expiration.total_seconds() if absolute_expiration else None
        sliding = sliding_expiration.total_seconds() if sliding_expiration else None
        entry = _Entry(value=value, absolute_deadline=absolute, sliding=sliding, sliding_deadline=None)
        entry.touch(now)
        with self._lock:
            if now >= self._next_purge:
                self._purge(now)
            self._entries.pop(key, None)
            self._evict_if_needed()
            self._entries[key] = entry

    async def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def purge_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self._clock()
        with self._lock:
            return self._purge(now)

    def _purge(self, now: float) -> int:
        dead = [key for key, entry in self._entries.items() if entry.expired(now)]
        for key in dead:
            del self._entries[key]
        self._next_purge = now + self._purge_interval
        return len(dead)

    def _evict_if_needed(self) -> None:
        while len(self._entries) >= self.max_size:
            # oldest read or write first
            self._entries.popitem(last=False)

    def __len__(self) -> int:
        return len(self._entries)
