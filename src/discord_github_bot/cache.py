"""
Time-bounded memoization of expensive GitHub fetches.

Two shapes are provided:

- `TTLCache`: a single slot, e.g. the most recent release listing.
- `KeyedTTLCache`: one slot per key, e.g. changelog comparisons keyed by
  "{base}...{head}". Keys are never evicted; staleness is only checked
  when a key is read.

Both use double-checked locking. Readers look at the current entry without
taking the lock; entries are immutable and replaced in a single assignment,
so a reader on the event loop always sees either the old or the new entry.
A caller that finds the entry missing or stale takes the writer lock,
checks again (another caller may have refreshed it meanwhile) and only then
calls the fetch function. A failed fetch leaves the previous entry in
place, stale or not, and the error goes back to the caller.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

from discord_github_bot.utils.logging import get_service_logger


T = TypeVar("T")

FetchFn = Callable[[], Awaitable[T]]
Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached payload and the clock reading when it was fetched."""

    payload: T
    fetched_at: float

    def is_fresh(self, ttl: float, now: float) -> bool:
        # Empty payloads (e.g. no releases yet) are never served from cache.
        if self.payload is None:
            return False
        if hasattr(self.payload, "__len__") and len(self.payload) == 0:
            return False
        return now - self.fetched_at < ttl


class TTLCache(Generic[T]):
    """
    Single-slot cache with a time-to-live.

    Attributes:
        name: Name used in log lines
        ttl: Seconds an entry stays valid
        fetch_count: Number of times a fetch function was actually called
    """

    def __init__(self, ttl: float, name: str = "cache", clock: Clock = time.monotonic) -> None:
        self.name = name
        self.ttl = ttl
        self.fetch_count = 0
        self._clock = clock
        self._entry: Optional[CacheEntry[T]] = None
        self._lock = asyncio.Lock()
        self.logger = get_service_logger("cache").bind(cache=name)

    @property
    def entry(self) -> Optional[CacheEntry[T]]:
        return self._entry

    @entry.setter
    def entry(self, value: Optional[CacheEntry[T]]) -> None:
        self._entry = value

    def _fresh_entry(self) -> Optional[CacheEntry[T]]:
        entry = self._entry
        if entry is not None and entry.is_fresh(self.ttl, self._clock()):
            return entry
        return None

    async def get_or_fetch(self, fetch_fn: FetchFn) -> T:
        """
        Return the cached payload, fetching it when missing or expired.

        Args:
            fetch_fn: Zero-argument coroutine function producing a new payload

        Returns:
            The cached or freshly fetched payload

        Raises:
            Whatever `fetch_fn` raises; the cache is left unchanged
        """
        entry = self._fresh_entry()
        if entry is not None:
            return entry.payload

        async with self._lock:
            entry = self._fresh_entry()
            if entry is not None:
                return entry.payload

            self.fetch_count += 1
            self.logger.debug("Cache miss, fetching")
            payload = await fetch_fn()
            self._entry = CacheEntry(payload=payload, fetched_at=self._clock())
            return payload

    def peek(self) -> Optional[T]:
        """Return the current payload without checking freshness."""
        entry = self._entry
        return entry.payload if entry is not None else None

    def invalidate(self) -> None:
        self._entry = None


class KeyedTTLCache(Generic[T]):
    """
    Per-key cache with a time-to-live.

    Freshness and locking are per key: a slow fetch for one key does not
    hold up readers or writers of another.
    """

    def __init__(self, ttl: float, name: str = "keyed-cache", clock: Clock = time.monotonic) -> None:
        self.name = name
        self.ttl = ttl
        self.fetch_count = 0
        self._clock = clock
        self._entries: Dict[Any, CacheEntry[T]] = {}
        self._locks: Dict[Any, asyncio.Lock] = {}
        self.logger = get_service_logger("cache").bind(cache=name)

    def entry(self, key: Any) -> Optional[CacheEntry[T]]:
        return self._entries.get(key)

    def set_entry(self, key: Any, entry: CacheEntry[T]) -> None:
        self._entries[key] = entry

    def _fresh_entry(self, key: Any) -> Optional[CacheEntry[T]]:
        entry = self._entries.get(key)
        if entry is not None and entry.is_fresh(self.ttl, self._clock()):
            return entry
        return None

    def _lock_for(self, key: Any) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks.setdefault(key, asyncio.Lock())
        return lock

    async def get_or_fetch(self, key: Any, fetch_fn: FetchFn) -> T:
        """
        Return the payload cached under `key`, fetching it when missing or expired.

        Raises:
            Whatever `fetch_fn` raises; the entry for `key` is left unchanged
        """
        entry = self._fresh_entry(key)
        if entry is not None:
            return entry.payload

        async with self._lock_for(key):
            entry = self._fresh_entry(key)
            if entry is not None:
                return entry.payload

            self.fetch_count += 1
            self.logger.debug("Cache miss, fetching", key=str(key))
            payload = await fetch_fn()
            self._entries[key] = CacheEntry(payload=payload, fetched_at=self._clock())
            return payload

    def peek(self, key: Any) -> Optional[T]:
        entry = self._entries.get(key)
        return entry.payload if entry is not None else None

    def invalidate(self, key: Any = None) -> None:
        """Drop one key, or every key when `key` is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
