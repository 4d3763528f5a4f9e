"""
In-memory caches for aggregate, leaderboard and per-player stats.

Each cache expires entries on two clocks: ``ttl`` counts from insertion and
``idle`` counts from the last read. Misses are computed at most once per key
at a time; concurrent callers for the same key share the in-flight result.
"""

import asyncio
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Generic, Hashable, Optional, TypeVar

import structlog

logger = structlog.get_logger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

Clock = Callable[[], float]


@dataclass
class _CacheEntry(Generic[V]):
    value: V
    inserted_at: float
    accessed_at: float


@dataclass
class _Flight(Generic[V]):
    """A computation in progress and the number of callers waiting on it."""

    task: "asyncio.Task[V]"
    waiters: int = field(default=0)


def _consume_result(task: "asyncio.Task[Any]") -> None:
    # Waiters may all be gone; keep asyncio from reporting an unretrieved error
    if not task.cancelled():
        task.exception()


class AsyncTTLCache(Generic[K, V]):
    """TTL + idle expiring cache with single-flight recomputation."""

    def __init__(
        self,
        name: str,
        ttl: float,
        idle: float,
        maxsize: Optional[int] = None,
        clock: Clock = time.monotonic,
    ):
        """
        Initialize cache.

        Args:
            name: Cache name used in log events
            ttl: Seconds an entry may live after insertion
            idle: Seconds an entry may live after its last read
            maxsize: Maximum resident entries, least recently used evicted first
            clock: Monotonic time source
        """
        if ttl <= 0 or idle <= 0:
            raise ValueError("ttl and idle must be positive")
        if maxsize is not None and maxsize <= 0:
            raise ValueError("maxsize must be positive")
        self.name = name
        self.ttl = ttl
        self.idle = idle
        self.maxsize = maxsize
        self._clock = clock
        self._entries: "OrderedDict[K, _CacheEntry[V]]" = OrderedDict()
        self._flights: Dict[K, _Flight[V]] = {}
        self._hits = 0
        self._misses = 0
        self._computations = 0

    def _is_fresh(self, entry: _CacheEntry[V], now: float) -> bool:
        return now - entry.inserted_at < self.ttl and now - entry.accessed_at < self.idle

    def _lookup(self, key: K) -> Optional[_CacheEntry[V]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        now = self._clock()
        if not self._is_fresh(entry, now):
            del self._entries[key]
            logger.debug("Cache expired", cache=self.name, key=str(key))
            return None
        entry.accessed_at = now
        self._entries.move_to_end(key)
        return entry

    def get(self, key: K) -> Optional[V]:
        """
        Get value from cache if still fresh.

        Args:
            key: Cache key

        Returns:
            Cached value if present and fresh, None otherwise
        """
        entry = self._lookup(key)
        return entry.value if entry is not None else None

    def set(self, key: K, value: V) -> None:
        """Insert or replace the entry for ``key``."""
        now = self._clock()
        self._entries[key] = _CacheEntry(value=value, inserted_at=now, accessed_at=now)
        self._entries.move_to_end(key)
        if self.maxsize is not None:
            while len(self._entries) > self.maxsize:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(
                    "Cache eviction", cache=self.name, key=str(evicted), reason="full"
                )

    async def get_or_compute(self, key: K, compute: Callable[[], Awaitable[V]]) -> V:
        """
        Return the cached value or compute it, once per key at a time.

        A failed computation is propagated to every waiter and not cached.
        A waiter that is cancelled leaves the computation running for the
        others; it is only cancelled when no waiter remains.
        """
        entry = self._lookup(key)
        if entry is not None:
            self._hits += 1
            logger.debug("Cache hit", cache=self.name, key=str(key))
            return entry.value

        flight = self._flights.get(key)
        if flight is None:
            self._misses += 1
            logger.debug("Cache miss", cache=self.name, key=str(key))
            task = asyncio.ensure_future(self._compute(key, compute))
            task.add_done_callback(_consume_result)
            flight = _Flight(task=task)
            self._flights[key] = flight
        else:
            logger.debug("Joining in-flight computation", cache=self.name, key=str(key))

        flight.waiters += 1
        try:
            return await asyncio.shield(flight.task)
        finally:
            flight.waiters -= 1
            if flight.waiters == 0 and not flight.task.done():
                logger.debug(
                    "Cancelling abandoned computation", cache=self.name, key=str(key)
                )
                # Later callers start a fresh computation instead of joining this one
                if self._flights.get(key) is flight:
                    del self._flights[key]
                flight.task.cancel()

    async def _compute(self, key: K, compute: Callable[[], Awaitable[V]]) -> V:
        self._computations += 1
        try:
            value = await compute()
            self.set(key, value)
            return value
        finally:
            flight = self._flights.get(key)
            if flight is not None and flight.task is asyncio.current_task():
                del self._flights[key]

    def invalidate(self, key: K) -> None:
        """Drop the entry for ``key``, if any."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Clear all entries from cache."""
        count = len(self._entries)
        self._entries.clear()
        self._hits = 0
        self._misses = 0
        logger.info("Cache cleared", cache=self.name, entries_removed=count)

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        total = self._hits + self._misses
        return {
            "size": len(self._entries),
            "maxsize": self.maxsize,
            "hits": self._hits,
            "misses": self._misses,
            "computations": self._computations,
            "in_flight": len(self._flights),
            "hit_rate": self._hits / total if total > 0 else 0.0,
        }

    def __len__(self) -> int:
        """Get number of resident entries, expired ones included."""
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
