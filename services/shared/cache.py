"""Time-bounded in-memory caches for toolscout.

Each cache sits in front of one slow external call (page fetch, summary
inference, embedding inference). Entries expire after a fixed TTL and are
evicted lazily on the next lookup of their key. Nothing is persisted: a
restart starts from empty caches.

Concurrency: all access happens on one event loop. ``get_or_load`` runs the
read-check-expire-load-write sequence under a per-key ``asyncio.Lock``, so
concurrent loads of one key are linearized and the second caller sees the
first caller's stored value. Different keys never wait on each other.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """A cached value and the clock reading at which it was stored."""
    value: V
    stored_at: float


@dataclass
class CacheStats:
    """Hit/miss counters for one cache."""
    hits: int = 0
    misses: int = 0
    stores: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        lookups = self.hits + self.misses
        if lookups == 0:
            return 0.0
        return self.hits / lookups

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'hits': self.hits,
            'misses': self.misses,
            'stores': self.stores,
            'evictions': self.evictions,
            'hit_rate': self.hit_rate
        }


class TTLCache(Generic[V]):
    """In-memory cache whose entries expire after ``ttl_seconds``."""

    def __init__(self, ttl_seconds: float, name: str = "cache",
                 clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self.name = name
        self._clock = clock
        self._entries: Dict[str, CacheEntry[V]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self.metrics = CacheStats()

    def _is_expired(self, entry: CacheEntry[V]) -> bool:
        return self._clock() - entry.stored_at >= self.ttl_seconds

    def get(self, key: str) -> Optional[V]:
        """Return the live value for ``key`` or None, evicting it if expired."""
        entry = self._entries.get(key)
        if entry is None:
            self.metrics.misses += 1
            return None

        if self._is_expired(entry):
            del self._entries[key]
            self.metrics.evictions += 1
            self.metrics.misses += 1
            logger.debug(f"{self.name}: entry expired for {key!r}")
            return None

        self.metrics.hits += 1
        return entry.value

    def put(self, key: str, value: V) -> None:
        """Store ``value`` under ``key`` stamped with the current clock."""
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock())
        self.metrics.stores += 1

    def delete(self, key: str) -> bool:
        """Delete key from cache."""
        if key in self._entries:
            del self._entries[key]
            return True
        return False

    def clear(self) -> None:
        """Clear all cache entries."""
        self._entries.clear()
        logger.info(f"{self.name} cleared")

    def cleanup_expired(self) -> int:
        """Remove expired entries and return count."""
        expired_keys = [key for key, entry in self._entries.items() if self._is_expired(entry)]
        for key in expired_keys:
            del self._entries[key]
        self.metrics.evictions += len(expired_keys)
        return len(expired_keys)

    def size(self) -> int:
        """Get current cache size (expired entries not yet evicted included)."""
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not self._is_expired(entry)

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            'name': self.name,
            'size': self.size(),
            'ttl_seconds': self.ttl_seconds,
            **self.metrics.to_dict()
        }

    @asynccontextmanager
    async def key_lock(self, key: str):
        """Hold the per-key critical section for ``key``."""
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if self._lock_users[key] == 0:
                del self._lock_users[key]
                self._locks.pop(key, None)

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[V]],
                          cacheable: Optional[Callable[[V], bool]] = None) -> V:
        """Return the cached value for ``key`` or load, store and return it.

        Args:
            key: Cache key
            loader: Coroutine factory called on a miss; its exceptions propagate
                and nothing is stored
            cacheable: Optional predicate; a loaded value for which it returns
                False is returned to the caller but not stored
        """
        async with self.key_lock(key):
            cached = self.get(key)
            if cached is not None:
                logger.debug(f"{self.name}: hit for {key!r}")
                return cached

            value = await loader()
            if cacheable is None or cacheable(value):
                self.put(key, value)
            return value
