"""
Memory Cache Module

This module implements the in-memory cache used for derived analytics
(performance profiles, lecture summaries). The cache is an explicit object:
the host creates it, hands it to the service, and decides its TTL and when
to invalidate. Nothing in the engine keeps a hidden module-level cache.
"""

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from eduadapt.common.cache.entry import CacheEntry

logger = logging.getLogger(__name__)

V = TypeVar('V')

# Sentinel distinguishing "not cached" from a cached None
MISSING = object()


class MemoryCache(Generic[V]):
    """
    Thread-safe in-memory cache with per-entry TTL and LRU eviction.

    Features:
    - Explicit TTL per entry, falling back to the cache default
    - LRU eviction when reaching maximum size
    - Explicit invalidation by key or key prefix
    - Hit, miss, eviction and expiration statistics
    """

    def __init__(
        self,
        default_ttl: Optional[float] = 300.0,
        max_size: int = 10000,
        clock: Optional[Callable[[], float]] = None,
        name: str = "memory"
    ):
        """
        Initialize the memory cache.

        Args:
            default_ttl: TTL in seconds used when ``set`` gets none, None for no expiration
            max_size: Maximum number of entries to store
            clock: Callable returning the current time in seconds
            name: Name for this cache, used in logs and stats
        """
        if max_size <= 0:
            raise ValueError("max_size must be positive")

        self._cache: "OrderedDict[str, CacheEntry[V]]" = OrderedDict()
        self._lock = threading.RLock()
        self._default_ttl = default_ttl
        self._max_size = max_size
        self._clock = clock or time.monotonic
        self._name = name

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

        # Invalidation log consulted by in-flight get_or_compute calls;
        # emptied whenever none are running
        self._generation = 0
        self._in_flight = 0
        self._deleted_keys: Dict[str, int] = {}
        self._deleted_prefixes: Dict[str, int] = {}
        self._stale_discards = 0

    @property
    def name(self) -> str:
        return self._name

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a value from the cache.

        Args:
            key: The cache key
            default: Value returned on a miss

        Returns:
            The cached value, or ``default`` when missing or expired
        """
        with self._lock:
            now = self._clock()
            entry = self._cache.get(key)

            if entry is None:
                self._misses += 1
                return default

            if entry.is_expired(now):
                del self._cache[key]
                self._expirations += 1
                self._misses += 1
                return default

            entry.access(now)
            self._cache.move_to_end(key)
            self._hits += 1
            return entry.value

    def set(self, key: str, value: V, ttl: Optional[float] = MISSING) -> None:
        """
        Set a value in the cache.

        Args:
            key: The cache key
            value: The value to cache
            ttl: Time-to-live in seconds; omitted means the cache default,
                None means no expiration
        """
        if ttl is MISSING:
            ttl = self._default_ttl

        with self._lock:
            entry = CacheEntry(value, self._clock(), ttl)
            if key not in self._cache and len(self._cache) >= self._max_size:
                self._evict_entries()
            self._cache[key] = entry
            self._cache.move_to_end(key)

    def get_or_compute(self, key: str, compute: Callable[[], V], ttl: Optional[float] = MISSING) -> V:
        """
        Return the cached value for ``key``, computing and storing it on a miss.

        The computation runs outside the lock, so two concurrent misses may
        both compute. If ``key`` is deleted or invalidated while ``compute``
        runs, the result is returned but not stored, because it may predate
        the write that caused the invalidation.
        """
        value = self.get(key, MISSING)
        if value is not MISSING:
            return value

        with self._lock:
            started = self._generation
            self._in_flight += 1
        try:
            value = compute()
            with self._lock:
                if self._invalidated_since(key, started):
                    self._stale_discards += 1
                    logger.debug(f"Cache {self._name}: not storing {key!r}, invalidated during compute")
                else:
                    self.set(key, value, ttl)
        finally:
            with self._lock:
                self._in_flight -= 1
                if not self._in_flight:
                    self._deleted_keys.clear()
                    self._deleted_prefixes.clear()
        return value

    def _record_invalidation(self, log: Dict[str, int], name: str) -> None:
        # Caller holds the lock
        self._generation += 1
        if self._in_flight:
            log[name] = self._generation

    def _invalidated_since(self, key: str, generation: int) -> bool:
        if self._deleted_keys.get(key, 0) > generation:
            return True
        return any(
            key.startswith(prefix) and deleted_at > generation
            for prefix, deleted_at in self._deleted_prefixes.items()
        )

    def delete(self, key: str) -> bool:
        """
        Delete a value from the cache.

        Returns:
            True if the key was found and deleted, False otherwise
        """
        with self._lock:
            self._record_invalidation(self._deleted_keys, key)
            if key in self._cache:
                del self._cache[key]
                return True
            return False

    def invalidate_prefix(self, prefix: str) -> int:
        """
        Delete every entry whose key starts with ``prefix``.

        Returns:
            Number of entries removed
        """
        with self._lock:
            self._record_invalidation(self._deleted_prefixes, prefix)
            doomed = [key for key in self._cache if key.startswith(prefix)]
            for key in doomed:
                del self._cache[key]
        if doomed:
            logger.debug(f"Cache {self._name}: invalidated {len(doomed)} entries under {prefix!r}")
        return len(doomed)

    def has(self, key: str) -> bool:
        """Check if a live (non-expired) entry exists for ``key``."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return False
            if entry.is_expired(self._clock()):
                del self._cache[key]
                self._expirations += 1
                return False
            return True

    def clear(self) -> None:
        """Clear all values from the cache."""
        with self._lock:
            self._record_invalidation(self._deleted_prefixes, "")
            self._cache.clear()

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._cache.keys())

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the cache.

        Returns:
            Dictionary containing cache statistics
        """
        with self._lock:
            total = self._hits + self._misses
            hit_rate = self._hits / total if total > 0 else 0

            return {
                'name': self._name,
                'size': len(self._cache),
                'max_size': self._max_size,
                'hits': self._hits,
                'misses': self._misses,
                'hit_rate': hit_rate,
                'evictions': self._evictions,
                'expirations': self._expirations,
                'stale_discards': self._stale_discards
            }

    def cleanup_expired(self) -> int:
        """
        Remove expired entries from the cache.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            expired_keys = [
                key for key, entry in self._cache.items()
                if entry.is_expired(now)
            ]
            for key in expired_keys:
                del self._cache[key]
                self._expirations += 1
            return len(expired_keys)

    def _evict_entries(self) -> None:
        """Evict least recently used entries until there is room for one more."""
        while len(self._cache) >= self._max_size:
            self._cache.popitem(last=False)
            self._evictions += 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
