"""
Analytics Caching

This package provides the explicit, caller-owned cache used for derived
analytics, with TTL expiry, LRU eviction and prefix invalidation.
"""

from eduadapt.common.cache.entry import CacheEntry
from eduadapt.common.cache.key_builder import KeyBuilder
from eduadapt.common.cache.memory import MemoryCache


def create_cache(cache_config=None, clock=None) -> MemoryCache:
    """
    Create a memory cache from a ``CacheConfig``.

    Args:
        cache_config: Cache configuration, defaults to the loaded engine config
        clock: Optional clock callable, mostly for tests

    Returns:
        A new MemoryCache
    """
    if cache_config is None:
        from eduadapt.common.config import get_config
        cache_config = get_config().cache
    return MemoryCache(
        default_ttl=cache_config.default_ttl,
        max_size=cache_config.max_size,
        clock=clock,
        name="analytics"
    )


__all__ = [
    'CacheEntry',
    'KeyBuilder',
    'MemoryCache',
    'create_cache',
]
