"""
Cache Entry Module

This module provides the CacheEntry class, which wraps a cached analytics
value with the metadata needed for TTL expiry and LRU bookkeeping.
"""

from typing import Generic, Optional, TypeVar

V = TypeVar('V')


class CacheEntry(Generic[V]):
    """
    Represents a cached value with metadata.

    Times are read from the owning cache's clock, so tests can drive
    expiry without sleeping.

    Attributes:
        value: The cached value
        created_at: When the entry was created (clock seconds)
        expires_at: When the entry expires, or None for no expiration
        access_count: Number of times the entry has been read
        last_accessed: When the entry was last read
    """

    def __init__(self, value: V, now: float, ttl: Optional[float] = None):
        """
        Initialize a cache entry with a value and optional TTL.

        Args:
            value: The value to cache
            now: Current clock reading
            ttl: Time-to-live in seconds, or None for no expiration
        """
        self.value = value
        self.created_at = now
        self.expires_at = None if ttl is None else now + ttl
        self.access_count = 0
        self.last_accessed = now

    def is_expired(self, now: float) -> bool:
        """
        Check if the entry has expired.

        Args:
            now: Current clock reading

        Returns:
            True if the entry has expired, False otherwise
        """
        if self.expires_at is None:
            return False
        return now >= self.expires_at

    def access(self, now: float) -> None:
        """Record a read of this entry."""
        self.access_count += 1
        self.last_accessed = now

    def get_ttl(self, now: float) -> Optional[float]:
        """
        Get the remaining TTL in seconds.

        Returns:
            Remaining TTL in seconds, or None if no expiration
        """
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - now)
