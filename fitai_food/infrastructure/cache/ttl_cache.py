"""
In-memory cache with TTL support.

Backs both the nutrition lookup cache (7 days) and the recognition
result cache (24 hours). Expiry is checked on read; writes also sweep
expired entries, at most once per sweep interval, so keys that are
never read again do not pile up. The clock is injectable so tests can
move time forward.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

import structlog

logger = structlog.get_logger(__name__)

V = TypeVar("V")


@dataclass(slots=True)
class CacheEntry(Generic[V]):
    """Cached value with absolute expiry time."""

    value: V
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class TTLCache(Generic[V]):
    """
    Key → value map whose entries expire after a TTL.

    Concurrent writers to the same key are last-write-wins.

    Example:
        >>> cache: TTLCache[int] = TTLCache(default_ttl_seconds=60)
        >>> cache.set("answer", 42)
        >>> cache.get("answer")
        42
    """

    def __init__(
        self,
        default_ttl_seconds: float = 604800,
        clock: Callable[[], float] = time.monotonic,
        name: str = "cache",
        sweep_interval_seconds: Optional[float] = None,
    ) -> None:
        """Initialize cache.

        Args:
            default_ttl_seconds: Entry TTL (default 7 days)
            clock: Time source in seconds
            name: Label used in log events
            sweep_interval_seconds: Minimum time between write-time
                sweeps (default: the TTL)
        """
        self.default_ttl = default_ttl_seconds
        self.name = name
        self.sweep_interval = (
            default_ttl_seconds if sweep_interval_seconds is None else sweep_interval_seconds
        )
        self._clock = clock
        self._cache: Dict[str, CacheEntry[V]] = {}
        self._next_sweep = clock() + self.sweep_interval

    def get(self, key: str) -> Optional[V]:
        """Get a live entry, dropping it if expired."""
        entry = self._cache.get(key)

        if entry is None:
            logger.debug("cache_miss", cache=self.name, key=key)
            return None

        if entry.is_expired(self._clock()):
            logger.debug("cache_expired", cache=self.name, key=key)
            del self._cache[key]
            return None

        logger.debug("cache_hit", cache=self.name, key=key)
        return entry.value

    def set(self, key: str, value: V, ttl_seconds: Optional[float] = None) -> None:
        """Store a value.

        Args:
            key: Cache key
            value: Value to cache
            ttl_seconds: Override for the default TTL
        """
        now = self._clock()
        if now >= self._next_sweep:
            self.remove_expired()
            self._next_sweep = now + self.sweep_interval
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        self._cache[key] = CacheEntry(value=value, expires_at=now + ttl)

    def delete(self, key: str) -> bool:
        """Remove an entry. Returns True if it existed."""
        return self._cache.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all cache entries."""
        self._cache.clear()
        logger.info("cache_cleared", cache=self.name)

    def remove_expired(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired_keys = [key for key, entry in self._cache.items() if entry.is_expired(now)]

        for key in expired_keys:
            del self._cache[key]

        if expired_keys:
            logger.info("cache_expired_removed", cache=self.name, count=len(expired_keys))

        return len(expired_keys)

    def size(self) -> int:
        """Number of stored entries, expired ones included until swept."""
        return len(self._cache)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def __len__(self) -> int:
        return len(self._cache)
