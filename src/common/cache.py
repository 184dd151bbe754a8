"""TTL cache for gateway lookups."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """A single cache entry with TTL."""

    value: T
    expires_at: float
    created_at: float = field(default_factory=time.time)

    def is_expired(self) -> bool:
        """Check if this entry has expired."""
        return time.time() > self.expires_at


class TTLCache:
    """Keyed cache whose entries expire after a time-to-live.

    The resolver and walker each own one of these for the lifetime of a
    command. Entries are never refreshed in place; callers that change remote
    state call invalidate() or reset() so the next lookup goes back to the
    gateway.
    """

    def __init__(self, default_ttl: int = 3600):
        """Initialize the cache.

        Args:
            default_ttl: Default time-to-live in seconds.
        """
        self._default_ttl = default_ttl
        self._cache: Dict[str, CacheEntry[Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""
        entry = self._cache.get(key)
        if entry is None:
            return None
        if entry.is_expired():
            del self._cache[key]
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Cache a value.

        Args:
            key: Cache key.
            value: Value to store.
            ttl: Optional TTL override in seconds.
        """
        effective_ttl = ttl if ttl is not None else self._default_ttl
        self._cache[key] = CacheEntry(value=value, expires_at=time.time() + effective_ttl)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def invalidate(self, key: str) -> None:
        """Drop a single entry if present."""
        self._cache.pop(key, None)

    def reset(self) -> None:
        """Drop every entry."""
        self._cache.clear()

    def size(self) -> int:
        """Number of live (unexpired) entries."""
        now = time.time()
        return sum(1 for e in self._cache.values() if e.expires_at >= now)
