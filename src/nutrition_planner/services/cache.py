"""Expiring key-value cache used for external lookups."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol


class Cache(Protocol):
    """Cache interface for lookup results."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def contains(self, key: str) -> bool:
        """Return True when a live entry exists, even if its value is None."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a value for ``ttl_seconds``."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: float


@dataclass
class InMemoryCache(Cache):
    """Process-local cache; entries are dropped lazily once expired."""

    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, _CacheEntry] = field(default_factory=dict)

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._live_entry(key)
        return entry.value if entry else None

    def contains(self, key: str) -> bool:
        """Return True when ``key`` holds a live entry."""
        return self._live_entry(key) is not None

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a value, negative results (None) included."""
        self._entries[key] = _CacheEntry(
            value=value, expires_at=self.clock() + ttl_seconds
        )

    def _live_entry(self, key: str) -> _CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry
