"""In-memory TTL cache for results that are expensive to recompute.

Entries expire a fixed time after they are written, regardless of reads.
There is no size bound and no LRU eviction; expired entries are dropped
lazily on lookup. The cache is not thread-safe and ``get_or_set`` does
not coalesce concurrent misses: two callers may both run the factory.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

T = TypeVar("T")

DEFAULT_TTL = 300


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass
class CacheEntry(Generic[T]):
    value: T
    expires_at: float


class TTLCache:
    """Key -> value store where each entry lives for ``ttl_seconds``."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, CacheEntry[Any]] = {}

    def get(self, key: str, default: Any = MISSING) -> Any:
        """Stored value, or ``default`` when absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return default
        if self._clock() > entry.expires_at:
            del self._entries[key]
            return default
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float = DEFAULT_TTL) -> None:
        self._entries[key] = CacheEntry(value, self._clock() + ttl_seconds)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Awaitable[T]],
        ttl_seconds: float = DEFAULT_TTL,
    ) -> T:
        """Return the cached value, or await ``factory()`` and cache its result."""
        value = self.get(key)
        if value is not MISSING:
            return value
        value = await factory()
        self.set(key, value, ttl_seconds)
        return value

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not MISSING

    def __len__(self) -> int:
        return len(self._entries)
