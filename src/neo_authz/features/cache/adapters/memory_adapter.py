"""In-process tagged cache for neo-authz."""

import asyncio
import copy
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Set

from ..entities.protocols import CacheFactory

logger = logging.getLogger(__name__)


@dataclass
class MemoryCacheEntry:
    """Memory cache entry with metadata."""
    value: Any
    created_at: float
    expires_at: Optional[float] = None
    access_count: int = 0
    tags: Set[str] = field(default_factory=set)

    @property
    def is_expired(self) -> bool:
        """Check if entry is expired."""
        if self.expires_at is None:
            return False
        return time.monotonic() > self.expires_at


class MemoryTaggedCache:
    """Dictionary-backed cache with a tag index.

    Suitable for a single process and for tests. Stored values are deep
    copied on the way in and out so callers never share mutable state.
    """

    def __init__(self, default_ttl: Optional[int] = None, max_entries: int = 10000):
        self._store: Dict[str, MemoryCacheEntry] = {}
        self._tag_index: Dict[str, Set[str]] = {}
        self._lock = asyncio.Lock()
        self._default_ttl = default_ttl
        self._max_entries = max_entries
        self._hits = 0
        self._misses = 0

    async def get(self, key: str) -> Optional[Any]:
        async with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.is_expired:
                self._drop(key)
                self._misses += 1
                return None
            entry.access_count += 1
            self._hits += 1
            return copy.deepcopy(entry.value)

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None,
        tags: Optional[Iterable[str]] = None
    ) -> None:
        ttl = ttl if ttl is not None else self._default_ttl
        now = time.monotonic()
        entry = MemoryCacheEntry(
            value=copy.deepcopy(value),
            created_at=now,
            expires_at=now + ttl if ttl and ttl > 0 else None,
            tags=set(tags or ()),
        )
        async with self._lock:
            if key in self._store:
                self._drop(key)
            elif len(self._store) >= self._max_entries:
                self._evict()
            self._store[key] = entry
            for tag in entry.tags:
                self._tag_index.setdefault(tag, set()).add(key)

    async def get_or_create(
        self,
        key: str,
        factory: CacheFactory,
        ttl: Optional[int] = None,
        tags: Optional[Iterable[str]] = None
    ) -> Any:
        cached = await self.get(key)
        if cached is not None:
            return cached
        # Factory runs outside the lock; concurrent misses may both compute
        value = await factory()
        await self.set(key, value, ttl=ttl, tags=tags)
        return value

    async def remove(self, key: str) -> bool:
        async with self._lock:
            return self._drop(key)

    async def remove_by_tag(self, tag: str) -> int:
        async with self._lock:
            keys = self._tag_index.pop(tag, set())
            removed = sum(1 for key in list(keys) if self._drop(key))
        logger.debug(f"Removed {removed} cache entries tagged {tag}")
        return removed

    async def clear(self) -> None:
        async with self._lock:
            self._store.clear()
            self._tag_index.clear()

    async def health_check(self) -> Dict[str, Any]:
        total = self._hits + self._misses
        return {
            "healthy": True,
            "backend": "memory",
            "entries": len(self._store),
            "tags": len(self._tag_index),
            "hit_rate": (self._hits / total) if total else 0.0,
        }

    def _drop(self, key: str) -> bool:
        entry = self._store.pop(key, None)
        if entry is None:
            return False
        for tag in entry.tags:
            keys = self._tag_index.get(tag)
            if keys is not None:
                keys.discard(key)
                if not keys:
                    del self._tag_index[tag]
        return True

    def _evict(self) -> None:
        expired = [key for key, entry in self._store.items() if entry.is_expired]
        for key in expired:
            self._drop(key)
        if len(self._store) >= self._max_entries:
            oldest = min(self._store, key=lambda k: self._store[k].created_at)
            self._drop(oldest)
