"""Cache protocols for neo-authz.

The permission core only needs a small slice of a cache: read-through
``get_or_create``, per-entry TTL and bulk removal by tag.
"""

from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Protocol, TypeVar, runtime_checkable

T = TypeVar('T')

CacheFactory = Callable[[], Awaitable[T]]


@runtime_checkable
class TaggedCache(Protocol):
    """Key/value cache whose entries can be grouped and dropped by tag.

    Values must be JSON-compatible (lists, dicts, strings, numbers) so every
    backend can store them.
    """

    async def get(self, key: str) -> Optional[Any]:
        """Get a value, None when missing or expired."""
        ...

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None,
        tags: Optional[Iterable[str]] = None
    ) -> None:
        """Store a value with an optional TTL (seconds) and tags."""
        ...

    async def get_or_create(
        self,
        key: str,
        factory: CacheFactory,
        ttl: Optional[int] = None,
        tags: Optional[Iterable[str]] = None
    ) -> Any:
        """Return the cached value or compute, store and return it."""
        ...

    async def remove(self, key: str) -> bool:
        """Remove one key. Returns True if it existed."""
        ...

    async def remove_by_tag(self, tag: str) -> int:
        """Remove every entry carrying the tag. Returns the number removed."""
        ...

    async def clear(self) -> None:
        ...

    async def health_check(self) -> Dict[str, Any]:
        ...
