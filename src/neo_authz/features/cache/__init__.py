"""Tagged cache feature for neo-authz."""

from typing import Optional

from ...config.constants import CacheBackendType
from ...config.settings import AuthzSettings, get_settings
from .adapters import MemoryTaggedCache, RedisTaggedCache
from .entities import TaggedCache


def create_tagged_cache(settings: Optional[AuthzSettings] = None) -> TaggedCache:
    """Build the cache backend selected in settings."""
    settings = settings or get_settings()
    if settings.cache_backend == CacheBackendType.REDIS:
        return RedisTaggedCache.from_url(settings.redis_url, key_prefix=settings.cache_key_prefix)
    return MemoryTaggedCache()


__all__ = ["TaggedCache", "MemoryTaggedCache", "RedisTaggedCache", "create_tagged_cache"]
