"""Cache adapters."""

from .memory_adapter import MemoryTaggedCache
from .redis_adapter import RedisTaggedCache

__all__ = ["MemoryTaggedCache", "RedisTaggedCache"]
