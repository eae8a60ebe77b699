"""Cache entities."""

from .protocols import CacheFactory, TaggedCache

__all__ = ["CacheFactory", "TaggedCache"]
