"""Redis tagged cache for neo-authz.

Values are stored as JSON strings. Each tag is a Redis set holding the keys
that carry it. Invalidating a tag runs as one Lua script so a concurrent
write cannot leave a key behind without its tag.
"""

import json
import logging
from typing import Any, Dict, Iterable, Optional

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError

from ..entities.protocols import CacheFactory
from ....core.exceptions.infrastructure import (
    CacheConnectionError,
    CacheError,
    CacheSerializationError,
)

logger = logging.getLogger(__name__)

# Members and the tag set go in one atomic step; DEL is batched to stay
# within the unpack limit
_REMOVE_BY_TAG_SCRIPT = """
local members = redis.call("smembers", KEYS[1])
local removed = 0
for i = 1, #members, 1000 do
    removed = removed + redis.call("del", unpack(members, i, math.min(i + 999, #members)))
end
redis.call("del", KEYS[1])
return removed
"""


class RedisTaggedCache:
    """Tagged cache on top of ``redis.asyncio``."""

    def __init__(
        self,
        client: redis.Redis,
        key_prefix: str = "neo_authz",
        default_ttl: Optional[int] = None
    ):
        self._client = client
        self._key_prefix = key_prefix
        self._default_ttl = default_ttl

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "neo_authz", default_ttl: Optional[int] = None) -> "RedisTaggedCache":
        client = redis.from_url(url, decode_responses=True)
        return cls(client, key_prefix=key_prefix, default_ttl=default_ttl)

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}:{key}"

    def _tag_key(self, tag: str) -> str:
        return f"{self._key_prefix}:tag:{tag}"

    async def get(self, key: str) -> Optional[Any]:
        try:
            raw = await self._client.get(self._key(key))
        except RedisConnectionError as e:
            raise CacheConnectionError(f"Redis unavailable while reading {key}: {e}")
        except RedisError as e:
            raise CacheError(f"Failed to read cache key {key}: {e}")
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            raise CacheSerializationError(f"Cached value for {key} is not valid JSON: {e}")

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None,
        tags: Optional[Iterable[str]] = None
    ) -> None:
        ttl = ttl if ttl is not None else self._default_ttl
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise CacheSerializationError(f"Value for {key} is not JSON serializable: {e}")

        full_key = self._key(key)
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.set(full_key, payload, ex=ttl if ttl and ttl > 0 else None)
                for tag in tags or ():
                    tag_key = self._tag_key(tag)
                    pipe.sadd(tag_key, full_key)
                    if ttl and ttl > 0:
                        # Tag sets live at least as long as their newest member
                        pipe.expire(tag_key, ttl, gt=True)
                        pipe.expire(tag_key, ttl, nx=True)
                await pipe.execute()
        except RedisConnectionError as e:
            raise CacheConnectionError(f"Redis unavailable while writing {key}: {e}")
        except RedisError as e:
            raise CacheError(f"Failed to write cache key {key}: {e}")

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
        value = await factory()
        await self.set(key, value, ttl=ttl, tags=tags)
        return value

    async def remove(self, key: str) -> bool:
        try:
            return bool(await self._client.delete(self._key(key)))
        except RedisError as e:
            raise CacheError(f"Failed to remove cache key {key}: {e}")

    async def remove_by_tag(self, tag: str) -> int:
        tag_key = self._tag_key(tag)
        try:
            removed = await self._client.eval(_REMOVE_BY_TAG_SCRIPT, 1, tag_key)
        except RedisConnectionError as e:
            raise CacheConnectionError(f"Redis unavailable while invalidating tag {tag}: {e}")
        except RedisError as e:
            raise CacheError(f"Failed to invalidate tag {tag}: {e}")
        removed = int(removed or 0)
        logger.debug(f"Removed {removed} cache entries tagged {tag}")
        return removed

    async def clear(self) -> None:
        try:
            keys = [key async for key in self._client.scan_iter(match=f"{self._key_prefix}:*")]
            if keys:
                await self._client.delete(*keys)
        except RedisError as e:
            raise CacheError(f"Failed to clear cache: {e}")

    async def health_check(self) -> Dict[str, Any]:
        try:
            await self._client.ping()
            return {"healthy": True, "backend": "redis"}
        except RedisError as e:
            logger.warning(f"Redis health check failed: {e}")
            return {"healthy": False, "backend": "redis", "error": str(e)}

    async def close(self) -> None:
        await self._client.aclose()
