"""Permission aggregation service.

Fans out to every registered module resolver, merges their grants and keeps
the merged set in the tagged cache under ``permissions:<user_id>``.
"""

import asyncio
import logging
from typing import Iterable, List, Optional, Sequence, Set, Union

from ....config.constants import (
    PERMISSIONS_CACHE_KEY_PREFIX,
    PERMISSIONS_CACHE_TAG,
    user_cache_tag,
)
from ....config.settings import AuthzSettings, get_settings
from ....core.value_objects import UserId
from ...cache.entities.protocols import TaggedCache
from ..entities.permission import Permission, decode, module_of
from ..entities.protocols import ModulePermissionResolver
from .metrics_service import PermissionMetricsService

logger = logging.getLogger(__name__)

UserRef = Union[UserId, str, None]


def normalize_user_id(user_id: UserRef) -> Optional[str]:
    """Return the user id as a trimmed string, or None when unusable."""
    if user_id is None:
        return None
    if isinstance(user_id, UserId):
        return str(user_id)
    if isinstance(user_id, str) and user_id.strip():
        return user_id.strip()
    return None


def permissions_cache_key(user_id: str) -> str:
    return f"{PERMISSIONS_CACHE_KEY_PREFIX}:{user_id}"


class PermissionService:
    """Aggregates, caches and answers questions about a user's permissions."""

    def __init__(
        self,
        cache: TaggedCache,
        resolvers: Sequence[ModulePermissionResolver],
        metrics: Optional[PermissionMetricsService] = None,
        settings: Optional[AuthzSettings] = None
    ):
        settings = settings or get_settings()
        self._cache = cache
        self._resolvers = list(resolvers)
        self._metrics = metrics or PermissionMetricsService()
        self._cache_ttl = settings.permission_cache_ttl
        self._concurrency = settings.resolver_concurrency

    @property
    def resolver_names(self) -> List[str]:
        return [resolver.module_name for resolver in self._resolvers]

    @property
    def metrics(self) -> PermissionMetricsService:
        return self._metrics

    @property
    def cache(self) -> TaggedCache:
        return self._cache

    async def get_user_permissions(self, user_id: UserRef) -> List[Permission]:
        """All permissions granted to the user by any resolver.

        Invalid user ids yield an empty list. Order is not significant.
        """
        key = normalize_user_id(user_id)
        if key is None:
            logger.warning("get_user_permissions called with empty user id")
            return []

        with self._metrics.measure_permission_check(key, "resolution"):
            return sorted(await self._load_permissions(key), key=lambda p: p.value)

    async def has_permission(self, user_id: UserRef, permission: Permission, record_failure: bool = True) -> bool:
        """Whether the user holds the permission.

        With ``record_failure`` off a denial is neither counted nor logged as
        an authorization failure.
        """
        key = normalize_user_id(user_id)
        if key is None:
            logger.warning("has_permission called with empty user id")
            return False

        with self._metrics.measure_permission_check(key, "check"):
            granted = permission in await self._load_permissions(key)

        if not granted and record_failure:
            self._metrics.record_authorization_failure(key, permission, "Permission not granted")
        return granted

    async def has_permissions(
        self,
        user_id: UserRef,
        permissions: Iterable[Permission],
        require_all: bool = True
    ) -> bool:
        """Check a set of permissions.

        An empty set is vacuously satisfied. With ``require_all`` every
        permission must be granted, otherwise at least one.
        """
        required = list(permissions)
        if not required:
            return True

        key = normalize_user_id(user_id)
        if key is None:
            logger.warning("has_permissions called with empty user id")
            return False

        with self._metrics.measure_permission_check(key, "multi-check"):
            granted = await self._load_permissions(key)

        if require_all:
            result = all(permission in granted for permission in required)
        else:
            result = any(permission in granted for permission in required)

        if not result:
            missing = [p.value for p in required if p not in granted]
            reason = (
                f"Missing required permissions: {', '.join(missing)}"
                if require_all
                else f"None of the required permissions found: {', '.join(p.value for p in required)}"
            )
            self._metrics.record_authorization_failure(key, required[0], reason)
        return result

    async def get_user_permissions_by_module(self, user_id: UserRef, module: Optional[str]) -> List[Permission]:
        key = normalize_user_id(user_id)
        if key is None:
            logger.warning("get_user_permissions_by_module called with empty user id")
            return []
        if not module or not module.strip():
            logger.warning("get_user_permissions_by_module called with empty module name")
            return []

        wanted = module.strip().lower()
        with self._metrics.measure_permission_check(key, f"resolution[{wanted}]"):
            granted = await self._load_permissions(key)
        return sorted((p for p in granted if module_of(p) == wanted), key=lambda p: p.value)

    async def invalidate_user_permissions_cache(self, user_id: UserRef) -> None:
        """Drop every cache entry tagged with the user. Best effort."""
        key = normalize_user_id(user_id)
        if key is None:
            return

        try:
            removed = await self._cache.remove_by_tag(user_cache_tag(key))
        except Exception as e:
            logger.warning(f"Failed to invalidate permission cache for user {key}: {e}")
            return

        self._metrics.record_cache_invalidation(key, "explicit invalidation")
        logger.info(f"Invalidated permission cache for user {key} ({removed} entries)")

    async def _load_permissions(self, user_id: str) -> Set[Permission]:
        computed: List[List[str]] = []

        async def factory() -> List[str]:
            encoded = sorted(p.value for p in await self._aggregate(user_id))
            computed.append(encoded)
            return encoded

        try:
            cached = await self._cache.get_or_create(
                permissions_cache_key(user_id),
                factory,
                ttl=self._cache_ttl,
                tags=[PERMISSIONS_CACHE_TAG, user_cache_tag(user_id)],
            )
        except Exception as e:
            # Cache is an optimization; serve from the resolvers instead
            logger.warning(f"Permission cache unavailable for user {user_id}, resolving directly: {e}")
            self._metrics.record_cache_access(hit=False)
            if computed:
                return self._decode_all(computed[0])
            return await self._aggregate(user_id)

        self._metrics.record_cache_access(hit=not computed)
        return self._decode_all(cached)

    @staticmethod
    def _decode_all(values: Iterable[str]) -> Set[Permission]:
        permissions = set()
        for value in values or ():
            permission = decode(value)
            if permission is None:
                logger.warning(f"Ignoring unknown cached permission value {value!r}")
                continue
            permissions.add(permission)
        return permissions

    async def _aggregate(self, user_id: str) -> Set[Permission]:
        """Run every resolver concurrently and merge what succeeds."""
        if not self._resolvers:
            return set()

        semaphore = asyncio.Semaphore(self._concurrency)

        async def run(resolver: ModulePermissionResolver) -> List[Permission]:
            async with semaphore:
                return await resolver.resolve_permissions(user_id)

        results = await asyncio.gather(
            *(run(resolver) for resolver in self._resolvers),
            return_exceptions=True,
        )

        merged: Set[Permission] = set()
        for resolver, result in zip(self._resolvers, results):
            # Cancellation is not a resolver failure
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
            if isinstance(result, Exception):
                self._metrics.record_resolver_failure(resolver.module_name)
                logger.warning(
                    f"Permission resolver {resolver.module_name} ({type(resolver).__name__}) "
                    f"failed for user {user_id}: {result}"
                )
                continue
            merged.update(p for p in result if isinstance(p, Permission) and p is not Permission.NONE)

        logger.debug(f"Resolved {len(merged)} permissions for user {user_id} from {len(self._resolvers)} resolvers")
        return merged
