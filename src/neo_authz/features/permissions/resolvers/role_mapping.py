"""Identity provider role to permission mapping.

Every role the platform knows about is listed in ``ROLE_PERMISSIONS``. A role
that is not in the table grants nothing: there is no wildcard or prefix
matching, so adding a role always means adding an entry here.
"""

import hashlib
import logging
from typing import Dict, FrozenSet, Iterable, List, Optional, Union

from ....config.constants import ROLES_CACHE_KEY_PREFIX, user_cache_tag
from ....config.settings import AuthzSettings, get_settings
from ....core.exceptions import CacheError, NeoAuthzError
from ....core.value_objects import UserId
from ...cache.entities.protocols import TaggedCache
from ..entities.permission import Permission
from ..entities.protocols import RoleSource

logger = logging.getLogger(__name__)

P = Permission

_USERS_ALL = (P.USERS_READ, P.USERS_CREATE, P.USERS_UPDATE, P.USERS_DELETE, P.USERS_LIST)
_PROVIDERS_ALL = (
    P.PROVIDERS_READ, P.PROVIDERS_CREATE, P.PROVIDERS_UPDATE,
    P.PROVIDERS_DELETE, P.PROVIDERS_LIST, P.PROVIDERS_APPROVE,
)
_DOCUMENTS_ALL = (P.DOCUMENTS_READ, P.DOCUMENTS_UPLOAD, P.DOCUMENTS_VERIFY, P.DOCUMENTS_DELETE)
_CATALOGS_ALL = (P.CATALOGS_READ, P.CATALOGS_CREATE, P.CATALOGS_UPDATE, P.CATALOGS_DELETE)
_LOCATIONS_ALL = (P.LOCATIONS_READ, P.LOCATIONS_CREATE, P.LOCATIONS_UPDATE, P.LOCATIONS_DELETE)
_ORDERS_ALL = (P.ORDERS_READ, P.ORDERS_CREATE, P.ORDERS_UPDATE, P.ORDERS_DELETE)
_REPORTS_ALL = (P.REPORTS_VIEW, P.REPORTS_EXPORT, P.REPORTS_CREATE)

ROLE_PERMISSIONS: Dict[str, FrozenSet[Permission]] = {
    # Platform administration
    "admin": frozenset((
        P.ADMIN_SYSTEM, P.ADMIN_USERS, P.ADMIN_REPORTS,
        *_USERS_ALL, *_PROVIDERS_ALL, *_DOCUMENTS_ALL, *_CATALOGS_ALL,
        *_LOCATIONS_ALL, *_ORDERS_ALL, *_REPORTS_ALL,
    )),
    "system-admin": frozenset((
        P.SYSTEM_READ, P.SYSTEM_WRITE, P.SYSTEM_ADMIN,
        P.ADMIN_SYSTEM, P.ADMIN_USERS, P.ADMIN_REPORTS,
        *_USERS_ALL, *_PROVIDERS_ALL, *_ORDERS_ALL, *_REPORTS_ALL,
    )),

    # Users
    "user-admin": frozenset((P.ADMIN_USERS, P.USERS_READ, P.USERS_CREATE, P.USERS_UPDATE, P.USERS_LIST)),
    "user-operator": frozenset((P.USERS_READ, P.USERS_UPDATE, P.USERS_LIST)),
    "user": frozenset((P.USERS_READ, P.USERS_PROFILE)),

    # Providers
    "provider-admin": frozenset(_PROVIDERS_ALL),
    "provider": frozenset((P.PROVIDERS_READ, P.DOCUMENTS_READ, P.DOCUMENTS_UPLOAD)),
    "document-reviewer": frozenset((P.DOCUMENTS_READ, P.DOCUMENTS_VERIFY, P.PROVIDERS_READ)),

    # Catalogs and locations
    "catalog-admin": frozenset(_CATALOGS_ALL),
    "location-admin": frozenset(_LOCATIONS_ALL),

    # Orders
    "order-admin": frozenset(_ORDERS_ALL),
    "order-operator": frozenset((P.ORDERS_READ, P.ORDERS_UPDATE)),

    # Reports
    "report-admin": frozenset(_REPORTS_ALL),
    "report-viewer": frozenset((P.REPORTS_VIEW,)),
}

_MAPPABLE: FrozenSet[Permission] = frozenset().union(*ROLE_PERMISSIONS.values())


def map_role_to_permissions(role: str) -> FrozenSet[Permission]:
    """Permissions granted by one role name (case-insensitive).

    Raises:
        ValueError: If the role name is None or blank
    """
    if role is None or not str(role).strip():
        raise ValueError("Role name cannot be null or empty")
    return ROLE_PERMISSIONS.get(role.strip().lower(), frozenset())


def mask_user_id(user_id: Optional[str]) -> str:
    """Shorten a user id for logs: ``abc***xyz`` (``a***z`` for short ids)."""
    if not user_id or not user_id.strip():
        return "[EMPTY]"
    if len(user_id) <= 6:
        return f"{user_id[0]}***{user_id[-1]}"
    return f"{user_id[:3]}***{user_id[-3:]}"


def roles_cache_key(user_id: str) -> str:
    """Cache key for a user's roles, hashed so the raw id never reaches the cache."""
    digest = hashlib.sha256(user_id.encode("utf-8")).hexdigest()
    return f"{ROLES_CACHE_KEY_PREFIX}:{digest}"


class RoleMappingPermissionResolver:
    """Resolve permissions from the realm roles the identity provider assigns."""

    def __init__(
        self,
        role_source: RoleSource,
        cache: Optional[TaggedCache] = None,
        settings: Optional[AuthzSettings] = None,
        module_name: str = "users"
    ):
        settings = settings or get_settings()
        self._role_source = role_source
        self._cache = cache
        self._role_cache_ttl = settings.role_cache_ttl
        self._module_name = module_name

    @property
    def module_name(self) -> str:
        return self._module_name

    def can_resolve(self, permission: Permission) -> bool:
        return permission in _MAPPABLE

    async def resolve_permissions(self, user_id: Union[UserId, str]) -> List[Permission]:
        key = str(user_id).strip() if user_id is not None else ""
        if not key:
            return []

        try:
            roles = await self._get_roles(key)
        except (NeoAuthzError, ConnectionError, TimeoutError) as e:
            logger.error(
                f"Failed to resolve permissions from identity provider for user {mask_user_id(key)} "
                f"({type(e).__name__})"
            )
            return []

        permissions = set()
        for role in roles:
            if not role or not role.strip():
                continue
            permissions.update(map_role_to_permissions(role))

        logger.debug(
            f"Resolved {len(permissions)} permissions from {len(roles)} roles for user {mask_user_id(key)}"
        )
        return sorted(permissions, key=lambda p: p.value)

    def map_roles(self, roles: Iterable[str]) -> FrozenSet[Permission]:
        """Union of the permissions granted by several roles."""
        granted: FrozenSet[Permission] = frozenset()
        for role in roles:
            granted = granted | map_role_to_permissions(role)
        return granted

    async def _get_roles(self, user_id: str) -> List[str]:
        if self._cache is None:
            return await self._role_source.get_user_roles(user_id)

        fetched: List[List[str]] = []

        async def factory() -> List[str]:
            roles = list(await self._role_source.get_user_roles(user_id))
            fetched.append(roles)
            return roles

        try:
            return await self._cache.get_or_create(
                roles_cache_key(user_id),
                factory,
                ttl=self._role_cache_ttl,
                tags=[user_cache_tag(user_id)],
            )
        except CacheError as e:
            logger.warning(f"Role cache unavailable for user {mask_user_id(user_id)}: {e}")
            if fetched:
                return fetched[0]
            return await self._role_source.get_user_roles(user_id)
