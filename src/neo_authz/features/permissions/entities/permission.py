"""Permission catalog for neo-authz.

Closed taxonomy of ``module:action`` permissions plus pure lookups over it.
Everything is table-driven: the enum values are the canonical encodings and
the module index is built once at import time.
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Optional


class Permission(str, Enum):
    """Fine-grained capability encoded as ``<module>:<action>``."""

    # Distinguished "no permission" value; never decodable, never requirable
    NONE = "none"

    # System
    SYSTEM_READ = "system:read"
    SYSTEM_WRITE = "system:write"
    SYSTEM_ADMIN = "system:admin"

    # Administration
    ADMIN_SYSTEM = "admin:system"
    ADMIN_USERS = "admin:users"
    ADMIN_REPORTS = "admin:reports"

    # Users
    USERS_READ = "users:read"
    USERS_CREATE = "users:create"
    USERS_UPDATE = "users:update"
    USERS_DELETE = "users:delete"
    USERS_LIST = "users:list"
    USERS_PROFILE = "users:profile"

    # Providers
    PROVIDERS_READ = "providers:read"
    PROVIDERS_CREATE = "providers:create"
    PROVIDERS_UPDATE = "providers:update"
    PROVIDERS_DELETE = "providers:delete"
    PROVIDERS_LIST = "providers:list"
    PROVIDERS_APPROVE = "providers:approve"

    # Documents
    DOCUMENTS_READ = "documents:read"
    DOCUMENTS_UPLOAD = "documents:upload"
    DOCUMENTS_VERIFY = "documents:verify"
    DOCUMENTS_DELETE = "documents:delete"

    # Service catalogs
    CATALOGS_READ = "catalogs:read"
    CATALOGS_CREATE = "catalogs:create"
    CATALOGS_UPDATE = "catalogs:update"
    CATALOGS_DELETE = "catalogs:delete"

    # Locations
    LOCATIONS_READ = "locations:read"
    LOCATIONS_CREATE = "locations:create"
    LOCATIONS_UPDATE = "locations:update"
    LOCATIONS_DELETE = "locations:delete"

    # Orders
    ORDERS_READ = "orders:read"
    ORDERS_CREATE = "orders:create"
    ORDERS_UPDATE = "orders:update"
    ORDERS_DELETE = "orders:delete"

    # Reports
    REPORTS_VIEW = "reports:view"
    REPORTS_EXPORT = "reports:export"
    REPORTS_CREATE = "reports:create"

    def __str__(self) -> str:
        return self.value


ADMIN_MODULE = "admin"

_BY_VALUE: Dict[str, Permission] = {
    permission.value: permission
    for permission in Permission
    if permission is not Permission.NONE
}

_BY_MODULE: Dict[str, FrozenSet[Permission]] = {}
for _permission in _BY_VALUE.values():
    _module = _permission.value.split(":", 1)[0]
    _BY_MODULE[_module] = _BY_MODULE.get(_module, frozenset()) | {_permission}
del _permission, _module


def encode(permission: Permission) -> str:
    """Return the canonical ``module:action`` string of a permission."""
    return Permission(permission).value


def decode(value: Optional[str]) -> Optional[Permission]:
    """Look a permission up by its encoded string.

    Matching ignores case and surrounding whitespace. Returns None for None,
    blank or unknown input, and for the encoding of ``Permission.NONE``.
    """
    if not isinstance(value, str):
        return None
    return _BY_VALUE.get(value.strip().lower())


def module_of(permission: Permission) -> str:
    """Return the lowercase module prefix of a permission."""
    return encode(permission).split(":", 1)[0]


def list_by_module(module: Optional[str]) -> FrozenSet[Permission]:
    """Return every permission of a module (case-insensitive, unknown -> empty)."""
    if not module or not module.strip():
        return frozenset()
    return _BY_MODULE.get(module.strip().lower(), frozenset())


def list_all_modules() -> List[str]:
    """Return all module names, sorted."""
    return sorted(_BY_MODULE)


def is_admin_permission(permission: Permission) -> bool:
    """Check whether a permission belongs to the admin module."""
    return permission is not Permission.NONE and module_of(permission) == ADMIN_MODULE
