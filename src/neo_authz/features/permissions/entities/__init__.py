"""Permission entities."""

from .permission import (
    Permission,
    decode,
    encode,
    is_admin_permission,
    list_all_modules,
    list_by_module,
    module_of,
)
from .protocols import ModulePermissionResolver, RoleSource
from .requirement import PermissionRequirement
from .stats import PermissionSystemStats

__all__ = [
    "Permission",
    "decode",
    "encode",
    "is_admin_permission",
    "list_all_modules",
    "list_by_module",
    "module_of",
    "ModulePermissionResolver",
    "RoleSource",
    "PermissionRequirement",
    "PermissionSystemStats",
]
