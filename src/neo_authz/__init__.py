"""neo-authz: permission resolution and enforcement for NeoMultiTenant services."""

from .__version__ import __version__
from .config import ClaimTypes, HealthStatus, get_settings, setup_logging
from .core.exceptions import NeoAuthzError
from .core.value_objects import UserId
from .features.auth import Claim, ClaimsPrincipal
from .features.cache import MemoryTaggedCache, RedisTaggedCache, TaggedCache
from .features.permissions import (
    Permission,
    PermissionClaimsTransformation,
    PermissionRequirement,
    PermissionRequirementHandler,
    PermissionService,
    PermissionSystemHealthCheck,
    build_permission_system,
    install_permission_system,
)

__all__ = [
    "__version__",
    "ClaimTypes",
    "HealthStatus",
    "get_settings",
    "setup_logging",
    "NeoAuthzError",
    "UserId",
    "Claim",
    "ClaimsPrincipal",
    "MemoryTaggedCache",
    "RedisTaggedCache",
    "TaggedCache",
    "Permission",
    "PermissionClaimsTransformation",
    "PermissionRequirement",
    "PermissionRequirementHandler",
    "PermissionService",
    "PermissionSystemHealthCheck",
    "build_permission_system",
    "install_permission_system",
]
