"""Permission resolution and enforcement feature.

Module resolvers feed the aggregation service, claims enrichment copies the
result onto the principal once per request, and the requirement handler
decides access from those claims alone.
"""

from .entities import (
    ModulePermissionResolver,
    Permission,
    PermissionRequirement,
    PermissionSystemStats,
    RoleSource,
    decode,
    encode,
    is_admin_permission,
    list_all_modules,
    list_by_module,
    module_of,
)
from .factory import PermissionSystem, build_permission_system, install_permission_system
from .resolvers import KeycloakRoleSource, RoleMappingPermissionResolver, StaticPermissionResolver
from .services import (
    AuthorizationResult,
    HealthCheckResult,
    PermissionClaimsTransformation,
    PermissionMetricsService,
    PermissionRequirementHandler,
    PermissionService,
    PermissionSystemHealthCheck,
)

__all__ = [
    "ModulePermissionResolver",
    "Permission",
    "PermissionRequirement",
    "PermissionSystemStats",
    "RoleSource",
    "decode",
    "encode",
    "is_admin_permission",
    "list_all_modules",
    "list_by_module",
    "module_of",
    "PermissionSystem",
    "build_permission_system",
    "install_permission_system",
    "KeycloakRoleSource",
    "RoleMappingPermissionResolver",
    "StaticPermissionResolver",
    "AuthorizationResult",
    "HealthCheckResult",
    "PermissionClaimsTransformation",
    "PermissionMetricsService",
    "PermissionRequirementHandler",
    "PermissionService",
    "PermissionSystemHealthCheck",
]
