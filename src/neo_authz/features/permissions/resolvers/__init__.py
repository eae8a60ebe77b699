"""Module permission resolvers."""

from .keycloak_role_source import KeycloakRoleSource
from .role_mapping import (
    ROLE_PERMISSIONS,
    RoleMappingPermissionResolver,
    map_role_to_permissions,
    mask_user_id,
)
from .static import StaticPermissionResolver

__all__ = [
    "KeycloakRoleSource",
    "ROLE_PERMISSIONS",
    "RoleMappingPermissionResolver",
    "map_role_to_permissions",
    "mask_user_id",
    "StaticPermissionResolver",
]
