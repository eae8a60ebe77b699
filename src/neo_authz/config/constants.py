"""Constants and enums shared across neo-authz."""

from enum import Enum


class HealthStatus(str, Enum):
    """Overall verdict reported by health checks."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class CacheBackendType(str, Enum):
    """Supported tagged cache backends."""

    MEMORY = "memory"
    REDIS = "redis"


class ClaimTypes:
    """Claim type names understood by enrichment and the decision step."""

    NAME_IDENTIFIER = "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/nameidentifier"
    SUBJECT = "sub"
    ID = "id"

    PERMISSION = "permission"
    MODULE = "module"
    IS_SYSTEM_ADMIN = "is_system_admin"

    # Lookup order for the user id
    USER_ID_PRIORITY = (NAME_IDENTIFIER, SUBJECT, ID)


# Marker value of the permission claim added once a principal is enriched
PERMISSIONS_PROCESSED_MARKER = "*"

# Cache key prefixes and tags
PERMISSIONS_CACHE_KEY_PREFIX = "permissions"
ROLES_CACHE_KEY_PREFIX = "keycloak_roles"
PERMISSIONS_CACHE_TAG = "permissions"
USER_CACHE_TAG_PREFIX = "user"


def user_cache_tag(user_id: str) -> str:
    """Tag grouping every cache entry that belongs to one user."""
    return f"{USER_CACHE_TAG_PREFIX}:{user_id}"
