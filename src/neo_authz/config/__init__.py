"""Configuration for neo-authz."""

from .constants import (
    CacheBackendType,
    ClaimTypes,
    HealthStatus,
    PERMISSIONS_PROCESSED_MARKER,
    user_cache_tag,
)
from .logging_config import LoggingConfig, setup_logging
from .settings import AuthzSettings, KeycloakSettings, get_keycloak_settings, get_settings

__all__ = [
    "CacheBackendType",
    "ClaimTypes",
    "HealthStatus",
    "PERMISSIONS_PROCESSED_MARKER",
    "user_cache_tag",
    "LoggingConfig",
    "setup_logging",
    "AuthzSettings",
    "KeycloakSettings",
    "get_keycloak_settings",
    "get_settings",
]
