"""Exception hierarchy for neo-authz."""

from .base import NeoAuthzError, create_error_response, get_http_status_code
from .auth import AuthorizationError, PermissionDeniedError
from .infrastructure import (
    CacheConnectionError,
    CacheError,
    CacheSerializationError,
    ConfigurationError,
    KeycloakConnectionError,
)
from .http_mapping import HTTP_STATUS_MAP

__all__ = [
    "NeoAuthzError",
    "create_error_response",
    "get_http_status_code",
    "AuthorizationError",
    "PermissionDeniedError",
    "CacheError",
    "CacheConnectionError",
    "CacheSerializationError",
    "ConfigurationError",
    "KeycloakConnectionError",
    "HTTP_STATUS_MAP",
]
