"""HTTP status code mapping for exceptions."""

from .auth import AuthorizationError, PermissionDeniedError
from .base import NeoAuthzError
from .infrastructure import (
    CacheConnectionError,
    CacheError,
    CacheSerializationError,
    ConfigurationError,
    KeycloakConnectionError,
)


HTTP_STATUS_MAP = {
    # 403 Forbidden
    AuthorizationError: 403,
    PermissionDeniedError: 403,

    # 500 Internal Server Error
    CacheError: 500,
    CacheSerializationError: 500,
    ConfigurationError: 500,

    # 503 Service Unavailable
    CacheConnectionError: 503,
    KeycloakConnectionError: 503,

    # Default for NeoAuthzError
    NeoAuthzError: 500,
}


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for exception, walking the class hierarchy.

    Args:
        exception: The exception instance

    Returns:
        HTTP status code, 500 when nothing in the hierarchy is mapped
    """
    for exception_type in type(exception).__mro__:
        if exception_type in HTTP_STATUS_MAP:
            return HTTP_STATUS_MAP[exception_type]
    return 500
