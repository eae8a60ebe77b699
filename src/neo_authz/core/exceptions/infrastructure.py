"""Infrastructure exceptions for neo-authz.

Errors raised by the cache backends and the identity provider client.
"""

from .base import NeoAuthzError


# Cache Errors
class CacheError(NeoAuthzError):
    """Base class for cache-related errors."""
    pass


class CacheConnectionError(CacheError):
    """Raised when cache connection fails."""
    pass


class CacheSerializationError(CacheError):
    """Raised when a cached value cannot be encoded or decoded."""
    pass


# Keycloak Errors
class KeycloakConnectionError(NeoAuthzError):
    """Raised when Keycloak cannot be reached or rejects the admin client."""
    pass


# Configuration Errors
class ConfigurationError(NeoAuthzError):
    """Raised when settings are missing or invalid."""
    pass
