"""Authorization and permission resolution exceptions."""

from .base import NeoAuthzError


class AuthorizationError(NeoAuthzError):
    """Base class for authorization failures."""
    pass


class PermissionDeniedError(AuthorizationError):
    """Raised when a principal lacks a required permission."""
    pass
