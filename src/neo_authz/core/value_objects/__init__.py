"""Value objects for neo-authz."""

from .identifiers import UserId

__all__ = ["UserId"]
