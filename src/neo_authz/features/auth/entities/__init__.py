"""Auth entities."""

from .principal import Claim, ClaimsPrincipal

__all__ = ["Claim", "ClaimsPrincipal"]
