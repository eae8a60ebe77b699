"""Principal types shared with the host's authentication layer."""

from .entities import Claim, ClaimsPrincipal

__all__ = ["Claim", "ClaimsPrincipal"]
