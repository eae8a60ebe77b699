"""Claims-bearing principal supplied by the host's authentication layer.

The principal is immutable: enrichment builds a new instance with the extra
claims appended instead of mutating the one it was given.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Tuple

from ....config.constants import ClaimTypes


@dataclass(frozen=True)
class Claim:
    """A single ``(type, value)`` statement about a principal."""

    type: str
    value: str


@dataclass(frozen=True)
class ClaimsPrincipal:
    """Authenticated (or anonymous) caller and the claims it carries."""

    claims: Tuple[Claim, ...] = field(default_factory=tuple)
    authentication_type: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.claims, tuple):
            object.__setattr__(self, "claims", tuple(self.claims))

    @classmethod
    def anonymous(cls) -> "ClaimsPrincipal":
        return cls()

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[Tuple[str, str]],
        authentication_type: Optional[str] = "Bearer"
    ) -> "ClaimsPrincipal":
        """Build a principal from ``(type, value)`` pairs."""
        return cls(
            claims=tuple(Claim(claim_type, value) for claim_type, value in pairs),
            authentication_type=authentication_type,
        )

    @property
    def is_authenticated(self) -> bool:
        return bool(self.authentication_type)

    def find_first(self, claim_type: str) -> Optional[str]:
        """Value of the first claim of the given type, if any."""
        for claim in self.claims:
            if claim.type == claim_type:
                return claim.value
        return None

    def find_all(self, claim_type: str) -> List[str]:
        return [claim.value for claim in self.claims if claim.type == claim_type]

    def has_claim(self, claim_type: str, value: str) -> bool:
        return any(claim.type == claim_type and claim.value == value for claim in self.claims)

    def get_user_id(self) -> Optional[str]:
        """User id from the name identifier, ``sub`` or ``id`` claim, in that order."""
        for claim_type in ClaimTypes.USER_ID_PRIORITY:
            value = self.find_first(claim_type)
            if value and value.strip():
                return value.strip()
        return None

    def with_claims(self, claims: Iterable[Claim]) -> "ClaimsPrincipal":
        """Return a copy with the given claims appended."""
        return replace(self, claims=self.claims + tuple(claims))
