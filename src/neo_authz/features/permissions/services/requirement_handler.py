"""Synchronous authorization decision against materialized claims."""

import logging
from dataclasses import dataclass
from typing import Optional

from ....config.constants import ClaimTypes
from ...auth.entities.principal import ClaimsPrincipal
from ..entities.requirement import PermissionRequirement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorizationResult:
    succeeded: bool
    reason: Optional[str] = None

    @property
    def failed(self) -> bool:
        return not self.succeeded

    @classmethod
    def success(cls) -> "AuthorizationResult":
        return cls(succeeded=True)

    @classmethod
    def failure(cls, reason: str) -> "AuthorizationResult":
        return cls(succeeded=False, reason=reason)


class PermissionRequirementHandler:
    """Decides a requirement from the claims already on the principal.

    Never performs I/O: enrichment must have run before this is called.
    """

    def handle(
        self,
        principal: Optional[ClaimsPrincipal],
        requirement: PermissionRequirement
    ) -> AuthorizationResult:
        if principal is None or not principal.is_authenticated:
            return AuthorizationResult.failure("User not authenticated")

        user_id = principal.get_user_id()
        if not user_id:
            logger.warning(f"Authenticated principal without user id cannot be checked for {requirement.value}")
            return AuthorizationResult.failure("User id not found in claims")

        if principal.has_claim(ClaimTypes.PERMISSION, requirement.value):
            logger.debug(f"Permission {requirement.value} granted to user {user_id}")
            return AuthorizationResult.success()

        logger.debug(f"Permission {requirement.value} denied to user {user_id}")
        return AuthorizationResult.failure(f"Missing permission {requirement.value}")
