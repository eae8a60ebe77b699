"""One-shot materialization of permissions as principal claims."""

import logging
from typing import List, Optional

from ....config.constants import ClaimTypes, PERMISSIONS_PROCESSED_MARKER
from ...auth.entities.principal import Claim, ClaimsPrincipal
from ..entities.permission import ADMIN_MODULE, module_of
from .permission_service import PermissionService

logger = logging.getLogger(__name__)


class PermissionClaimsTransformation:
    """Adds permission, module and admin claims to an authenticated principal.

    Runs once per principal: an enriched principal carries a ``permission``
    claim with value ``"*"`` and is returned untouched on later calls. Any
    failure leaves the principal as it was, so authentication is never
    blocked by enrichment.
    """

    def __init__(self, permission_service: PermissionService):
        self._permission_service = permission_service

    async def transform(self, principal: Optional[ClaimsPrincipal]) -> Optional[ClaimsPrincipal]:
        if principal is None or not principal.is_authenticated:
            return principal

        if principal.has_claim(ClaimTypes.PERMISSION, PERMISSIONS_PROCESSED_MARKER):
            return principal

        user_id = principal.get_user_id()
        if not user_id:
            logger.warning("Authenticated principal has no user id claim; skipping permission enrichment")
            return principal

        try:
            permissions = await self._permission_service.get_user_permissions(user_id)
        except Exception as e:
            logger.error(f"Failed to enrich claims with permissions for user {user_id}: {e}")
            return principal

        if not permissions:
            logger.debug(f"No permissions found for user {user_id}")
            return principal

        claims: List[Claim] = [Claim(ClaimTypes.PERMISSION, p.value) for p in permissions]

        modules = sorted({module_of(p) for p in permissions})
        claims.extend(Claim(ClaimTypes.MODULE, module) for module in modules)
        claims.append(Claim(ClaimTypes.PERMISSION, PERMISSIONS_PROCESSED_MARKER))
        if ADMIN_MODULE in modules:
            claims.append(Claim(ClaimTypes.IS_SYSTEM_ADMIN, "true"))

        logger.debug(
            f"Added {len(permissions)} permission claims across {len(modules)} modules for user {user_id}"
        )
        return principal.with_claims(claims)
