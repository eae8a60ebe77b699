"""FastAPI dependencies for the permission system."""

import logging

from fastapi import HTTPException, Request, status

from ...core.exceptions import ConfigurationError
from ..auth.entities.principal import ClaimsPrincipal
from .entities.permission import Permission
from .entities.requirement import PermissionRequirement
from .services import PermissionRequirementHandler, PermissionService, PermissionSystemHealthCheck

logger = logging.getLogger(__name__)

_default_handler = PermissionRequirementHandler()


def get_permission_system(request: Request):
    system = getattr(request.app.state, "permission_system", None)
    if system is None:
        raise ConfigurationError("Permission system is not installed on this application")
    return system


def get_permission_service(request: Request) -> PermissionService:
    return get_permission_system(request).service


def get_permission_health_check(request: Request) -> PermissionSystemHealthCheck:
    return get_permission_system(request).health_check


def get_current_principal(request: Request) -> ClaimsPrincipal:
    """Principal left on the request by authentication and claims enrichment."""
    principal = getattr(request.state, "principal", None)
    return principal if principal is not None else ClaimsPrincipal.anonymous()


class RequirePermission:
    """Dependency that rejects callers missing a permission claim.

    Usage::

        @router.delete("/users/{id}", dependencies=[Depends(RequirePermission(Permission.USERS_DELETE))])
    """

    def __init__(self, permission: Permission):
        self.requirement = PermissionRequirement(permission)

    def __call__(self, request: Request) -> ClaimsPrincipal:
        principal = get_current_principal(request)
        system = getattr(request.app.state, "permission_system", None)
        handler = system.requirement_handler if system is not None else _default_handler

        result = handler.handle(principal, self.requirement)
        if result.failed:
            if system is not None:
                system.metrics.record_authorization_failure(
                    principal.get_user_id(), self.requirement.permission, result.reason or "denied"
                )
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return principal
