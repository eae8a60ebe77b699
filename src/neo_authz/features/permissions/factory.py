"""Assembly of the permission system and its FastAPI installation."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ...config.settings import AuthzSettings, KeycloakSettings, get_keycloak_settings, get_settings
from ...core.exceptions import NeoAuthzError, create_error_response, get_http_status_code
from ..cache import TaggedCache, create_tagged_cache
from .entities.protocols import ModulePermissionResolver
from .middleware import PermissionClaimsMiddleware
from .resolvers import KeycloakRoleSource, RoleMappingPermissionResolver
from .routers import permission_router
from .services import (
    PermissionClaimsTransformation,
    PermissionMetricsService,
    PermissionRequirementHandler,
    PermissionService,
    PermissionSystemHealthCheck,
)

logger = logging.getLogger(__name__)


@dataclass
class PermissionSystem:
    """Every collaborator of the permission core, built once per process."""

    cache: TaggedCache
    service: PermissionService
    metrics: PermissionMetricsService
    claims_transformation: PermissionClaimsTransformation
    requirement_handler: PermissionRequirementHandler
    health_check: PermissionSystemHealthCheck
    resolvers: List[ModulePermissionResolver] = field(default_factory=list)


def build_permission_system(
    resolvers: Iterable[ModulePermissionResolver] = (),
    cache: Optional[TaggedCache] = None,
    settings: Optional[AuthzSettings] = None,
    keycloak_settings: Optional[KeycloakSettings] = None
) -> PermissionSystem:
    """Wire the permission core.

    When Keycloak is enabled a role-mapping resolver backed by the realm is
    registered ahead of the given resolvers.
    """
    settings = settings or get_settings()
    keycloak_settings = keycloak_settings or get_keycloak_settings()
    cache = cache or create_tagged_cache(settings)

    all_resolvers: List[ModulePermissionResolver] = []
    if keycloak_settings.enabled:
        role_source = KeycloakRoleSource(keycloak_settings)
        all_resolvers.append(RoleMappingPermissionResolver(role_source, cache=cache, settings=settings))
    all_resolvers.extend(resolvers)

    metrics = PermissionMetricsService()
    service = PermissionService(cache, all_resolvers, metrics=metrics, settings=settings)
    logger.info(f"Permission system built with resolvers: {', '.join(service.resolver_names) or 'none'}")

    return PermissionSystem(
        cache=cache,
        service=service,
        metrics=metrics,
        claims_transformation=PermissionClaimsTransformation(service),
        requirement_handler=PermissionRequirementHandler(),
        health_check=PermissionSystemHealthCheck(service, metrics=metrics, settings=settings, cache=cache),
        resolvers=all_resolvers,
    )


def install_permission_system(app: FastAPI, system: PermissionSystem, include_router: bool = True) -> None:
    """Attach the permission system to an application.

    Registers the claims middleware, the error handler for neo-authz
    exceptions and, optionally, the permission router. The host's
    authentication middleware must be added after this call so that it runs
    first and sets ``request.state.principal``.
    """
    app.state.permission_system = system
    app.add_middleware(PermissionClaimsMiddleware)

    @app.exception_handler(NeoAuthzError)
    async def neo_authz_exception_handler(request: Request, exc: NeoAuthzError):
        status_code = get_http_status_code(exc)
        if status_code == 403:
            return JSONResponse(status_code=403, content={"detail": "Forbidden"})
        return JSONResponse(status_code=status_code, content=create_error_response(exc))

    if include_router:
        app.include_router(permission_router)
