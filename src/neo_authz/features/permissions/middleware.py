"""ASGI middleware that materializes permissions on the request principal."""

import logging
from typing import Optional

from starlette.types import ASGIApp, Receive, Scope, Send

from .services import PermissionClaimsTransformation

logger = logging.getLogger(__name__)


class PermissionClaimsMiddleware:
    """Enrich ``request.state.principal`` once per request.

    Must sit inside the host's authentication middleware. Requests without a
    principal pass through untouched.
    """

    def __init__(self, app: ASGIApp, transformation: Optional[PermissionClaimsTransformation] = None):
        self.app = app
        self.transformation = transformation

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        state = scope.get("state")
        principal = state.get("principal") if state else None
        if principal is not None:
            transformation = self._get_transformation(scope)
            if transformation is not None:
                state["principal"] = await transformation.transform(principal)

        await self.app(scope, receive, send)

    def _get_transformation(self, scope: Scope) -> Optional[PermissionClaimsTransformation]:
        if self.transformation is not None:
            return self.transformation
        app = scope.get("app")
        system = getattr(getattr(app, "state", None), "permission_system", None)
        if system is None:
            logger.warning("Permission system not installed; principal left unenriched")
            return None
        return system.claims_transformation
