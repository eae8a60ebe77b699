"""Permission routers."""

from .permission_router import permission_router

__all__ = ["permission_router"]
