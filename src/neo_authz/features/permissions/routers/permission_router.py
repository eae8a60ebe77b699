"""Operational endpoints of the permission system."""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ....config.constants import HealthStatus
from ..dependencies import RequirePermission, get_permission_health_check, get_permission_service
from ..entities.permission import Permission, module_of
from ..services import PermissionService, PermissionSystemHealthCheck


class UserPermissionsResponse(BaseModel):
    user_id: str
    permissions: List[str]
    modules: List[str]


permission_router = APIRouter(tags=["Permissions"])


@permission_router.get(
    "/health/permissions",
    summary="Permission system health",
    responses={503: {"description": "Permission system is unhealthy"}}
)
async def permission_health(
    health_check: PermissionSystemHealthCheck = Depends(get_permission_health_check)
) -> JSONResponse:
    result = await health_check.check_health()
    status_code = (
        status.HTTP_503_SERVICE_UNAVAILABLE
        if result.status == HealthStatus.UNHEALTHY
        else status.HTTP_200_OK
    )
    return JSONResponse(status_code=status_code, content=result.to_dict())


@permission_router.get(
    "/permissions/users/{user_id}",
    response_model=UserPermissionsResponse,
    dependencies=[Depends(RequirePermission(Permission.ADMIN_USERS))],
    summary="Resolved permissions of a user"
)
async def get_user_permissions(
    user_id: str,
    service: PermissionService = Depends(get_permission_service)
) -> UserPermissionsResponse:
    permissions = await service.get_user_permissions(user_id)
    return UserPermissionsResponse(
        user_id=user_id,
        permissions=[p.value for p in permissions],
        modules=sorted({module_of(p) for p in permissions}),
    )


@permission_router.post(
    "/permissions/users/{user_id}/invalidate",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(RequirePermission(Permission.ADMIN_USERS))],
    summary="Force a permission refresh for a user"
)
async def invalidate_user_permissions(
    user_id: str,
    service: PermissionService = Depends(get_permission_service)
) -> Response:
    await service.invalidate_user_permissions_cache(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
