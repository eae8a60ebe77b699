"""Permission services."""

from .claims_enrichment import PermissionClaimsTransformation
from .health_check import HealthCheckResult, PermissionSystemHealthCheck
from .metrics_service import PermissionMetricsService
from .permission_service import PermissionService
from .requirement_handler import AuthorizationResult, PermissionRequirementHandler

__all__ = [
    "PermissionClaimsTransformation",
    "HealthCheckResult",
    "PermissionSystemHealthCheck",
    "PermissionMetricsService",
    "PermissionService",
    "AuthorizationResult",
    "PermissionRequirementHandler",
]
