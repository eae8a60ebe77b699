"""Self-monitoring health probe for the permission system.

The probe runs a resolution round trip for a synthetic user, inspects the
live metrics and exercises the cache. Every problem found becomes one issue: no issues is healthy,
one is degraded, two or more is unhealthy.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ....config.constants import HealthStatus
from ....config.settings import AuthzSettings, get_settings
from ...cache.entities.protocols import TaggedCache
from ..entities.permission import Permission
from .metrics_service import PermissionMetricsService
from .permission_service import PermissionService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HealthCheckResult:
    """Outcome of one probe run."""

    status: HealthStatus
    description: str
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status.value, "description": self.description, "data": self.data}


def status_from_issue_count(issue_count: int) -> HealthStatus:
    if issue_count == 0:
        return HealthStatus.HEALTHY
    if issue_count == 1:
        return HealthStatus.DEGRADED
    return HealthStatus.UNHEALTHY


class PermissionSystemHealthCheck:
    """Checks that permission resolution works and performs within limits."""

    PROBE_PERMISSION = Permission.USERS_READ

    def __init__(
        self,
        permission_service: PermissionService,
        metrics: Optional[PermissionMetricsService] = None,
        settings: Optional[AuthzSettings] = None,
        cache: Optional[TaggedCache] = None
    ):
        settings = settings or get_settings()
        self._service = permission_service
        self._metrics = metrics or permission_service.metrics
        self._cache = cache if cache is not None else permission_service.cache
        self._cache_probe_user_id = settings.health_cache_check_user_id
        self._max_cache_seconds = settings.health_max_cache_seconds
        self._probe_user_id = settings.health_check_user_id
        self._max_resolution_seconds = settings.health_max_resolution_seconds
        self._min_cache_hit_rate = settings.health_min_cache_hit_rate
        self._min_checks_for_hit_rate = settings.health_min_checks_for_hit_rate
        self._max_active_checks = settings.health_max_active_checks

    async def check_health(self) -> HealthCheckResult:
        data: Dict[str, Any] = {}
        issues: List[str] = []

        basic_status, basic_issue = await self._check_basic_functionality()
        data["basic_functionality"] = basic_status
        if basic_issue:
            issues.append(f"Basic functionality: {basic_issue}")

        performance_status, performance_issues = self._check_performance_metrics(data)
        data["performance_metrics"] = performance_status
        issues.extend(f"Performance: {issue}" for issue in performance_issues)

        cache_status, cache_issue = await self._check_cache()
        data["cache_health"] = cache_status
        if cache_issue:
            issues.append(f"Cache: {cache_issue}")

        resolver_names = self._service.resolver_names
        data["module_resolvers"] = "healthy" if resolver_names else "none registered"
        data["resolver_count"] = len(resolver_names)
        data["resolver_names"] = list(resolver_names)
        data["issues"] = list(issues)

        status = status_from_issue_count(len(issues))
        if status == HealthStatus.HEALTHY:
            description = "Permission system is operating normally"
        else:
            description = f"Permission system is {status.value}: {'; '.join(issues)}"
            logger.warning(description)

        return HealthCheckResult(status=status, description=description, data=data)

    async def _check_basic_functionality(self):
        """Round trip for the probe user. Returns ``(status, issue or None)``."""
        started = time.perf_counter()
        try:
            await self._service.get_user_permissions(self._probe_user_id)
            # Only that the check completes matters, not its answer
            await self._service.has_permission(
                self._probe_user_id, self.PROBE_PERMISSION, record_failure=False
            )
        except Exception as e:
            logger.error(f"Permission health check round trip failed: {e}")
            return "failed", f"basic functionality failed: {e}"

        elapsed = time.perf_counter() - started
        if elapsed > self._max_resolution_seconds:
            return "slow", (
                f"slow permission resolution: {elapsed:.2f}s "
                f"(max: {self._max_resolution_seconds}s)"
            )
        return "healthy", None

    def _check_performance_metrics(self, data: Dict[str, Any]):
        """Inspect the stats snapshot. Returns ``(status, issues)``."""
        try:
            stats = self._metrics.get_system_stats()
        except Exception as e:
            logger.error(f"Permission metrics unavailable: {e}")
            data["cache_hit_rate"] = None
            data["active_checks"] = None
            data["total_permission_checks"] = None
            return "error", [f"performance metrics unavailable: {e}"]

        data["cache_hit_rate"] = stats.cache_hit_rate
        data["active_checks"] = stats.active_checks
        data["total_permission_checks"] = stats.total_permission_checks

        issues = []
        if (
            stats.total_permission_checks >= self._min_checks_for_hit_rate
            and stats.cache_hit_rate < self._min_cache_hit_rate
        ):
            issues.append(
                f"low cache hit rate: {stats.cache_hit_rate:.1%} (min: {self._min_cache_hit_rate:.1%})"
            )
        if stats.active_checks > self._max_active_checks:
            issues.append(f"too many active checks: {stats.active_checks} (max: {self._max_active_checks})")

        return ("degraded" if issues else "healthy"), issues

    async def _check_cache(self):
        """Backend health plus a timed miss-then-hit pair. Returns ``(status, issue or None)``."""
        try:
            backend = await self._cache.health_check()
            if not backend.get("healthy"):
                reason = backend.get("error") or "backend reported unhealthy"
                logger.error(f"Permission cache backend unhealthy: {reason}")
                return "failed", f"cache backend unavailable: {reason}"

            started = time.perf_counter()
            await self._service.get_user_permissions(self._cache_probe_user_id)
            await self._service.get_user_permissions(self._cache_probe_user_id)
            elapsed = time.perf_counter() - started
        except Exception as e:
            logger.error(f"Permission cache health check failed: {e}")
            return "failed", f"cache health check failed: {e}"

        if elapsed > self._max_cache_seconds:
            return "slow", (
                f"cache operations took too long: {elapsed:.2f}s "
                f"(max: {self._max_cache_seconds}s)"
            )
        return "healthy", None
