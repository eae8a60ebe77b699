"""Tests for the permission system health probe."""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from neo_authz.config.constants import HealthStatus
from neo_authz.config.settings import AuthzSettings
from neo_authz.core.exceptions import CacheConnectionError
from neo_authz.features.cache.adapters.memory_adapter import MemoryTaggedCache
from neo_authz.features.permissions.entities.permission import Permission
from neo_authz.features.permissions.entities.stats import PermissionSystemStats
from neo_authz.features.permissions.services.permission_service import PermissionService
from neo_authz.features.permissions.services.health_check import (
    PermissionSystemHealthCheck,
    status_from_issue_count,
)


@pytest.fixture
def probe_settings():
    return AuthzSettings(
        _env_file=None,
        health_check_user_id="probe-user",
        health_max_resolution_seconds=0.05,
    )


@pytest.fixture
def mock_service():
    service = MagicMock()
    service.get_user_permissions = AsyncMock(return_value=[])
    service.has_permission = AsyncMock(return_value=False)
    service.resolver_names = ["users", "orders"]
    service.cache.health_check = AsyncMock(return_value={"healthy": True, "backend": "memory"})
    return service


@pytest.fixture
def mock_metrics():
    metrics = MagicMock()
    metrics.get_system_stats.return_value = PermissionSystemStats(
        total_permission_checks=500,
        total_cache_hits=450,
        cache_hit_rate=0.9,
        active_checks=3,
    )
    return metrics


@pytest.fixture
def health_check(mock_service, mock_metrics, probe_settings):
    return PermissionSystemHealthCheck(mock_service, metrics=mock_metrics, settings=probe_settings)


def set_stats(metrics, **values):
    defaults = dict(total_permission_checks=500, cache_hit_rate=0.9, active_checks=3)
    defaults.update(values)
    metrics.get_system_stats.return_value = PermissionSystemStats(**defaults)


class TestIssueAggregation:

    @pytest.mark.parametrize(
        "count, expected",
        [(0, HealthStatus.HEALTHY), (1, HealthStatus.DEGRADED), (2, HealthStatus.UNHEALTHY), (5, HealthStatus.UNHEALTHY)],
    )
    def test_status_from_issue_count(self, count, expected):
        assert status_from_issue_count(count) == expected


class TestPermissionSystemHealthCheck:

    @pytest.mark.asyncio
    async def test_healthy(self, health_check, mock_service):
        result = await health_check.check_health()

        assert result.status == HealthStatus.HEALTHY
        assert result.is_healthy
        assert result.data["issues"] == []
        assert result.data["basic_functionality"] == "healthy"
        assert result.data["performance_metrics"] == "healthy"
        assert result.data["cache_health"] == "healthy"
        mock_service.get_user_permissions.assert_any_await("probe-user")
        mock_service.get_user_permissions.assert_any_await("cache-health-test")
        mock_service.has_permission.assert_awaited_once_with(
            "probe-user", Permission.USERS_READ, record_failure=False
        )

    @pytest.mark.asyncio
    async def test_data_contains_metrics_and_resolvers(self, health_check):
        result = await health_check.check_health()

        assert result.data["cache_hit_rate"] == 0.9
        assert result.data["active_checks"] == 3
        assert result.data["total_permission_checks"] == 500
        assert result.data["resolver_count"] == 2
        assert result.data["resolver_names"] == ["users", "orders"]
        assert result.data["module_resolvers"] == "healthy"

    @pytest.mark.asyncio
    async def test_low_hit_rate_is_degraded(self, health_check, mock_metrics):
        set_stats(mock_metrics, total_permission_checks=100, cache_hit_rate=0.65)

        result = await health_check.check_health()

        assert result.status == HealthStatus.DEGRADED
        assert len(result.data["issues"]) == 1
        assert "cache hit rate" in result.data["issues"][0]

    @pytest.mark.asyncio
    async def test_low_hit_rate_ignored_below_min_checks(self, health_check, mock_metrics):
        set_stats(mock_metrics, total_permission_checks=99, cache_hit_rate=0.1)

        result = await health_check.check_health()

        assert result.status == HealthStatus.HEALTHY

    @pytest.mark.asyncio
    async def test_too_many_active_checks_is_degraded(self, health_check, mock_metrics):
        set_stats(mock_metrics, active_checks=101)

        result = await health_check.check_health()

        assert result.status == HealthStatus.DEGRADED
        assert "active checks" in result.data["issues"][0]

    @pytest.mark.asyncio
    async def test_two_metric_issues_are_unhealthy(self, health_check, mock_metrics):
        set_stats(mock_metrics, cache_hit_rate=0.5, active_checks=150)

        result = await health_check.check_health()

        assert result.status == HealthStatus.UNHEALTHY
        assert len(result.data["issues"]) == 2

    @pytest.mark.asyncio
    async def test_slow_round_trip_and_low_hit_rate_are_unhealthy(self, health_check, mock_service, mock_metrics):
        async def slow(user_id):
            await asyncio.sleep(0.1)
            return []

        mock_service.get_user_permissions.side_effect = slow
        set_stats(mock_metrics, cache_hit_rate=0.65)

        result = await health_check.check_health()

        assert result.status == HealthStatus.UNHEALTHY
        assert result.data["basic_functionality"] == "slow"
        assert any("slow" in issue for issue in result.data["issues"])

    @pytest.mark.asyncio
    async def test_round_trip_failure_is_one_issue(self, health_check, mock_service):
        mock_service.has_permission.side_effect = RuntimeError("resolver exploded")

        result = await health_check.check_health()

        assert result.status == HealthStatus.DEGRADED
        assert result.data["basic_functionality"] == "failed"
        assert "basic functionality failed" in result.data["issues"][0]

    @pytest.mark.asyncio
    async def test_stats_failure_is_one_issue(self, health_check, mock_metrics):
        mock_metrics.get_system_stats.side_effect = RuntimeError("counter lock broken")

        result = await health_check.check_health()

        assert result.status == HealthStatus.DEGRADED
        assert result.data["performance_metrics"] == "error"
        assert result.data["cache_hit_rate"] is None
        assert result.data["issues"] == ["Performance: performance metrics unavailable: counter lock broken"]

    @pytest.mark.asyncio
    async def test_everything_failing_is_unhealthy(self, health_check, mock_service, mock_metrics):
        mock_service.get_user_permissions.side_effect = RuntimeError("down")
        mock_metrics.get_system_stats.side_effect = RuntimeError("down")

        result = await health_check.check_health()

        assert result.status == HealthStatus.UNHEALTHY
        assert result.data["cache_health"] == "failed"
        assert len(result.data["issues"]) == 3

    @pytest.mark.asyncio
    async def test_description_lists_issues(self, health_check, mock_metrics):
        set_stats(mock_metrics, active_checks=500)

        result = await health_check.check_health()

        assert result.description.startswith("Permission system is degraded: ")
        assert "too many active checks" in result.description

    @pytest.mark.asyncio
    async def test_no_resolvers_registered(self, health_check, mock_service):
        mock_service.resolver_names = []

        result = await health_check.check_health()

        assert result.data["resolver_count"] == 0
        assert result.data["module_resolvers"] == "none registered"

    @pytest.mark.asyncio
    async def test_to_dict(self, health_check):
        body = (await health_check.check_health()).to_dict()
        assert body["status"] == "healthy"
        assert set(body) == {"status", "description", "data"}

    @pytest.mark.asyncio
    async def test_against_real_service(self, permission_service, settings):
        probe = PermissionSystemHealthCheck(permission_service, settings=settings)

        result = await probe.check_health()

        assert result.status == HealthStatus.HEALTHY
        assert result.data["total_permission_checks"] == 2

    @pytest.mark.asyncio
    async def test_probe_denial_is_not_an_authorization_failure(self, permission_service, settings, caplog):
        probe = PermissionSystemHealthCheck(permission_service, settings=settings)

        with caplog.at_level("WARNING"):
            await probe.check_health()

        assert "Authorization failure" not in caplog.text


class TestCacheHealth:

    @pytest.mark.asyncio
    async def test_unhealthy_backend_is_one_issue(self, health_check, mock_service):
        mock_service.cache.health_check.return_value = {"healthy": False, "backend": "redis", "error": "redis down"}

        result = await health_check.check_health()

        assert result.status == HealthStatus.DEGRADED
        assert result.data["cache_health"] == "failed"
        assert result.data["issues"] == ["Cache: cache backend unavailable: redis down"]

    @pytest.mark.asyncio
    async def test_health_report_error_is_one_issue(self, health_check, mock_service):
        mock_service.cache.health_check.side_effect = RuntimeError("no reply")

        result = await health_check.check_health()

        assert result.status == HealthStatus.DEGRADED
        assert result.data["cache_health"] == "failed"
        assert "cache health check failed" in result.data["issues"][0]

    @pytest.mark.asyncio
    async def test_slow_cache_is_one_issue(self, mock_service, mock_metrics):
        settings = AuthzSettings(_env_file=None, health_check_user_id="probe-user", health_max_cache_seconds=0.05)

        async def slow_for_cache_user(user_id):
            if user_id == "cache-health-test":
                await asyncio.sleep(0.05)
            return []

        mock_service.get_user_permissions.side_effect = slow_for_cache_user
        probe = PermissionSystemHealthCheck(mock_service, metrics=mock_metrics, settings=settings)

        result = await probe.check_health()

        assert result.status == HealthStatus.DEGRADED
        assert result.data["basic_functionality"] == "healthy"
        assert result.data["cache_health"] == "slow"
        assert "took too long" in result.data["issues"][0]

    @pytest.mark.asyncio
    async def test_dead_cache_is_visible_despite_resolution_fallback(self, users_resolver, metrics, settings):
        class DeadCache(MemoryTaggedCache):
            async def get_or_create(self, key, factory, ttl=None, tags=None):
                raise CacheConnectionError("redis down")

            async def health_check(self):
                return {"healthy": False, "backend": "redis", "error": "redis down"}

        service = PermissionService(DeadCache(), [users_resolver], metrics=metrics, settings=settings)
        probe = PermissionSystemHealthCheck(service, settings=settings)

        result = await probe.check_health()

        assert result.data["basic_functionality"] == "healthy"
        assert result.data["cache_health"] == "failed"
        assert result.status == HealthStatus.DEGRADED

    @pytest.mark.asyncio
    async def test_explicit_cache_overrides_service_cache(self, mock_service, mock_metrics, probe_settings):
        cache = MagicMock()
        cache.health_check = AsyncMock(return_value={"healthy": True})

        probe = PermissionSystemHealthCheck(mock_service, metrics=mock_metrics, settings=probe_settings, cache=cache)
        await probe.check_health()

        cache.health_check.assert_awaited_once()
        mock_service.cache.health_check.assert_not_called()
