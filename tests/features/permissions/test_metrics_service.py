"""Tests for PermissionMetricsService."""

import logging

import pytest

from neo_authz.features.permissions.entities.permission import Permission
from neo_authz.features.permissions.services.metrics_service import PermissionMetricsService


class TestPermissionMetricsService:

    def test_empty_stats(self, metrics):
        stats = metrics.get_system_stats()

        assert stats.total_permission_checks == 0
        assert stats.cache_hit_rate == 0.0
        assert stats.active_checks == 0

    def test_active_checks_tracked_while_in_flight(self, metrics):
        with metrics.measure_permission_check("u1"):
            assert metrics.get_system_stats().active_checks == 1

        stats = metrics.get_system_stats()
        assert stats.active_checks == 0
        assert stats.total_permission_checks == 1

    def test_active_checks_released_on_error(self, metrics):
        with pytest.raises(RuntimeError):
            with metrics.measure_permission_check("u1"):
                raise RuntimeError("boom")

        assert metrics.get_system_stats().active_checks == 0

    def test_hit_rate_counts_cache_accesses(self, metrics):
        for hit in (True, True, True, False):
            metrics.record_cache_access(hit)

        stats = metrics.get_system_stats()
        assert stats.total_cache_hits == 3
        assert stats.total_cache_misses == 1
        assert stats.cache_hit_rate == 0.75

    def test_resolver_failures_by_module(self, metrics):
        metrics.record_resolver_failure("users")
        metrics.record_resolver_failure("users")
        metrics.record_resolver_failure("orders")

        assert metrics.get_resolver_failures() == {"users": 2, "orders": 1}

    def test_slow_check_warns(self, caplog):
        metrics = PermissionMetricsService(slow_resolution_seconds=-1)

        with caplog.at_level(logging.WARNING):
            with metrics.measure_permission_check("u1", "resolution"):
                pass

        assert "Slow permission resolution" in caplog.text

    def test_authorization_failure_logged(self, metrics, caplog):
        with caplog.at_level(logging.WARNING):
            metrics.record_authorization_failure("u1", Permission.USERS_DELETE, "Missing permission")

        assert "users:delete" in caplog.text

    def test_stats_to_dict(self, metrics):
        data = metrics.get_system_stats().to_dict()

        assert set(data) == {
            "total_permission_checks",
            "total_cache_hits",
            "total_cache_misses",
            "cache_hit_rate",
            "active_checks",
            "timestamp",
        }
        assert isinstance(data["timestamp"], str)
