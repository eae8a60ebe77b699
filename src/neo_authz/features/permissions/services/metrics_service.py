"""In-process counters for the permission system.

The aggregation service feeds these counters on every check and every cache
access. The health probe only reads them through ``get_system_stats``.
"""

import logging
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, Iterator, Optional

from ..entities.permission import Permission, module_of
from ..entities.stats import PermissionSystemStats

logger = logging.getLogger(__name__)

SLOW_RESOLUTION_SECONDS = 1.0


class PermissionMetricsService:
    """Thread-safe counters and gauges for permission checks."""

    def __init__(self, slow_resolution_seconds: float = SLOW_RESOLUTION_SECONDS):
        self._lock = threading.Lock()
        self._slow_resolution_seconds = slow_resolution_seconds
        self._total_permission_checks = 0
        self._total_cache_hits = 0
        self._total_cache_misses = 0
        self._active_checks = 0
        self._authorization_failures = 0
        self._cache_invalidations = 0
        self._resolver_failures: Dict[str, int] = {}

    @contextmanager
    def measure_permission_check(self, user_id: str, operation: str = "check") -> Iterator[None]:
        """Count one permission query and track it as in flight until it exits."""
        with self._lock:
            self._total_permission_checks += 1
            self._active_checks += 1
        started = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - started
            with self._lock:
                self._active_checks -= 1
            if elapsed > self._slow_resolution_seconds:
                logger.warning(
                    f"Slow permission {operation}: {elapsed * 1000:.0f}ms for user {user_id}"
                )

    def record_cache_access(self, hit: bool) -> None:
        with self._lock:
            if hit:
                self._total_cache_hits += 1
            else:
                self._total_cache_misses += 1

    def record_resolver_failure(self, module_name: str) -> None:
        with self._lock:
            self._resolver_failures[module_name] = self._resolver_failures.get(module_name, 0) + 1

    def record_authorization_failure(self, user_id: Optional[str], permission: Permission, reason: str) -> None:
        with self._lock:
            self._authorization_failures += 1
        logger.warning(
            f"Authorization failure: user {user_id} denied {permission.value} "
            f"(module {module_of(permission)}): {reason}"
        )

    def record_cache_invalidation(self, user_id: str, reason: str) -> None:
        with self._lock:
            self._cache_invalidations += 1
        logger.debug(f"Permission cache invalidated for user {user_id}: {reason}")

    def get_system_stats(self) -> PermissionSystemStats:
        """Snapshot of the counters. Hit rate is hits over all cache accesses."""
        with self._lock:
            accesses = self._total_cache_hits + self._total_cache_misses
            return PermissionSystemStats(
                total_permission_checks=self._total_permission_checks,
                total_cache_hits=self._total_cache_hits,
                total_cache_misses=self._total_cache_misses,
                cache_hit_rate=(self._total_cache_hits / accesses) if accesses else 0.0,
                active_checks=self._active_checks,
                timestamp=datetime.now(timezone.utc),
            )

    def get_resolver_failures(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._resolver_failures)
