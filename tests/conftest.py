"""Pytest configuration and fixtures for neo-authz tests."""

import pytest
from uuid import uuid4

from neo_authz.config.constants import ClaimTypes
from neo_authz.config.settings import AuthzSettings
from neo_authz.features.auth.entities.principal import ClaimsPrincipal
from neo_authz.features.cache.adapters.memory_adapter import MemoryTaggedCache
from neo_authz.features.permissions.entities.permission import Permission
from neo_authz.features.permissions.services.metrics_service import PermissionMetricsService
from neo_authz.features.permissions.services.permission_service import PermissionService


class RecordingResolver:
    """Module resolver returning fixed grants and counting calls."""

    def __init__(self, module_name, grants=None, error=None):
        self.module_name = module_name
        self.grants = dict(grants or {})
        self.error = error
        self.calls = []

    def can_resolve(self, permission):
        return permission.value.startswith(f"{self.module_name}:")

    async def resolve_permissions(self, user_id):
        self.calls.append(str(user_id))
        if self.error is not None:
            raise self.error
        return list(self.grants.get(str(user_id), []))


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return AuthzSettings(
        _env_file=None,
        permission_cache_ttl=1800,
        role_cache_ttl=900,
        resolver_concurrency=4,
        health_check_user_id="health-probe-user",
    )


@pytest.fixture
def cache():
    return MemoryTaggedCache()


@pytest.fixture
def metrics():
    return PermissionMetricsService()


@pytest.fixture
def user_id():
    return str(uuid4())


@pytest.fixture
def users_resolver(user_id):
    return RecordingResolver(
        "users",
        {user_id: [Permission.USERS_READ, Permission.USERS_UPDATE]},
    )


@pytest.fixture
def admin_resolver(user_id):
    return RecordingResolver(
        "admin",
        {user_id: [Permission.ADMIN_USERS, Permission.USERS_READ]},
    )


@pytest.fixture
def permission_service(cache, metrics, settings, users_resolver, admin_resolver):
    return PermissionService(
        cache,
        [users_resolver, admin_resolver],
        metrics=metrics,
        settings=settings,
    )


@pytest.fixture
def make_principal():
    """Build an authenticated principal from claim pairs."""
    def _make(*pairs, authentication_type="Bearer"):
        return ClaimsPrincipal.from_pairs(pairs, authentication_type=authentication_type)
    return _make


@pytest.fixture
def authenticated_principal(make_principal, user_id):
    return make_principal((ClaimTypes.SUBJECT, user_id), ("email", "ana@example.com"))


@pytest.fixture
def make_resolver():
    """Factory for ``RecordingResolver`` instances."""
    return RecordingResolver
