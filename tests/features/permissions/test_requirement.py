"""Tests for PermissionRequirement."""

import pytest

from neo_authz.features.permissions.entities.permission import Permission
from neo_authz.features.permissions.entities.requirement import PermissionRequirement


class TestPermissionRequirement:

    def test_exposes_canonical_value(self):
        requirement = PermissionRequirement(Permission.USERS_READ)
        assert requirement.value == "users:read"
        assert str(requirement) == "users:read"

    def test_none_is_rejected(self):
        with pytest.raises(ValueError, match="got None"):
            PermissionRequirement(None)

    def test_none_permission_is_rejected(self):
        with pytest.raises(ValueError, match="Permission.NONE"):
            PermissionRequirement(Permission.NONE)

    @pytest.mark.parametrize("value", ["users:read", "", 7])
    def test_non_permission_values_are_rejected(self, value):
        with pytest.raises(ValueError, match="Permission member"):
            PermissionRequirement(value)

    def test_is_immutable(self):
        requirement = PermissionRequirement(Permission.USERS_READ)
        with pytest.raises(AttributeError):
            requirement.permission = Permission.USERS_DELETE

    def test_equal_requirements_compare_equal(self):
        assert PermissionRequirement(Permission.ORDERS_READ) == PermissionRequirement(Permission.ORDERS_READ)
