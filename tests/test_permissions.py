"""Tests for the role to permission table."""

from app.core.permissions import (
    WILDCARD,
    has_all_permissions,
    has_any_role,
    permissions_for_role,
    role_grants,
)


class TestRolePermissions:
    def test_admin_holds_wildcard(self):
        assert permissions_for_role("admin") == frozenset({WILDCARD})
        assert role_grants("admin", "anything:delete")

    def test_manager_manages_users_but_cannot_delete_them(self):
        assert role_grants("manager", "users:create")
        assert role_grants("manager", "locations:delete")
        assert not role_grants("manager", "users:delete")

    def test_user_is_read_mostly(self):
        assert role_grants("user", "operations:update")
        assert role_grants("user", "integration-jobs:read")
        assert not role_grants("user", "locations:create")
        assert not role_grants("user", "users:read")

    def test_unknown_role_gets_nothing(self):
        assert permissions_for_role("guest") == frozenset()
        assert not role_grants("guest", "operations:read")


class TestChecks:
    def test_all_permissions_required(self):
        granted = ["users:read", "users:create"]
        assert has_all_permissions(granted, ["users:read"])
        assert not has_all_permissions(granted, ["users:read", "users:delete"])

    def test_empty_requirement_is_satisfied(self):
        assert has_all_permissions([], [])

    def test_any_role_suffices(self):
        assert has_any_role(["manager"], ["admin", "manager"])
        assert not has_any_role(["user"], ["admin", "manager"])
        assert not has_any_role([], ["admin"])


def test_manager_deletes_operations_but_user_does_not():
    assert role_grants("manager", "operations:delete")
    assert not role_grants("user", "operations:delete")
