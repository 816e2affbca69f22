"""
Tests for the role hierarchy and attribute rules, independent of HTTP.
"""

import pytest

from app.features.access.policies import (
    check_roles,
    ensure_can_assign_priority,
    ensure_no_role_change,
    ensure_not_self,
    ensure_owner_or_role,
    has_any_role,
    is_restricted_to_own_records,
)
from app.features.access.roles import (
    ADMIN_OR_ABOVE,
    MANAGER_OR_ABOVE,
    SUPER_ADMIN_ONLY,
    RoleName,
    dominates,
    roles_at_least,
)
from app.utils.errors import BadRequest, Forbidden, Unauthenticated
from app.utils.security import Identity


def identity(role: str, user_id: str = "u-1") -> Identity:
    return Identity(user_id=user_id, email=f"{user_id}@example.com", role=role)


class TestRoleHierarchy:
    def test_canned_gate_sets(self):
        assert SUPER_ADMIN_ONLY == {RoleName.SUPER_ADMIN}
        assert ADMIN_OR_ABOVE == {RoleName.SUPER_ADMIN, RoleName.ADMIN}
        assert MANAGER_OR_ABOVE == {RoleName.SUPER_ADMIN, RoleName.ADMIN, RoleName.MANAGER}
        assert roles_at_least(RoleName.EMPLOYEE) == set(RoleName)

    def test_every_role_dominates_itself(self):
        for role in RoleName:
            assert dominates(role, role)

    def test_employee_dominates_nobody_else(self):
        assert not dominates(RoleName.EMPLOYEE, RoleName.MANAGER)

    def test_role_names_match_exactly(self):
        assert RoleName.parse("Admin") is RoleName.ADMIN
        assert RoleName.parse("admin") is None
        assert RoleName.parse("Owner") is None


class TestCheckRoles:
    def test_missing_identity_is_unauthenticated(self):
        with pytest.raises(Unauthenticated):
            check_roles(None, ADMIN_OR_ABOVE)

    @pytest.mark.parametrize("role", ["Super Admin", "Admin"])
    def test_admin_gate_admits(self, role):
        assert check_roles(identity(role), ADMIN_OR_ABOVE).role == role

    @pytest.mark.parametrize("role", ["Manager", "Employee", "admin", "unknown"])
    def test_admin_gate_rejects(self, role):
        with pytest.raises(Forbidden) as error:
            check_roles(identity(role), ADMIN_OR_ABOVE)
        assert error.value.detail == "Insufficient permissions"


class TestHighPriorityGuard:
    @pytest.mark.parametrize("role", ["Manager", "Admin", "Super Admin"])
    def test_manager_or_above_may_assign_high(self, role):
        ensure_can_assign_priority(identity(role), "high")

    @pytest.mark.parametrize("role", ["Employee", "unknown"])
    def test_others_may_not_assign_high(self, role):
        with pytest.raises(Forbidden) as error:
            ensure_can_assign_priority(identity(role), "high")
        assert error.value.detail == "Only managers, admins, and super admins can assign high priority tasks"

    @pytest.mark.parametrize("priority", ["low", "medium", None])
    def test_other_priorities_pass_for_employee(self, priority):
        ensure_can_assign_priority(identity("Employee"), priority)

    def test_missing_identity_is_unauthenticated(self):
        with pytest.raises(Unauthenticated):
            ensure_can_assign_priority(None, "low")


class TestOwnership:
    def test_owner_passes(self):
        ensure_owner_or_role(identity("Employee", "u-1"), "u-1", MANAGER_OR_ABOVE, "denied")

    def test_non_owner_employee_is_forbidden_with_message(self):
        with pytest.raises(Forbidden) as error:
            ensure_owner_or_role(identity("Employee", "u-1"), "u-2", MANAGER_OR_ABOVE, "denied here")
        assert error.value.detail == "denied here"

    def test_allowed_role_passes_without_ownership(self):
        ensure_owner_or_role(identity("Manager", "u-1"), "u-2", MANAGER_OR_ABOVE, "denied")

    def test_list_scope(self):
        assert is_restricted_to_own_records(identity("Employee"))
        assert not is_restricted_to_own_records(identity("Manager"))
        assert has_any_role(identity("Admin"), ADMIN_OR_ABOVE)


class TestSelfServiceGuards:
    def test_employee_cannot_change_role(self):
        with pytest.raises(Forbidden):
            ensure_no_role_change(identity("Employee"), "some-role-id")

    def test_employee_without_role_field_passes(self):
        ensure_no_role_change(identity("Employee"), None)

    def test_admin_may_change_role(self):
        ensure_no_role_change(identity("Admin"), "some-role-id")

    @pytest.mark.parametrize("role", ["Super Admin", "Admin", "Manager", "Employee"])
    def test_nobody_deletes_themselves(self, role):
        with pytest.raises(BadRequest) as error:
            ensure_not_self(identity(role, "u-9"), "u-9")
        assert error.value.detail == "Cannot delete your own account"

    def test_deleting_someone_else_passes(self):
        ensure_not_self(identity("Admin", "u-1"), "u-2")
