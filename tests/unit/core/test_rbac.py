"""Tests for RBAC permission system."""

import pytest
from types import SimpleNamespace
from uuid import uuid4

from gatepass.core.rbac.permissions import (
    Permission, PermissionName, PermissionScope,
    PERMISSION_DEFINITIONS, is_valid_permission,
    get_permission, get_permissions_for_scope, get_all_permissions,
)
from gatepass.core.rbac.checker import (
    PermissionChecker, has_permission, can_perform_action, permissions_of,
)
from gatepass.core.rbac.roles import (
    DEFAULT_ROLES, RoleName, get_default_role_permissions,
    LEVEL_1_PERMISSIONS, LEVEL_2_PERMISSIONS, SECURITY_PERMISSIONS, ADMIN_PERMISSIONS,
)


def make_user(*role_names, department_ids=()):
    """Plain stand-in for a User with roles and department memberships."""
    return SimpleNamespace(
        id=uuid4(),
        roles=[
            SimpleNamespace(name=r.value, permissions=DEFAULT_ROLES[r.value]["permissions"])
            for r in role_names
        ],
        departments=[SimpleNamespace(department_id=d) for d in department_ids],
    )


def make_removal(requester_id=None, department_id=None, status="DRAFT"):
    return SimpleNamespace(
        id=uuid4(),
        requester_id=requester_id or uuid4(),
        department_id=department_id,
        status=status,
    )


class TestPermissionModel:
    """Test permission definitions."""

    def test_permission_string_format(self):
        perm = Permission(PermissionName.APPROVE_LEVEL_2, PermissionScope.DEPARTMENT)
        assert str(perm) == "approve_level_2"

    def test_permission_from_string(self):
        perm = Permission.from_string("record_return")
        assert perm.name == PermissionName.RECORD_RETURN
        assert perm.scope == PermissionScope.GLOBAL

    def test_unknown_permission_from_string(self):
        with pytest.raises(ValueError):
            Permission.from_string("approve_level_9")

    def test_is_valid_permission(self):
        assert is_valid_permission("create_removal")
        assert is_valid_permission("override_workflow")
        assert not is_valid_permission("delete_everything")

    def test_catalog_is_complete(self):
        all_perms = get_all_permissions()
        assert len(all_perms) == 17
        assert set(all_perms) == {p.value for p in PermissionName}

    @pytest.mark.parametrize("name,scope", [
        ("create_removal", PermissionScope.OWN),
        ("view_own_removal", PermissionScope.OWN),
        ("approve_level_2", PermissionScope.DEPARTMENT),
        ("view_department_removal", PermissionScope.DEPARTMENT),
        ("recheck_extension", PermissionScope.DEPARTMENT),
        ("approve_level_3", PermissionScope.GLOBAL),
        ("approve_security", PermissionScope.GLOBAL),
        ("admin_access", PermissionScope.GLOBAL),
    ])
    def test_permission_scopes(self, name, scope):
        assert PERMISSION_DEFINITIONS[name].scope == scope

    def test_permissions_for_scope(self):
        own = get_permissions_for_scope(PermissionScope.OWN)
        assert sorted(own) == ["create_removal", "view_own_removal"]

    def test_get_permission_accepts_enum(self):
        assert get_permission(PermissionName.CREATE_REPORT).scope == PermissionScope.GLOBAL
        assert get_permission("nonexistent") is None


class TestDefaultRoles:
    """Test default role definitions."""

    def test_all_default_roles_defined(self):
        assert list(DEFAULT_ROLES) == [r.value for r in RoleName]
        assert [DEFAULT_ROLES[r.value]["level"] for r in RoleName] == [1, 2, 3, 4, 5, 6]

    def test_level_1_permissions(self):
        assert LEVEL_1_PERMISSIONS == ["create_removal", "view_own_removal"]

    def test_level_2_permissions(self):
        assert LEVEL_2_PERMISSIONS == ["approve_level_2", "view_department_removal", "recheck_extension"]

    def test_security_permissions(self):
        checker = PermissionChecker(SECURITY_PERMISSIONS)
        assert checker.has_permission("approve_security")
        assert checker.has_permission("record_return")
        assert checker.has_permission("manage_extension")
        assert checker.has_permission("create_report")
        assert not checker.has_permission("approve_level_4")

    def test_admin_does_not_hold_level_permissions(self):
        checker = PermissionChecker(ADMIN_PERMISSIONS)
        assert checker.is_admin
        assert checker.can_override
        assert not checker.has_permission("approve_level_2")
        assert not checker.has_permission("create_removal")

    def test_get_default_role_permissions(self):
        assert get_default_role_permissions("LEVEL_3") == ["approve_level_3", "view_level_3_removal"]
        with pytest.raises(ValueError):
            get_default_role_permissions("SUPERUSER")


class TestPermissionChecker:
    """Test PermissionChecker class."""

    def test_has_permission_exact_match(self):
        checker = PermissionChecker(["approve_level_3", "view_level_3_removal"])
        assert checker.has_permission("approve_level_3")
        assert checker.has_permission(PermissionName.VIEW_LEVEL_3_REMOVAL)
        assert not checker.has_permission("approve_level_4")

    def test_unknown_permission_never_held(self):
        checker = PermissionChecker(["made_up_permission"])
        assert not checker.has_permission("made_up_permission")
        assert checker.get_effective_permissions() == set()

    def test_has_any_and_all(self):
        checker = PermissionChecker(["record_return"])
        assert checker.has_any_permission(["record_return", "admin_access"])
        assert not checker.has_any_permission(["admin_access", "approve_security"])
        assert checker.has_all_permissions(["record_return"])
        assert not checker.has_all_permissions(["record_return", "manage_extension"])

    def test_for_user_unions_role_permissions(self):
        user = make_user(RoleName.LEVEL_1, RoleName.LEVEL_2)
        checker = PermissionChecker.for_user(user)
        assert checker.has_permission("create_removal")
        assert checker.has_permission("approve_level_2")
        assert checker.has_role(RoleName.LEVEL_2)
        assert not checker.has_role("ADMIN")

    def test_for_user_none_holds_nothing(self):
        checker = PermissionChecker.for_user(None)
        assert not checker.has_permission("view_own_removal")
        assert checker.get_effective_permissions() == set()

    def test_permissions_of_user(self):
        user = make_user(RoleName.LEVEL_3)
        assert {str(p) for p in permissions_of(user)} == {"approve_level_3", "view_level_3_removal"}


class TestScopedActions:
    """Test scope resolution against a removal."""

    def test_own_scope_requires_requester(self):
        user = make_user(RoleName.LEVEL_1)
        assert can_perform_action(user, make_removal(requester_id=user.id), "view_own_removal")
        assert not can_perform_action(user, make_removal(), "view_own_removal")

    def test_department_scope_requires_membership(self):
        it, finance = uuid4(), uuid4()
        user = make_user(RoleName.LEVEL_2, department_ids=[it])
        assert can_perform_action(user, make_removal(department_id=it), "approve_level_2")
        assert not can_perform_action(user, make_removal(department_id=finance), "approve_level_2")

    def test_department_scope_without_department(self):
        user = make_user(RoleName.LEVEL_2, department_ids=[uuid4()])
        assert not can_perform_action(user, make_removal(department_id=None), "approve_level_2")

    def test_global_scope(self):
        user = make_user(RoleName.LEVEL_3)
        assert can_perform_action(user, make_removal(), "approve_level_3")

    def test_base_permission_required(self):
        user = make_user(RoleName.LEVEL_1)
        assert not can_perform_action(user, make_removal(requester_id=user.id), "approve_level_3")

    def test_missing_user_or_removal(self):
        user = make_user(RoleName.ADMIN)
        assert not can_perform_action(None, make_removal(), "admin_access")
        assert not can_perform_action(user, None, "admin_access")
        assert not has_permission(None, "admin_access")

    def test_can_view(self):
        it = uuid4()
        requester = make_user(RoleName.LEVEL_1)
        removal = make_removal(requester_id=requester.id, department_id=it)

        assert PermissionChecker.for_user(requester).can_view(removal)
        assert PermissionChecker.for_user(make_user(RoleName.LEVEL_2, department_ids=[it])).can_view(removal)
        assert PermissionChecker.for_user(make_user(RoleName.ADMIN)).can_view(removal)
        assert not PermissionChecker.for_user(make_user(RoleName.LEVEL_1)).can_view(removal)
