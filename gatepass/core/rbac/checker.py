"""Permission checking utilities for GatePass.

The PermissionChecker is the single authorization resolver: every lifecycle
operation and every read-side filter asks it, instead of inspecting roles
inline.
"""

from typing import Iterable, List, Optional, Set, Union
from uuid import UUID

from .permissions import (
    Permission,
    PermissionName,
    PermissionScope,
    VIEW_PERMISSIONS,
    get_permission,
    permission_key,
)
from .roles import RoleName


PermissionLike = Union[str, PermissionName, Permission]


class PermissionChecker:
    """Checks what a user may do based on their roles and departments."""

    def __init__(
        self,
        user_permissions: Iterable[str],
        *,
        user_id: Optional[UUID] = None,
        role_names: Iterable[str] = (),
        department_ids: Iterable[UUID] = (),
    ):
        """
        Initialize with the user's effective permissions.

        Args:
            user_permissions: Permission names granted by the user's roles
            user_id: ID of the user, used for own-scope checks
            role_names: Names of the roles the user holds
            department_ids: Departments the user belongs to
        """
        self.permissions = set(user_permissions)
        self.user_id = user_id
        self.role_names = {r.value if isinstance(r, RoleName) else r for r in role_names}
        self.department_ids = set(department_ids)

    @classmethod
    def for_user(cls, user) -> "PermissionChecker":
        """Build a checker from a user with roles and department memberships."""
        if user is None:
            return cls([])

        permissions: List[str] = []
        for role in user.roles or []:
            permissions.extend(role.permissions or [])

        return cls(
            permissions,
            user_id=user.id,
            role_names=[role.name for role in user.roles or []],
            department_ids=[m.department_id for m in user.departments or []],
        )

    @property
    def is_admin(self) -> bool:
        return self.has_permission(PermissionName.ADMIN_ACCESS)

    @property
    def can_override(self) -> bool:
        return self.has_permission(PermissionName.OVERRIDE_WORKFLOW)

    def has_permission(self, permission: PermissionLike) -> bool:
        """Check if user holds a specific permission. Unknown names are never held."""
        perm_str = permission_key(permission)
        if get_permission(perm_str) is None:
            return False
        return perm_str in self.permissions

    def has_any_permission(self, permissions: Iterable[PermissionLike]) -> bool:
        """Check if user has any of the given permissions."""
        return any(self.has_permission(p) for p in permissions)

    def has_all_permissions(self, permissions: Iterable[PermissionLike]) -> bool:
        """Check if user has all of the given permissions."""
        return all(self.has_permission(p) for p in permissions)

    def has_role(self, role: Union[str, RoleName]) -> bool:
        role_name = role.value if isinstance(role, RoleName) else role
        return role_name in self.role_names

    def get_effective_permissions(self) -> Set[Permission]:
        """Resolve held permission names to catalog entries, dropping unknown ones."""
        resolved = set()
        for perm_str in self.permissions:
            permission = get_permission(perm_str)
            if permission is not None:
                resolved.add(permission)
        return resolved

    def in_department(self, department_id: Optional[UUID]) -> bool:
        return department_id is not None and department_id in self.department_ids

    def can_perform_action(self, removal, permission: PermissionLike) -> bool:
        """
        Check if the user may exercise a permission against a removal.

        The base permission must be held; its scope then decides:
        own -> the user requested the removal,
        department -> the removal belongs to one of the user's departments,
        global -> always.
        """
        if not self.has_permission(permission):
            return False

        scope = get_permission(permission_key(permission)).scope

        if scope == PermissionScope.OWN:
            return removal.requester_id == self.user_id

        if scope == PermissionScope.DEPARTMENT:
            return self.in_department(removal.department_id)

        return True

    def is_owner_or_admin(self, removal) -> bool:
        """Check if the user requested the removal or holds admin access."""
        return removal.requester_id == self.user_id or self.is_admin

    def can_view(self, removal) -> bool:
        """Check if the user may open a single removal."""
        if self.is_admin:
            return True
        return any(self.can_perform_action(removal, p) for p in VIEW_PERMISSIONS)


def permissions_of(user) -> Set[Permission]:
    """Union of the permissions granted by all of the user's roles."""
    return PermissionChecker.for_user(user).get_effective_permissions()


def has_permission(user, permission: PermissionLike) -> bool:
    """
    Check if a user has a specific permission.

    Args:
        user: User model instance with roles relationship
        permission: Permission name, PermissionName or Permission

    Returns:
        True if any of the user's roles grants the permission
    """
    if not user:
        return False
    return PermissionChecker.for_user(user).has_permission(permission)


def can_perform_action(user, removal, permission: PermissionLike) -> bool:
    """Check if a user may exercise a permission against a removal, honoring scope."""
    if not user or removal is None:
        return False
    return PermissionChecker.for_user(user).can_perform_action(removal, permission)
