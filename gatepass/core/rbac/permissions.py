"""Permission model for GatePass RBAC.

Defines every permission together with the scope it applies to.

Scopes:
  - own: only removals the user requested
  - department: only removals belonging to one of the user's departments
  - global: every removal

Permission strings are the bare permission names, e.g. ``approve_level_2``.
"""

from enum import Enum
from typing import NamedTuple, Optional, Union


class PermissionScope(str, Enum):
    """Breadth over which a permission applies."""

    OWN = "own"
    DEPARTMENT = "department"
    GLOBAL = "global"


class PermissionName(str, Enum):
    """All permissions known to the system."""

    # Requesters
    CREATE_REMOVAL = "create_removal"
    VIEW_OWN_REMOVAL = "view_own_removal"

    # Department approvers
    APPROVE_LEVEL_2 = "approve_level_2"
    VIEW_DEPARTMENT_REMOVAL = "view_department_removal"
    RECHECK_EXTENSION = "recheck_extension"

    # Finance approvers
    APPROVE_LEVEL_3 = "approve_level_3"
    VIEW_LEVEL_3_REMOVAL = "view_level_3_removal"

    # Management approvers
    APPROVE_LEVEL_4 = "approve_level_4"
    VIEW_LEVEL_4_REMOVAL = "view_level_4_removal"

    # Security desk
    APPROVE_SECURITY = "approve_security"
    RECORD_RETURN = "record_return"
    MANAGE_EXTENSION = "manage_extension"
    VIEW_SECURITY_REMOVAL = "view_security_removal"
    CREATE_REPORT = "create_report"

    # Administration
    ADMIN_ACCESS = "admin_access"            # bypasses ownership/scope checks
    OVERRIDE_WORKFLOW = "override_workflow"  # bypasses status checks
    CONFIGURE_SYSTEM = "configure_system"


class Permission(NamedTuple):
    """A permission is a name bound to the scope it applies to."""
    name: PermissionName
    scope: PermissionScope

    def __str__(self) -> str:
        return self.name.value

    @classmethod
    def from_string(cls, perm_str: str) -> "Permission":
        """Look up a permission by name, e.g. 'approve_level_2'."""
        permission = PERMISSION_DEFINITIONS.get(perm_str)
        if permission is None:
            raise ValueError(f"Unknown permission: {perm_str}")
        return permission


# Scope of each permission
PERMISSION_SCOPES: dict[PermissionName, PermissionScope] = {
    PermissionName.CREATE_REMOVAL: PermissionScope.OWN,
    PermissionName.VIEW_OWN_REMOVAL: PermissionScope.OWN,
    PermissionName.APPROVE_LEVEL_2: PermissionScope.DEPARTMENT,
    PermissionName.VIEW_DEPARTMENT_REMOVAL: PermissionScope.DEPARTMENT,
    PermissionName.RECHECK_EXTENSION: PermissionScope.DEPARTMENT,
    PermissionName.APPROVE_LEVEL_3: PermissionScope.GLOBAL,
    PermissionName.VIEW_LEVEL_3_REMOVAL: PermissionScope.GLOBAL,
    PermissionName.APPROVE_LEVEL_4: PermissionScope.GLOBAL,
    PermissionName.VIEW_LEVEL_4_REMOVAL: PermissionScope.GLOBAL,
    PermissionName.APPROVE_SECURITY: PermissionScope.GLOBAL,
    PermissionName.RECORD_RETURN: PermissionScope.GLOBAL,
    PermissionName.MANAGE_EXTENSION: PermissionScope.GLOBAL,
    PermissionName.VIEW_SECURITY_REMOVAL: PermissionScope.GLOBAL,
    PermissionName.CREATE_REPORT: PermissionScope.GLOBAL,
    PermissionName.ADMIN_ACCESS: PermissionScope.GLOBAL,
    PermissionName.OVERRIDE_WORKFLOW: PermissionScope.GLOBAL,
    PermissionName.CONFIGURE_SYSTEM: PermissionScope.GLOBAL,
}


def _generate_permission_definitions() -> dict[str, Permission]:
    """Generate the permission catalog from the scope table."""
    permissions = {}
    for name, scope in PERMISSION_SCOPES.items():
        perm = Permission(name, scope)
        permissions[str(perm)] = perm
    return permissions


# All valid permissions as a dictionary: "name" -> Permission
PERMISSION_DEFINITIONS = _generate_permission_definitions()


# Permissions that make a removal visible to its holder
VIEW_PERMISSIONS: tuple[PermissionName, ...] = (
    PermissionName.VIEW_OWN_REMOVAL,
    PermissionName.VIEW_DEPARTMENT_REMOVAL,
    PermissionName.VIEW_LEVEL_3_REMOVAL,
    PermissionName.VIEW_LEVEL_4_REMOVAL,
    PermissionName.VIEW_SECURITY_REMOVAL,
)


def is_valid_permission(perm_str: str) -> bool:
    """Check if a permission string is valid."""
    return perm_str in PERMISSION_DEFINITIONS


def permission_key(permission: Union[str, PermissionName, Permission]) -> str:
    """Normalize a permission given as string, enum member or Permission."""
    if isinstance(permission, Permission):
        return permission.name.value
    if isinstance(permission, PermissionName):
        return permission.value
    return permission


def get_permission(permission: Union[str, PermissionName]) -> Optional[Permission]:
    """Get a permission by name, or None if it is unknown."""
    return PERMISSION_DEFINITIONS.get(permission_key(permission))


def get_permissions_for_scope(scope: PermissionScope) -> list[str]:
    """Get all permission strings with the given scope."""
    return [name for name, perm in PERMISSION_DEFINITIONS.items() if perm.scope == scope]


def get_all_permissions() -> list[str]:
    """Get all valid permission strings."""
    return list(PERMISSION_DEFINITIONS.keys())
