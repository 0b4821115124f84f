"""Default role definitions for GatePass.

Defines the 6 standard roles with their permission sets, ordered by level:
1. LEVEL_1 - Requester: creates and follows own removals
2. LEVEL_2 - Department approver, also re-checks return-date extensions
3. LEVEL_3 - Finance approver
4. LEVEL_4 - Management approver
5. SECURITY - Final approval, returns, extensions and reports
6. ADMIN - Administration and workflow override
"""

from enum import Enum
from typing import Dict, List
from .permissions import PermissionName


class RoleName(str, Enum):
    """Names of the standard roles."""

    LEVEL_1 = "LEVEL_1"
    LEVEL_2 = "LEVEL_2"
    LEVEL_3 = "LEVEL_3"
    LEVEL_4 = "LEVEL_4"
    SECURITY = "SECURITY"
    ADMIN = "ADMIN"


def _build_permissions(*perms: PermissionName) -> List[str]:
    """Build permission strings from PermissionName members."""
    return [p.value for p in perms]


LEVEL_1_PERMISSIONS = _build_permissions(
    PermissionName.CREATE_REMOVAL,
    PermissionName.VIEW_OWN_REMOVAL,
)

LEVEL_2_PERMISSIONS = _build_permissions(
    PermissionName.APPROVE_LEVEL_2,
    PermissionName.VIEW_DEPARTMENT_REMOVAL,
    PermissionName.RECHECK_EXTENSION,
)

LEVEL_3_PERMISSIONS = _build_permissions(
    PermissionName.APPROVE_LEVEL_3,
    PermissionName.VIEW_LEVEL_3_REMOVAL,
)

LEVEL_4_PERMISSIONS = _build_permissions(
    PermissionName.APPROVE_LEVEL_4,
    PermissionName.VIEW_LEVEL_4_REMOVAL,
)

SECURITY_PERMISSIONS = _build_permissions(
    PermissionName.APPROVE_SECURITY,
    PermissionName.RECORD_RETURN,
    PermissionName.MANAGE_EXTENSION,
    PermissionName.VIEW_SECURITY_REMOVAL,
    PermissionName.CREATE_REPORT,
)

ADMIN_PERMISSIONS = _build_permissions(
    PermissionName.ADMIN_ACCESS,
    PermissionName.OVERRIDE_WORKFLOW,
    PermissionName.CONFIGURE_SYSTEM,
    PermissionName.CREATE_REPORT,
)


# Default roles configuration
DEFAULT_ROLES: Dict[str, dict] = {
    RoleName.LEVEL_1.value: {
        "name": RoleName.LEVEL_1.value,
        "level": 1,
        "description": "Requester: creates removals and follows their own requests",
        "permissions": LEVEL_1_PERMISSIONS,
    },
    RoleName.LEVEL_2.value: {
        "name": RoleName.LEVEL_2.value,
        "level": 2,
        "description": "Department approver; re-checks return-date extensions",
        "permissions": LEVEL_2_PERMISSIONS,
    },
    RoleName.LEVEL_3.value: {
        "name": RoleName.LEVEL_3.value,
        "level": 3,
        "description": "Finance approver",
        "permissions": LEVEL_3_PERMISSIONS,
    },
    RoleName.LEVEL_4.value: {
        "name": RoleName.LEVEL_4.value,
        "level": 4,
        "description": "Management approver",
        "permissions": LEVEL_4_PERMISSIONS,
    },
    RoleName.SECURITY.value: {
        "name": RoleName.SECURITY.value,
        "level": 5,
        "description": "Security desk: final approval, returns, extensions and reports",
        "permissions": SECURITY_PERMISSIONS,
    },
    RoleName.ADMIN.value: {
        "name": RoleName.ADMIN.value,
        "level": 6,
        "description": "System administrator with workflow override",
        "permissions": ADMIN_PERMISSIONS,
    },
}


def get_default_role_permissions(role_key: str) -> List[str]:
    """Get permissions list for a default role."""
    role = DEFAULT_ROLES.get(role_key)
    if not role:
        raise ValueError(f"Unknown default role: {role_key}")
    return role["permissions"]
