"""RBAC (Role-Based Access Control) module for GatePass.

This module defines the permission model, role definitions, and the
authorization resolver.
"""

from .permissions import Permission, PermissionName, PermissionScope, PERMISSION_DEFINITIONS
from .roles import RoleName, DEFAULT_ROLES
from .checker import PermissionChecker, has_permission, can_perform_action, permissions_of

__all__ = [
    "Permission",
    "PermissionName",
    "PermissionScope",
    "PERMISSION_DEFINITIONS",
    "RoleName",
    "DEFAULT_ROLES",
    "PermissionChecker",
    "has_permission",
    "can_perform_action",
    "permissions_of",
]
