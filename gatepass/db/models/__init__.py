"""Database models for GatePass."""

from gatepass.db.models.department import Department
from gatepass.db.models.user import User, UserDepartment, user_roles
from gatepass.db.models.role import Role
from gatepass.db.models.removal import Removal, RemovalItem, RemovalReason
from gatepass.db.models.approval import Approval, ReturnRecord, ExtensionRequest

__all__ = [
    "Department",
    "User",
    "UserDepartment",
    "user_roles",
    "Role",
    "Removal",
    "RemovalItem",
    "RemovalReason",
    "Approval",
    "ReturnRecord",
    "ExtensionRequest",
]
