"""Database seeding for GatePass.

Creates the role catalog, departments and removal reasons, and optionally
the demo accounts used in development.
"""

import logging
import sys
import uuid
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from gatepass.core.rbac.roles import DEFAULT_ROLES, RoleName
from gatepass.db.models import Department, RemovalReason, Role, User, UserDepartment

logger = logging.getLogger(__name__)

DEFAULT_DEPARTMENTS: List[str] = ["IT", "Finance", "Operations", "HR", "Security"]

# (name, allow_custom)
DEFAULT_REMOVAL_REASONS = [
    ("Business Use", False),
    ("Repair or Service", False),
    ("Personal Use", True),
    ("Transfer to Another Department", False),
    ("Equipment Replacement", False),
    ("Other", True),
]

# (email, name, roles, primary department)
DEMO_USERS = [
    ("employee@example.com", "Regular Employee", [RoleName.LEVEL_1], "IT"),
    ("manager@example.com", "Department Manager", [RoleName.LEVEL_1, RoleName.LEVEL_2], "IT"),
    ("finance@example.com", "Finance Approver", [RoleName.LEVEL_3], "Finance"),
    ("management@example.com", "Management Approver", [RoleName.LEVEL_4], "Operations"),
    ("security@example.com", "Security Officer", [RoleName.SECURITY], "Security"),
    ("admin@example.com", "System Administrator", [RoleName.ADMIN], "HR"),
]


def seed_roles(db: Session) -> Dict[str, Role]:
    """
    Create the default roles.

    Roles are idempotent - if they already exist, their level, description
    and permissions are brought back in line with the catalog.

    Returns:
        Dict mapping role name to Role object
    """
    seeded = {}

    for role_key, role_config in DEFAULT_ROLES.items():
        role = db.query(Role).filter(Role.name == role_config["name"]).first()

        if role is None:
            role = Role(id=uuid.uuid4(), name=role_config["name"])
            db.add(role)

        role.level = role_config["level"]
        role.description = role_config["description"]
        role.permissions = list(role_config["permissions"])
        seeded[role_key] = role

    db.flush()
    return seeded


def seed_departments(db: Session) -> Dict[str, Department]:
    seeded = {}
    for name in DEFAULT_DEPARTMENTS:
        department = db.query(Department).filter(Department.name == name).first()
        if department is None:
            department = Department(id=uuid.uuid4(), name=name)
            db.add(department)
        seeded[name] = department

    db.flush()
    return seeded


def seed_removal_reasons(db: Session) -> Dict[str, RemovalReason]:
    seeded = {}
    for name, allow_custom in DEFAULT_REMOVAL_REASONS:
        reason = db.query(RemovalReason).filter(RemovalReason.name == name).first()
        if reason is None:
            reason = RemovalReason(id=uuid.uuid4(), name=name, allow_custom=allow_custom)
            db.add(reason)
        seeded[name] = reason

    db.flush()
    return seeded


def seed_reference_data(db: Session) -> None:
    """Create roles, departments and removal reasons. Safe to run repeatedly."""
    roles = seed_roles(db)
    departments = seed_departments(db)
    reasons = seed_removal_reasons(db)
    logger.info(
        "Reference data seeded: %d roles, %d departments, %d removal reasons",
        len(roles), len(departments), len(reasons),
    )


def seed_demo_users(db: Session, password: str) -> List[User]:
    """
    Create one demo account per role.

    Existing accounts are left untouched. Requires seed_reference_data.

    Args:
        db: Database session
        password: Plain-text password given to every new demo account
    """
    from gatepass.core.security import get_password_hash

    roles = {role.name: role for role in db.query(Role).all()}
    departments = {d.name: d for d in db.query(Department).all()}
    password_hash = get_password_hash(password)

    users = []
    for email, name, role_names, department_name in DEMO_USERS:
        user = db.query(User).filter(User.email == email).first()
        if user is None:
            user = User(
                id=uuid.uuid4(),
                email=email,
                name=name,
                password_hash=password_hash,
                roles=[roles[r.value] for r in role_names],
            )
            user.departments.append(
                UserDepartment(department_id=departments[department_name].id, is_primary=True)
            )
            db.add(user)
            logger.info("Demo user %s created", email)
        users.append(user)

    db.flush()
    return users


def get_role_by_name(db: Session, name: str) -> Optional[Role]:
    """Get a role by name."""
    return db.query(Role).filter(Role.name == name).first()


# CLI script for seeding
if __name__ == "__main__":
    from gatepass.core.config import get_settings
    from gatepass.core.logger import configure_logging
    from gatepass.db.base import Base
    from gatepass.db.session import SessionLocal, engine

    settings = get_settings()
    configure_logging(settings)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        seed_reference_data(db)
        if settings.seed_demo_users and settings.demo_user_password:
            seed_demo_users(db, settings.demo_user_password)
        db.commit()
        print("Seeding complete!")

    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        db.close()
