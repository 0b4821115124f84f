import uuid
from datetime import datetime
from typing import List, Optional
from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Table, Uuid
from sqlalchemy.orm import relationship

from gatepass.db.base import Base


user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Uuid, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    # Relationships
    roles = relationship("Role", secondary=user_roles, back_populates="users")
    departments = relationship("UserDepartment", back_populates="user", cascade="all, delete-orphan")

    @property
    def department_ids(self) -> List[uuid.UUID]:
        return [m.department_id for m in self.departments]

    @property
    def primary_department_id(self) -> Optional[uuid.UUID]:
        for membership in self.departments:
            if membership.is_primary:
                return membership.department_id
        return None

    @property
    def role_names(self) -> List[str]:
        return [role.name for role in self.roles]

    def __repr__(self) -> str:
        return f"<User {self.email}>"


class UserDepartment(Base):
    """Membership of a user in a department."""
    __tablename__ = "user_departments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    department_id = Column(Uuid, ForeignKey("departments.id", ondelete="CASCADE"), nullable=False, index=True)
    is_primary = Column(Boolean, default=False, nullable=False)

    # Relationships
    user = relationship("User", back_populates="departments")
    department = relationship("Department", back_populates="members")
