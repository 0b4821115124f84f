from pydantic import BaseModel, EmailStr
from uuid import UUID
from datetime import datetime
from typing import List, Optional


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class DepartmentMembership(BaseModel):
    department_id: UUID
    is_primary: bool

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    id: UUID
    email: EmailStr
    name: Optional[str]
    is_active: bool
    roles: List[str]
    permissions: List[str]
    departments: List[DepartmentMembership]
    created_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user, permissions: List[str]) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            is_active=user.is_active,
            roles=user.role_names,
            permissions=sorted(permissions),
            departments=[DepartmentMembership.model_validate(m) for m in user.departments],
            created_at=user.created_at,
        )
