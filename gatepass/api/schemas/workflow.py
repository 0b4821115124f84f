"""Workflow definition and reference data schemas."""

from typing import Optional
from uuid import UUID
from pydantic import BaseModel


class WorkflowStepResponse(BaseModel):
    name: str
    display_name: str
    order: int
    required_permission: Optional[str]
    next_step_name: Optional[str]

    @classmethod
    def from_step(cls, step) -> "WorkflowStepResponse":
        return cls(
            name=step.name.value,
            display_name=step.display_name,
            order=step.order,
            required_permission=step.required_permission.value if step.required_permission else None,
            next_step_name=step.next_step_name,
        )


class TransitionResponse(BaseModel):
    id: str
    from_step: str
    to_step: str
    required_permission: str
    required_role: Optional[str]
    is_override: bool

    @classmethod
    def from_rule(cls, rule) -> "TransitionResponse":
        return cls(
            id=rule.id,
            from_step=rule.from_step.value,
            to_step=rule.to_step.value,
            required_permission=rule.required_permission.value,
            required_role=rule.required_role.value if rule.required_role else None,
            is_override=rule.is_override,
        )


class DepartmentResponse(BaseModel):
    id: UUID
    name: str

    class Config:
        from_attributes = True


class RemovalReasonResponse(BaseModel):
    id: UUID
    name: str
    allow_custom: bool

    class Config:
        from_attributes = True
