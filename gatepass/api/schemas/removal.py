"""Removal request and response schemas."""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field


# Requests
class RemovalItemCreate(BaseModel):
    description: str = Field(..., min_length=1)
    removal_reason_id: UUID
    custom_reason: Optional[str] = None


class RemovalCreate(BaseModel):
    removal_type: str
    date_from: date
    date_to: Optional[date] = None
    employee: Optional[str] = None
    department_id: Optional[UUID] = None
    items: List[RemovalItemCreate] = Field(default_factory=list)


class RemovalUpdate(BaseModel):
    """Partial update; only fields present in the request body change."""
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    employee: Optional[str] = None
    department_id: Optional[UUID] = None
    items: Optional[List[RemovalItemCreate]] = None


class ApproveRequest(BaseModel):
    level: int
    signature: str
    comments: Optional[str] = None


class RejectRequest(BaseModel):
    level: int
    rejection_reason: str
    signature: str


class ReturnCreate(BaseModel):
    return_date: date
    condition: str
    notes: Optional[str] = None


class ExtensionCreate(BaseModel):
    new_date: date


class ReportRequest(BaseModel):
    report_type: str


# Responses
class RemovalItemResponse(BaseModel):
    id: UUID
    position: int
    description: str
    removal_reason_id: UUID
    custom_reason: Optional[str]
    reason_label: Optional[str]

    class Config:
        from_attributes = True


class ApprovalResponse(BaseModel):
    id: UUID
    sequence: int
    level: int
    approved: bool
    rejection_reason: Optional[str]
    comments: Optional[str]
    signature: str
    signature_date: datetime
    approved_by_id: Optional[UUID]
    override_by_id: Optional[UUID]
    override_at: Optional[datetime]

    class Config:
        from_attributes = True


class ReturnRecordResponse(BaseModel):
    id: UUID
    return_date: date
    condition: str
    notes: Optional[str]
    recorded_by_id: Optional[UUID]

    class Config:
        from_attributes = True


class ExtensionRequestResponse(BaseModel):
    id: UUID
    sequence: int
    original_date: date
    new_date: date
    status: str
    requested_by_id: Optional[UUID]
    recheck_by_id: Optional[UUID]
    recheck_status: Optional[str]
    recheck_at: Optional[datetime]

    class Config:
        from_attributes = True


class RemovalResponse(BaseModel):
    id: UUID
    requester_id: UUID
    removal_type: str
    date_from: date
    date_to: Optional[date]
    employee: Optional[str]
    department_id: Optional[UUID]
    status: str
    rejection_reason: Optional[str]
    created_at: datetime
    updated_at: datetime
    version: int
    items: List[RemovalItemResponse]
    approvals: List[ApprovalResponse]
    return_record: Optional[ReturnRecordResponse]
    extension_requests: List[ExtensionRequestResponse]

    class Config:
        from_attributes = True


class RemovalListResponse(BaseModel):
    items: List[RemovalResponse]
    total: int


class ReportResponse(BaseModel):
    report_type: str
    reference: str
