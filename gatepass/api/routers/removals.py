"""Removal lifecycle API endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from gatepass.api.deps import get_current_user, get_db, get_removal_service, get_report_service
from gatepass.api.schemas.removal import (
    ApproveRequest,
    ExtensionCreate,
    RejectRequest,
    RemovalCreate,
    RemovalListResponse,
    RemovalResponse,
    RemovalUpdate,
    ReportRequest,
    ReportResponse,
    ReturnCreate,
)
from gatepass.api.schemas.workflow import TransitionResponse
from gatepass.core.workflow.service import RemovalService
from gatepass.db.models import User
from gatepass.services.reports import ReportService

router = APIRouter(prefix="/removals", tags=["removals"])


def _committed(db: Session, removal) -> RemovalResponse:
    db.commit()
    db.refresh(removal)
    return RemovalResponse.model_validate(removal)


@router.get("", response_model=RemovalListResponse)
def list_removals(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RemovalService = Depends(get_removal_service),
    status_filter: Optional[str] = Query(None, alias="status"),
):
    """List the removals visible to the current user."""
    removals = service.list_removals(current_user, status=status_filter)
    return RemovalListResponse(
        items=[RemovalResponse.model_validate(r) for r in removals],
        total=len(removals),
    )


@router.post("", response_model=RemovalResponse, status_code=status.HTTP_201_CREATED)
def create_removal(
    removal_in: RemovalCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RemovalService = Depends(get_removal_service),
):
    """Create a removal in DRAFT."""
    removal = service.create(
        current_user,
        removal_type=removal_in.removal_type,
        date_from=removal_in.date_from,
        date_to=removal_in.date_to,
        employee=removal_in.employee,
        department_id=removal_in.department_id,
        items=[item.model_dump() for item in removal_in.items],
    )
    return _committed(db, removal)


@router.get("/{removal_id}", response_model=RemovalResponse)
def get_removal(
    removal_id: UUID,
    current_user: User = Depends(get_current_user),
    service: RemovalService = Depends(get_removal_service),
):
    removal = service.get_removal(current_user, removal_id)
    return RemovalResponse.model_validate(removal)


@router.patch("/{removal_id}", response_model=RemovalResponse)
def update_removal(
    removal_id: UUID,
    removal_in: RemovalUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RemovalService = Depends(get_removal_service),
):
    """Edit a draft. Only fields present in the body change."""
    removal = service.update(current_user, removal_id, **removal_in.model_dump(exclude_unset=True))
    return _committed(db, removal)


@router.post("/{removal_id}/submit", response_model=RemovalResponse)
def submit_removal(
    removal_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RemovalService = Depends(get_removal_service),
):
    removal = service.submit(current_user, removal_id)
    return _committed(db, removal)


@router.post("/{removal_id}/approve", response_model=RemovalResponse)
def approve_removal(
    removal_id: UUID,
    action: ApproveRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RemovalService = Depends(get_removal_service),
):
    """Approve at a pipeline level (2-5)."""
    removal = service.approve(
        current_user,
        removal_id,
        level=action.level,
        signature=action.signature,
        comments=action.comments,
    )
    return _committed(db, removal)


@router.post("/{removal_id}/reject", response_model=RemovalResponse)
def reject_removal(
    removal_id: UUID,
    action: RejectRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RemovalService = Depends(get_removal_service),
):
    """Reject at a pipeline level (2-5)."""
    removal = service.reject(
        current_user,
        removal_id,
        level=action.level,
        rejection_reason=action.rejection_reason,
        signature=action.signature,
    )
    return _committed(db, removal)


@router.post("/{removal_id}/return", response_model=RemovalResponse)
def record_return(
    removal_id: UUID,
    return_in: ReturnCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RemovalService = Depends(get_removal_service),
):
    removal = service.record_return(
        current_user,
        removal_id,
        return_date=return_in.return_date,
        condition=return_in.condition,
        notes=return_in.notes,
    )
    return _committed(db, removal)


@router.post("/{removal_id}/extensions", response_model=RemovalResponse, status_code=status.HTTP_201_CREATED)
def request_extension(
    removal_id: UUID,
    extension_in: ExtensionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RemovalService = Depends(get_removal_service),
):
    removal = service.request_extension(current_user, removal_id, new_date=extension_in.new_date)
    return _committed(db, removal)


@router.post("/{removal_id}/extensions/{extension_id}/approve", response_model=RemovalResponse)
def approve_extension(
    removal_id: UUID,
    extension_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RemovalService = Depends(get_removal_service),
):
    removal = service.approve_extension(current_user, removal_id, extension_id)
    return _committed(db, removal)


@router.post("/{removal_id}/extensions/{extension_id}/reject", response_model=RemovalResponse)
def reject_extension(
    removal_id: UUID,
    extension_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RemovalService = Depends(get_removal_service),
):
    removal = service.reject_extension(current_user, removal_id, extension_id)
    return _committed(db, removal)


@router.get("/{removal_id}/transitions", response_model=List[TransitionResponse])
def get_allowed_transitions(
    removal_id: UUID,
    current_user: User = Depends(get_current_user),
    service: RemovalService = Depends(get_removal_service),
):
    """Transitions the current user may take from the removal's status."""
    rules = service.get_allowed_transitions(current_user, removal_id)
    return [TransitionResponse.from_rule(rule) for rule in rules]


@router.post("/{removal_id}/reports", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
def generate_report(
    removal_id: UUID,
    report_in: ReportRequest,
    current_user: User = Depends(get_current_user),
    reports: ReportService = Depends(get_report_service),
):
    reference = reports.generate_report(current_user, removal_id, report_in.report_type)
    return ReportResponse(report_type=report_in.report_type, reference=reference)
