"""Reference data endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from gatepass.api.deps import get_db, get_current_user
from gatepass.api.schemas.workflow import DepartmentResponse, RemovalReasonResponse
from gatepass.db.models import Department, RemovalReason, User

router = APIRouter(prefix="/reference", tags=["reference"])


@router.get("/departments", response_model=List[DepartmentResponse])
def list_departments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    departments = db.query(Department).order_by(Department.name).all()
    return [DepartmentResponse.model_validate(d) for d in departments]


@router.get("/removal-reasons", response_model=List[RemovalReasonResponse])
def list_removal_reasons(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    reasons = db.query(RemovalReason).order_by(RemovalReason.name).all()
    return [RemovalReasonResponse.model_validate(r) for r in reasons]
