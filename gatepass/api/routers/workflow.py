"""Workflow definition endpoints."""

from typing import List

from fastapi import APIRouter, HTTPException, status

from gatepass.api.schemas.workflow import TransitionResponse, WorkflowStepResponse
from gatepass.core.workflow.states import TRANSITION_RULES, get_workflow_step, get_workflow_steps

router = APIRouter(prefix="/workflow", tags=["workflow"])


@router.get("/steps", response_model=List[WorkflowStepResponse])
async def list_steps():
    """All workflow steps in display order."""
    return [WorkflowStepResponse.from_step(step) for step in get_workflow_steps()]


@router.get("/steps/{removal_status}", response_model=WorkflowStepResponse)
async def get_step(removal_status: str):
    step = get_workflow_step(removal_status.upper())
    if step is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown workflow step: {removal_status}",
        )
    return WorkflowStepResponse.from_step(step)


@router.get("/transitions", response_model=List[TransitionResponse])
async def list_transitions():
    """The full transition table."""
    return [TransitionResponse.from_rule(rule) for rule in TRANSITION_RULES]
