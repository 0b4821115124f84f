"""Removal workflow module for GatePass.

Implements the removal state machine and the lifecycle service that drives
removals through the approval pipeline.
"""

from .states import (
    RemovalStatus,
    RemovalType,
    WorkflowTransition,
    TRANSITION_RULES,
    VALID_TRANSITIONS,
    get_next_step_name,
    get_workflow_step,
    get_workflow_steps,
)
from .machine import RemovalStateMachine, get_allowed_transitions
from .service import RemovalService

__all__ = [
    "RemovalStatus",
    "RemovalType",
    "WorkflowTransition",
    "TRANSITION_RULES",
    "VALID_TRANSITIONS",
    "get_workflow_steps",
    "get_workflow_step",
    "get_next_step_name",
    "RemovalStateMachine",
    "get_allowed_transitions",
    "RemovalService",
]
