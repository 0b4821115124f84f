"""Removal workflow states and transitions.

State Machine Diagram:

    ┌──────────┐
    │  DRAFT   │ ← Initial state (requester editing)
    └────┬─────┘
         │ submit
    ┌────▼────────────┐
    │ PENDING_LEVEL_2 │ (department)  ──┐
    └────┬────────────┘                 │
    ┌────▼────────────┐                 │
    │ PENDING_LEVEL_3 │ (finance)     ──┤
    └────┬────────────┘                 │
    ┌────▼────────────┐                 │  reject
    │ PENDING_LEVEL_4 │ (management)  ──┤
    └────┬────────────┘                 │
    ┌────▼─────────────┐                │
    │ PENDING_SECURITY │ (security)   ──┤
    └────┬─────────────┘                │
    ┌────▼─────┐                  ┌─────▼────┐
    │ APPROVED │◄──────┐          │ REJECTED │
    └──┬────┬──┘       │          └──────────┘
       │    │ extend   │ recheck
       │  ┌─▼──────────┴────────────┐
       │  │ PENDING_LEVEL_2_RECHECK │
       │  └─────────────────────────┘
    ┌──▼───────┐
    │ RETURNED │
    └──────────┘

Admin override adds shortcut edges from DRAFT and every PENDING_* state
straight to APPROVED, and from DRAFT to REJECTED.
"""

from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Set

from gatepass.core.rbac.permissions import PermissionName
from gatepass.core.rbac.roles import RoleName


class RemovalStatus(str, Enum):
    """States in the removal workflow."""

    DRAFT = "DRAFT"
    PENDING_LEVEL_2 = "PENDING_LEVEL_2"
    PENDING_LEVEL_3 = "PENDING_LEVEL_3"
    PENDING_LEVEL_4 = "PENDING_LEVEL_4"
    PENDING_SECURITY = "PENDING_SECURITY"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    RETURNED = "RETURNED"
    PENDING_LEVEL_2_RECHECK = "PENDING_LEVEL_2_RECHECK"


class RemovalType(str, Enum):
    """Whether the asset is expected to come back."""

    RETURNABLE = "RETURNABLE"
    NON_RETURNABLE = "NON_RETURNABLE"


class ExtensionStatus(str, Enum):
    """Status of a return-date extension request."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class WorkflowStep(NamedTuple):
    """One node of the workflow graph."""
    name: RemovalStatus
    display_name: str
    order: int
    required_permission: Optional[PermissionName] = None
    next_step_name: Optional[str] = None


class WorkflowTransition(NamedTuple):
    """Defines a valid state transition."""
    id: str
    from_step: RemovalStatus
    to_step: RemovalStatus
    required_permission: PermissionName
    required_role: Optional[RoleName] = None

    @property
    def is_override(self) -> bool:
        return self.required_permission == PermissionName.OVERRIDE_WORKFLOW


WORKFLOW_STEPS: List[WorkflowStep] = [
    WorkflowStep(RemovalStatus.DRAFT, "Draft", 1,
                 PermissionName.CREATE_REMOVAL, "Department Approval"),
    WorkflowStep(RemovalStatus.PENDING_LEVEL_2, "Department Approval", 2,
                 PermissionName.APPROVE_LEVEL_2, "Finance Approval"),
    WorkflowStep(RemovalStatus.PENDING_LEVEL_3, "Finance Approval", 3,
                 PermissionName.APPROVE_LEVEL_3, "Management Approval"),
    WorkflowStep(RemovalStatus.PENDING_LEVEL_4, "Management Approval", 4,
                 PermissionName.APPROVE_LEVEL_4, "Security Approval"),
    WorkflowStep(RemovalStatus.PENDING_SECURITY, "Security Approval", 5,
                 PermissionName.APPROVE_SECURITY, "Approval Complete"),
    WorkflowStep(RemovalStatus.APPROVED, "Approved", 6),
    WorkflowStep(RemovalStatus.REJECTED, "Rejected", 7),
    WorkflowStep(RemovalStatus.RETURNED, "Returned", 8),
    WorkflowStep(RemovalStatus.PENDING_LEVEL_2_RECHECK, "Extension Re-Check", 9,
                 PermissionName.RECHECK_EXTENSION, "Department Re-check"),
]


# Define all valid transitions
TRANSITION_RULES: List[WorkflowTransition] = [
    # Requester submission
    WorkflowTransition("wt1", RemovalStatus.DRAFT, RemovalStatus.PENDING_LEVEL_2,
                       PermissionName.CREATE_REMOVAL),

    # Department approval
    WorkflowTransition("wt2", RemovalStatus.PENDING_LEVEL_2, RemovalStatus.PENDING_LEVEL_3,
                       PermissionName.APPROVE_LEVEL_2, RoleName.LEVEL_2),
    WorkflowTransition("wt3", RemovalStatus.PENDING_LEVEL_2, RemovalStatus.REJECTED,
                       PermissionName.APPROVE_LEVEL_2, RoleName.LEVEL_2),

    # Finance approval
    WorkflowTransition("wt4", RemovalStatus.PENDING_LEVEL_3, RemovalStatus.PENDING_LEVEL_4,
                       PermissionName.APPROVE_LEVEL_3, RoleName.LEVEL_3),
    WorkflowTransition("wt5", RemovalStatus.PENDING_LEVEL_3, RemovalStatus.REJECTED,
                       PermissionName.APPROVE_LEVEL_3, RoleName.LEVEL_3),

    # Management approval
    WorkflowTransition("wt6", RemovalStatus.PENDING_LEVEL_4, RemovalStatus.PENDING_SECURITY,
                       PermissionName.APPROVE_LEVEL_4, RoleName.LEVEL_4),
    WorkflowTransition("wt7", RemovalStatus.PENDING_LEVEL_4, RemovalStatus.REJECTED,
                       PermissionName.APPROVE_LEVEL_4, RoleName.LEVEL_4),

    # Security approval
    WorkflowTransition("wt8", RemovalStatus.PENDING_SECURITY, RemovalStatus.APPROVED,
                       PermissionName.APPROVE_SECURITY, RoleName.SECURITY),
    WorkflowTransition("wt9", RemovalStatus.PENDING_SECURITY, RemovalStatus.REJECTED,
                       PermissionName.APPROVE_SECURITY, RoleName.SECURITY),

    # Return
    WorkflowTransition("wt10", RemovalStatus.APPROVED, RemovalStatus.RETURNED,
                       PermissionName.RECORD_RETURN, RoleName.SECURITY),

    # Extension sub-workflow
    WorkflowTransition("wt11", RemovalStatus.APPROVED, RemovalStatus.PENDING_LEVEL_2_RECHECK,
                       PermissionName.MANAGE_EXTENSION, RoleName.SECURITY),
    WorkflowTransition("wt12", RemovalStatus.PENDING_LEVEL_2_RECHECK, RemovalStatus.APPROVED,
                       PermissionName.RECHECK_EXTENSION, RoleName.LEVEL_2),

    # Admin override
    WorkflowTransition("wt13", RemovalStatus.DRAFT, RemovalStatus.APPROVED,
                       PermissionName.OVERRIDE_WORKFLOW, RoleName.ADMIN),
    WorkflowTransition("wt14", RemovalStatus.DRAFT, RemovalStatus.REJECTED,
                       PermissionName.OVERRIDE_WORKFLOW, RoleName.ADMIN),
    WorkflowTransition("wt15", RemovalStatus.PENDING_LEVEL_2, RemovalStatus.APPROVED,
                       PermissionName.OVERRIDE_WORKFLOW, RoleName.ADMIN),
    WorkflowTransition("wt16", RemovalStatus.PENDING_LEVEL_3, RemovalStatus.APPROVED,
                       PermissionName.OVERRIDE_WORKFLOW, RoleName.ADMIN),
    WorkflowTransition("wt17", RemovalStatus.PENDING_LEVEL_4, RemovalStatus.APPROVED,
                       PermissionName.OVERRIDE_WORKFLOW, RoleName.ADMIN),
    WorkflowTransition("wt18", RemovalStatus.PENDING_SECURITY, RemovalStatus.APPROVED,
                       PermissionName.OVERRIDE_WORKFLOW, RoleName.ADMIN),
]

# Build lookup tables for efficient access
STEPS_BY_STATUS: Dict[RemovalStatus, WorkflowStep] = {step.name: step for step in WORKFLOW_STEPS}
VALID_TRANSITIONS: Dict[RemovalStatus, List[WorkflowTransition]] = {}

for rule in TRANSITION_RULES:
    VALID_TRANSITIONS.setdefault(rule.from_step, []).append(rule)


# Terminal states (no outgoing transitions)
TERMINAL_STATES: Set[RemovalStatus] = {
    RemovalStatus.REJECTED,
    RemovalStatus.RETURNED,
}


# Approval levels 2-5 sit on the workflow step of the same order
MIN_APPROVAL_LEVEL = 2
MAX_APPROVAL_LEVEL = 5


class ApprovalLevel(NamedTuple):
    """Where an approval level sits in the pipeline, derived from the table."""
    level: int
    from_step: RemovalStatus
    to_step: RemovalStatus
    required_permission: PermissionName


def _derive_approval_level(level: int) -> ApprovalLevel:
    step = next(step for step in WORKFLOW_STEPS if step.order == level)
    from_step, permission = step.name, step.required_permission
    advance = next(
        rule for rule in VALID_TRANSITIONS[from_step]
        if rule.required_permission == permission and rule.to_step != RemovalStatus.REJECTED
    )
    return ApprovalLevel(level, from_step, advance.to_step, permission)


APPROVAL_LEVELS: Dict[int, ApprovalLevel] = {
    level: _derive_approval_level(level)
    for level in range(MIN_APPROVAL_LEVEL, MAX_APPROVAL_LEVEL + 1)
}


def get_workflow_steps() -> List[WorkflowStep]:
    """All workflow steps in display order."""
    return sorted(WORKFLOW_STEPS, key=lambda step: step.order)


def get_workflow_step(status: str) -> Optional[WorkflowStep]:
    """Get the step definition for a status value."""
    try:
        return STEPS_BY_STATUS.get(RemovalStatus(status))
    except ValueError:
        return None


def get_next_step_name(status: str) -> Optional[str]:
    """Display name of the step that follows the given status, if any."""
    step = get_workflow_step(status)
    return step.next_step_name if step else None


def get_transitions_from(status: str) -> List[WorkflowTransition]:
    """All table entries leaving a status, in table order."""
    try:
        return list(VALID_TRANSITIONS.get(RemovalStatus(status), []))
    except ValueError:
        return []


def can_transition(from_state: str, to_state: str) -> bool:
    """Check if the table has any edge between two states."""
    return any(rule.to_step == to_state for rule in get_transitions_from(from_state))


def get_transition_rule(
    from_state: str,
    to_state: str,
    *,
    override: bool = False,
) -> Optional[WorkflowTransition]:
    """Get the ordinary (or override) table entry between two states."""
    for rule in get_transitions_from(from_state):
        if rule.to_step == to_state and rule.is_override == override:
            return rule
    return None


def get_approval_level(level: int) -> Optional[ApprovalLevel]:
    """Get the pipeline position of an approval level (2-5)."""
    return APPROVAL_LEVELS.get(level)
