"""Removal state machine implementation.

Answers which table transitions a user may take from a removal's current
status, and moves the removal along validated edges.
"""

import logging
from datetime import datetime
from typing import List

from gatepass.core.errors import InvalidStateError
from gatepass.core.rbac.checker import PermissionChecker

from .states import (
    RemovalStatus,
    WorkflowTransition,
    TERMINAL_STATES,
    get_transition_rule,
    get_transitions_from,
)

logger = logging.getLogger(__name__)


class RemovalStateMachine:
    """
    State machine for a single removal.

    Wraps a removal and the acting user's PermissionChecker. Enumerating
    transitions is a pure query; only ``transition`` mutates the removal.
    """

    def __init__(self, removal, checker: PermissionChecker):
        """
        Initialize the state machine.

        Args:
            removal: Removal aggregate (anything with status, requester_id, department_id)
            checker: Authorization resolver for the acting user
        """
        self.removal = removal
        self.checker = checker

    @property
    def state(self) -> RemovalStatus:
        """Current state of the removal."""
        return RemovalStatus(self.removal.status)

    @property
    def is_terminal(self) -> bool:
        """Check if current state is terminal (no further transitions)."""
        return self.state in TERMINAL_STATES

    def can_perform(self, rule: WorkflowTransition) -> bool:
        """Check if the user may take a table transition from the current state."""
        if rule.from_step != self.state:
            return False

        if not self.checker.has_permission(rule.required_permission):
            return False

        if rule.required_role and not self.checker.has_role(rule.required_role):
            return False

        return self.checker.can_perform_action(self.removal, rule.required_permission)

    def get_available_transitions(self) -> List[WorkflowTransition]:
        """Get the transitions the user may take, in table order."""
        return [rule for rule in get_transitions_from(self.state) if self.can_perform(rule)]

    def transition(self, to_state: RemovalStatus, *, override: bool = False) -> WorkflowTransition:
        """
        Move the removal along a table edge.

        Permissions are the caller's concern; this only guarantees the edge
        exists.

        Args:
            to_state: Target state
            override: Follow the admin override edge instead of the ordinary one

        Returns:
            The table entry that was followed

        Raises:
            InvalidStateError: If the table has no such edge from the current state
        """
        from_state = self.state
        rule = get_transition_rule(from_state, to_state, override=override)
        if rule is None:
            raise InvalidStateError(
                f"Cannot move removal from {from_state.value} to {to_state.value}",
                current_state=from_state.value,
            )

        self.removal.status = rule.to_step.value
        self.removal.updated_at = datetime.utcnow()

        logger.debug(
            "Removal %s: %s -> %s via %s",
            self.removal.id, from_state.value, rule.to_step.value, rule.id,
        )
        return rule


def get_allowed_transitions(user, removal) -> List[WorkflowTransition]:
    """
    Table transitions the user may take from the removal's current status.

    Drives UI affordances only; mutations re-validate on their own.
    """
    if user is None or removal is None:
        return []
    machine = RemovalStateMachine(removal, PermissionChecker.for_user(user))
    return machine.get_available_transitions()
