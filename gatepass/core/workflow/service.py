"""Removal lifecycle service.

Provides the high-level API for moving removals through the approval
pipeline. Every mutating operation:

1. requires an actor,
2. reloads the removal under a per-aggregate lock,
3. validates everything it needs before touching the aggregate,
4. mutates, appends to the audit trail and persists through the repository.

Transactions are committed by the caller.
"""

import logging
from datetime import date, datetime
from functools import wraps
from typing import Any, Dict, Iterable, List, Mapping, Optional
from uuid import UUID

from gatepass.core.errors import (
    AuthenticationRequiredError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    PreconditionFailedError,
    RemovalValidationError,
    WorkflowError,
)
from gatepass.core.rbac.checker import PermissionChecker
from gatepass.core.rbac.permissions import PermissionName
from gatepass.db.models import Approval, ExtensionRequest, Removal, RemovalItem, ReturnRecord
from gatepass.db.repository import RemovalRepository

from .machine import RemovalStateMachine
from .states import (
    ExtensionStatus,
    RemovalStatus,
    RemovalType,
    WorkflowTransition,
    can_transition,
    get_approval_level,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(["date_from", "date_to", "employee", "department_id", "items"])


def _operation(name: str):
    """Log refused operations with the actor and error code, then re-raise."""
    def decorator(func):
        @wraps(func)
        def wrapper(self, actor, *args, **kwargs):
            try:
                return func(self, actor, *args, **kwargs)
            except WorkflowError as e:
                logger.warning(
                    "%s refused for user %s: [%s] %s",
                    name, getattr(actor, "id", None), e.code, e.message,
                )
                raise
        return wrapper
    return decorator


class RemovalService:
    """
    Lifecycle operations over Removal aggregates.

    Handles:
    - Creating, editing and submitting drafts
    - Level approvals and rejections, including admin override
    - Recording returns
    - The return-date extension sub-workflow
    - Visibility-filtered reads
    """

    def __init__(self, repository: RemovalRepository):
        """
        Initialize the removal service.

        Args:
            repository: Store of removal aggregates
        """
        self.repository = repository

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @_operation("get_removal")
    def get_removal(self, actor, removal_id: UUID) -> Removal:
        """Get a removal the actor is allowed to see."""
        checker = self._checker(actor)
        removal = self._load(removal_id, for_update=False)

        if not checker.can_view(removal):
            raise PermissionDeniedError("You are not allowed to view this removal")

        return removal

    @_operation("list_removals")
    def list_removals(self, actor, *, status: Optional[str] = None) -> List[Removal]:
        """List the removals visible to the actor, newest first."""
        checker = self._checker(actor)
        removals = [r for r in self.repository.list_all() if self._is_listed(checker, r)]
        if status:
            removals = [r for r in removals if r.status == status]
        return removals

    def get_allowed_transitions(self, actor, removal_id: UUID) -> List[WorkflowTransition]:
        """Transitions the actor may take from the removal's current status.

        Advisory only; returns an empty list for anonymous callers and
        unknown removals.
        """
        if actor is None:
            return []
        removal = self.repository.get(removal_id)
        if removal is None:
            return []
        return RemovalStateMachine(removal, PermissionChecker.for_user(actor)).get_available_transitions()

    # ------------------------------------------------------------------
    # Drafts
    # ------------------------------------------------------------------

    @_operation("create")
    def create(
        self,
        actor,
        removal_type: str,
        date_from: date,
        date_to: Optional[date] = None,
        employee: Optional[str] = None,
        department_id: Optional[UUID] = None,
        items: Optional[Iterable[Mapping[str, Any]]] = None,
    ) -> Removal:
        """
        Create a new removal in DRAFT.

        Items may be empty at this point; submission requires at least one.

        Raises:
            AuthenticationRequiredError: No actor
            PermissionDeniedError: Actor lacks create_removal and admin_access
            RemovalValidationError: Missing type-specific fields or bad items
        """
        checker = self._checker(actor)

        if not checker.has_any_permission([PermissionName.CREATE_REMOVAL, PermissionName.ADMIN_ACCESS]):
            raise PermissionDeniedError(
                "Creating removals requires create_removal",
                required_permission=PermissionName.CREATE_REMOVAL.value,
            )

        removal_type = self._parse_removal_type(removal_type)
        self._check_required_fields(removal_type, date_from, date_to, employee, department_id)
        self._check_department(department_id)
        new_items = self._build_items(items or [])

        now = datetime.utcnow()
        removal = Removal(
            requester_id=actor.id,
            removal_type=removal_type.value,
            date_from=date_from,
            date_to=date_to,
            employee=employee,
            department_id=department_id,
            status=RemovalStatus.DRAFT.value,
            created_at=now,
            updated_at=now,
            items=new_items,
        )
        self.repository.add(removal)

        logger.info("Removal %s created by user %s (%s)", removal.id, actor.id, removal_type.value)
        return removal

    @_operation("update")
    def update(self, actor, removal_id: UUID, **changes: Any) -> Removal:
        """
        Edit a DRAFT removal.

        Only the given fields change; passing ``items`` replaces the whole
        list.

        Raises:
            InvalidStateError: Removal is no longer a draft
            PermissionDeniedError: Actor is neither the requester nor an admin
            RemovalValidationError: Unknown field or bad value
        """
        checker = self._checker(actor)
        removal = self._load(removal_id)

        if removal.status != RemovalStatus.DRAFT:
            raise InvalidStateError("Can only update draft removals", current_state=removal.status)

        if not checker.is_owner_or_admin(removal):
            raise PermissionDeniedError("Only the requester can edit this removal")

        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise RemovalValidationError(
                f"Cannot update field(s): {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )

        if "department_id" in changes:
            self._check_department(changes["department_id"])
        new_items = self._build_items(changes["items"]) if changes.get("items") is not None else None

        if changes.get("date_from") is not None:
            removal.date_from = changes["date_from"]
        for field in ("date_to", "employee", "department_id"):
            if field in changes:
                setattr(removal, field, changes[field])
        if new_items is not None:
            removal.items = new_items
        removal.updated_at = datetime.utcnow()

        self.repository.save(removal)
        logger.info("Removal %s updated by user %s", removal.id, actor.id)
        return removal

    @_operation("submit")
    def submit(self, actor, removal_id: UUID) -> Removal:
        """
        Submit a draft into the approval pipeline (DRAFT -> PENDING_LEVEL_2).

        No approval is recorded; submission is a requester action.
        """
        checker = self._checker(actor)
        removal = self._load(removal_id)

        if removal.status != RemovalStatus.DRAFT:
            raise InvalidStateError("Can only submit draft removals", current_state=removal.status)

        if not checker.is_owner_or_admin(removal):
            raise PermissionDeniedError("Only the requester can submit this removal")

        if not removal.items:
            raise RemovalValidationError("At least one item is required", field="items")

        self._check_required_fields(
            RemovalType(removal.removal_type),
            removal.date_from,
            removal.date_to,
            removal.employee,
            removal.department_id,
        )

        RemovalStateMachine(removal, checker).transition(RemovalStatus.PENDING_LEVEL_2)
        self.repository.save(removal)

        logger.info("Removal %s submitted by user %s", removal.id, actor.id)
        return removal

    # ------------------------------------------------------------------
    # Approval pipeline
    # ------------------------------------------------------------------

    @_operation("approve")
    def approve(
        self,
        actor,
        removal_id: UUID,
        level: int,
        signature: str,
        comments: Optional[str] = None,
    ) -> Removal:
        """
        Approve a removal at a pipeline level (2-5).

        Checks, in order: the level's approval permission, the expected
        status for the level, and for level 2 department membership.
        override_workflow satisfies all three; when it is what authorizes the
        action, the override shortcut edge takes the removal straight to
        APPROVED and the approval records the override.

        Raises:
            PermissionDeniedError: Missing permission, or wrong department at level 2
            InvalidStateError: Removal is not awaiting this level
            RemovalValidationError: Unknown level or empty signature
        """
        checker = self._checker(actor)
        stage = self._approval_level(level)
        removal = self._load(removal_id)

        has_level_permission = checker.has_permission(stage.required_permission)
        if not has_level_permission and not checker.can_override:
            raise PermissionDeniedError(
                f"Approving at level {level} requires {stage.required_permission.value}",
                required_permission=stage.required_permission.value,
            )

        at_expected_status = removal.status == stage.from_step
        if not at_expected_status and not checker.can_override:
            raise InvalidStateError(
                f"Removal is not at the expected status for level {level} approval",
                current_state=removal.status,
            )

        in_department = True
        if level == 2 and removal.department_id is not None:
            in_department = checker.in_department(removal.department_id)
            if not in_department and not checker.can_override:
                raise PermissionDeniedError(
                    "You can only approve removals from your department",
                    required_permission=stage.required_permission.value,
                )

        signature = self._require_text(signature, "signature")

        override_used = not (has_level_permission and at_expected_status and in_department)
        machine = RemovalStateMachine(removal, checker)
        if override_used:
            rule = machine.transition(RemovalStatus.APPROVED, override=True)
        else:
            rule = machine.transition(stage.to_step)

        now = datetime.utcnow()
        removal.record_approval(Approval(
            level=level,
            approved=True,
            signature=signature,
            signature_date=now,
            comments=comments,
            approved_by_id=actor.id,
            created_at=now,
            override_by_id=actor.id if override_used else None,
            override_at=now if override_used else None,
        ))
        self.repository.save(removal)

        logger.info(
            "Removal %s approved at level %d by user %s (%s -> %s%s)",
            removal.id, level, actor.id, rule.from_step.value, rule.to_step.value,
            ", override" if override_used else "",
        )
        return removal

    @_operation("reject")
    def reject(
        self,
        actor,
        removal_id: UUID,
        level: int,
        rejection_reason: str,
        signature: str,
    ) -> Removal:
        """
        Reject a removal at a pipeline level (2-5).

        Unlike approve, the current status is not compared with the level:
        any holder of the level's permission can reject, and the removal
        moves to REJECTED unconditionally.
        """
        checker = self._checker(actor)
        stage = self._approval_level(level)
        removal = self._load(removal_id)

        has_level_permission = checker.has_permission(stage.required_permission)
        if not has_level_permission and not checker.can_override:
            raise PermissionDeniedError(
                f"Rejecting at level {level} requires {stage.required_permission.value}",
                required_permission=stage.required_permission.value,
            )

        rejection_reason = self._require_text(rejection_reason, "rejection_reason")
        signature = self._require_text(signature, "signature")

        from_state = removal.status
        if not can_transition(from_state, RemovalStatus.REJECTED):
            logger.info("Removal %s rejected from %s, outside the transition table", removal.id, from_state)

        now = datetime.utcnow()
        override_used = not has_level_permission
        removal.status = RemovalStatus.REJECTED.value
        removal.rejection_reason = rejection_reason
        removal.updated_at = now
        removal.record_approval(Approval(
            level=level,
            approved=False,
            rejection_reason=rejection_reason,
            signature=signature,
            signature_date=now,
            approved_by_id=actor.id,
            created_at=now,
            override_by_id=actor.id if override_used else None,
            override_at=now if override_used else None,
        ))
        self.repository.save(removal)

        logger.info(
            "Removal %s rejected at level %d by user %s (%s -> REJECTED)",
            removal.id, level, actor.id, from_state,
        )
        return removal

    # ------------------------------------------------------------------
    # Returns and extensions
    # ------------------------------------------------------------------

    @_operation("record_return")
    def record_return(
        self,
        actor,
        removal_id: UUID,
        return_date: date,
        condition: str,
        notes: Optional[str] = None,
    ) -> Removal:
        """Record that a returnable asset came back (APPROVED -> RETURNED)."""
        checker = self._checker(actor)
        removal = self._load(removal_id)

        self._require_any(checker, PermissionName.RECORD_RETURN, PermissionName.ADMIN_ACCESS)
        self._require_approved_returnable(removal, "record returns")

        if return_date is None:
            raise RemovalValidationError("Return date is required", field="return_date")
        condition = self._require_text(condition, "condition")

        RemovalStateMachine(removal, checker).transition(RemovalStatus.RETURNED)
        removal.return_record = ReturnRecord(
            return_date=return_date,
            condition=condition,
            notes=notes,
            recorded_by_id=actor.id,
            created_at=datetime.utcnow(),
        )
        self.repository.save(removal)

        logger.info("Return recorded for removal %s by user %s", removal.id, actor.id)
        return removal

    @_operation("request_extension")
    def request_extension(self, actor, removal_id: UUID, new_date: date) -> Removal:
        """
        Ask for a new return date (APPROVED -> PENDING_LEVEL_2_RECHECK).

        ``date_to`` keeps its value until the extension is approved.
        """
        checker = self._checker(actor)
        removal = self._load(removal_id)

        self._require_any(checker, PermissionName.MANAGE_EXTENSION, PermissionName.ADMIN_ACCESS)
        self._require_approved_returnable(removal, "request extensions")

        if not removal.date_to:
            raise PreconditionFailedError("Removal does not have a return date", removal_id=str(removal.id))

        if removal.pending_extension is not None:
            raise InvalidStateError("An extension request is already pending", current_state=removal.status)

        if new_date is None:
            raise RemovalValidationError("New return date is required", field="new_date")

        RemovalStateMachine(removal, checker).transition(RemovalStatus.PENDING_LEVEL_2_RECHECK)
        removal.add_extension_request(ExtensionRequest(
            original_date=removal.date_to,
            new_date=new_date,
            status=ExtensionStatus.PENDING.value,
            requested_by_id=actor.id,
            created_at=datetime.utcnow(),
        ))
        self.repository.save(removal)

        logger.info(
            "Extension requested for removal %s by user %s (%s -> %s)",
            removal.id, actor.id, removal.date_to, new_date,
        )
        return removal

    @_operation("approve_extension")
    def approve_extension(self, actor, removal_id: UUID, extension_id: UUID) -> Removal:
        """Accept a pending extension: the removal's return date becomes the new date."""
        removal, extension = self._resolve_extension(actor, removal_id, extension_id, ExtensionStatus.APPROVED)
        removal.date_to = extension.new_date
        self.repository.save(removal)

        logger.info("Extension %s approved for removal %s by user %s", extension.id, removal.id, actor.id)
        return removal

    @_operation("reject_extension")
    def reject_extension(self, actor, removal_id: UUID, extension_id: UUID) -> Removal:
        """Refuse a pending extension: the original return date stands."""
        removal, extension = self._resolve_extension(actor, removal_id, extension_id, ExtensionStatus.REJECTED)
        self.repository.save(removal)

        logger.info("Extension %s rejected for removal %s by user %s", extension.id, removal.id, actor.id)
        return removal

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_extension(self, actor, removal_id: UUID, extension_id: UUID, outcome: ExtensionStatus):
        """Validate a re-check and apply its outcome to the extension and removal."""
        checker = self._checker(actor)
        removal = self._load(removal_id)

        self._require_any(checker, PermissionName.RECHECK_EXTENSION, PermissionName.ADMIN_ACCESS)

        if removal.status != RemovalStatus.PENDING_LEVEL_2_RECHECK:
            raise InvalidStateError(
                "Can only resolve extensions for removals in recheck status",
                current_state=removal.status,
            )

        extension = removal.find_extension(extension_id)
        if extension is None:
            raise NotFoundError(f"Extension request {extension_id} not found", extension_id=str(extension_id))

        if extension.status != ExtensionStatus.PENDING:
            raise InvalidStateError(
                f"Extension request is already {extension.status.lower()}",
                current_state=removal.status,
            )

        RemovalStateMachine(removal, checker).transition(RemovalStatus.APPROVED)
        extension.status = outcome.value
        extension.recheck_status = outcome.value
        extension.recheck_by_id = actor.id
        extension.recheck_at = datetime.utcnow()
        return removal, extension

    def _checker(self, actor) -> PermissionChecker:
        if actor is None:
            raise AuthenticationRequiredError()
        return PermissionChecker.for_user(actor)

    def _load(self, removal_id: UUID, *, for_update: bool = True) -> Removal:
        removal = self.repository.get(removal_id, for_update=for_update)
        if removal is None:
            raise NotFoundError(f"Removal {removal_id} not found", removal_id=str(removal_id))
        return removal

    @staticmethod
    def _approval_level(level: int):
        stage = get_approval_level(level)
        if stage is None:
            raise RemovalValidationError(f"Unknown approval level: {level}", field="level")
        return stage

    @staticmethod
    def _require_any(checker: PermissionChecker, *permissions: PermissionName) -> None:
        if not checker.has_any_permission(permissions):
            raise PermissionDeniedError(
                f"Requires one of: {', '.join(p.value for p in permissions)}",
                required_permission=permissions[0].value,
            )

    @staticmethod
    def _require_approved_returnable(removal: Removal, action: str) -> None:
        if removal.status != RemovalStatus.APPROVED or removal.removal_type != RemovalType.RETURNABLE:
            raise InvalidStateError(
                f"Can only {action} for approved returnable items",
                current_state=removal.status,
            )

    @staticmethod
    def _require_text(value: Optional[str], field: str) -> str:
        if value is None or not value.strip():
            raise RemovalValidationError(f"{field.replace('_', ' ').capitalize()} is required", field=field)
        return value.strip()

    @staticmethod
    def _parse_removal_type(removal_type) -> RemovalType:
        try:
            return RemovalType(removal_type)
        except ValueError:
            raise RemovalValidationError(f"Unknown removal type: {removal_type}", field="removal_type")

    @staticmethod
    def _check_required_fields(
        removal_type: RemovalType,
        date_from: Optional[date],
        date_to: Optional[date],
        employee: Optional[str],
        department_id: Optional[UUID],
    ) -> None:
        if date_from is None:
            raise RemovalValidationError("Start date is required", field="date_from")

        if removal_type == RemovalType.RETURNABLE:
            if not date_to or not department_id:
                raise RemovalValidationError(
                    "Returnable items require dateTo and departmentId",
                    field="date_to" if not date_to else "department_id",
                )
            if date_to < date_from:
                raise RemovalValidationError("Return date cannot precede the start date", field="date_to")

        elif not employee or not employee.strip():
            raise RemovalValidationError("Non-returnable items require employee name", field="employee")

    def _check_department(self, department_id: Optional[UUID]) -> None:
        if department_id is not None and self.repository.get_department(department_id) is None:
            raise RemovalValidationError(f"Unknown department: {department_id}", field="department_id")

    def _build_items(self, items: Iterable[Mapping[str, Any]]) -> List[RemovalItem]:
        """Validate item input and build ordered RemovalItem rows."""
        built = []
        for position, item in enumerate(items):
            description = (item.get("description") or "").strip()
            if not description:
                raise RemovalValidationError(f"Item {position + 1} needs a description", field="items")

            try:
                reason_id = UUID(str(item.get("removal_reason_id")))
            except ValueError:
                raise RemovalValidationError(f"Item {position + 1} has an invalid removal reason", field="items")

            reason = self.repository.get_removal_reason(reason_id)
            if reason is None:
                raise RemovalValidationError(f"Item {position + 1} has an unknown removal reason", field="items")

            custom_reason = item.get("custom_reason") if reason.allow_custom else None
            built.append(RemovalItem(
                position=position,
                description=description,
                removal_reason_id=reason.id,
                custom_reason=custom_reason or None,
            ))
        return built

    @staticmethod
    def _is_listed(checker: PermissionChecker, removal: Removal) -> bool:
        """Read-side visibility rules for listing removals."""
        if checker.is_admin:
            return True

        if removal.requester_id == checker.user_id and checker.has_permission(PermissionName.VIEW_OWN_REMOVAL):
            return True

        if checker.has_permission(PermissionName.VIEW_DEPARTMENT_REMOVAL) and checker.in_department(removal.department_id):
            return True

        if checker.has_permission(PermissionName.VIEW_LEVEL_3_REMOVAL) and removal.status == RemovalStatus.PENDING_LEVEL_3:
            return True

        if checker.has_permission(PermissionName.VIEW_LEVEL_4_REMOVAL) and removal.status == RemovalStatus.PENDING_LEVEL_4:
            return True

        if checker.has_permission(PermissionName.VIEW_SECURITY_REMOVAL) and (
            removal.status == RemovalStatus.PENDING_SECURITY
            or (removal.status == RemovalStatus.APPROVED and removal.removal_type == RemovalType.RETURNABLE)
        ):
            return True

        return False
