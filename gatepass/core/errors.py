"""Error taxonomy for removal workflow operations.

Every lifecycle operation either returns the updated removal or raises one
of these exceptions. Each carries a stable ``code`` that the API layer
returns to clients unchanged.
"""

from typing import Any, Optional


class WorkflowError(Exception):
    """Base class for errors raised by workflow operations."""

    code = "workflow_error"
    retryable = False

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context


class AuthenticationRequiredError(WorkflowError):
    """Raised when an operation is invoked without an actor."""

    code = "unauthenticated"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class PermissionDeniedError(WorkflowError):
    """Raised when the actor lacks the permission, scope or role required."""

    code = "permission_denied"

    def __init__(self, message: str = "Permission denied", *, required_permission: Optional[str] = None):
        super().__init__(message, required_permission=required_permission)
        self.required_permission = required_permission


class InvalidStateError(WorkflowError):
    """Raised when an operation is not valid for the removal's current status."""

    code = "invalid_state"

    def __init__(self, message: str, *, current_state: Optional[str] = None):
        super().__init__(message, current_state=current_state)
        self.current_state = current_state


class RemovalValidationError(WorkflowError):
    """Raised when required fields are missing or malformed."""

    code = "validation_error"

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message, field=field)
        self.field = field


class NotFoundError(WorkflowError):
    """Raised when a removal or one of its extension requests does not exist."""

    code = "not_found"


class PreconditionFailedError(WorkflowError):
    """Raised when the removal lacks data the operation depends on."""

    code = "precondition_failed"


class ConflictError(WorkflowError):
    """Raised when a concurrent writer changed the removal first.

    The whole operation can be retried against fresh state.
    """

    code = "conflict"
    retryable = True
