"""Report references for removals.

Documents themselves are produced elsewhere; this service authorizes the
request and hands back the stable reference the document lives under.
"""

import logging
from enum import Enum
from typing import Optional
from uuid import UUID

from gatepass.core.errors import AuthenticationRequiredError, NotFoundError, PermissionDeniedError, RemovalValidationError
from gatepass.core.rbac.checker import PermissionChecker
from gatepass.core.rbac.permissions import PermissionName
from gatepass.db.repository import RemovalRepository

logger = logging.getLogger(__name__)


class ReportType(str, Enum):
    APPROVAL_FORM = "approval_form"
    RETURN_RECEIPT = "return_receipt"
    EXTENSION_FORM = "extension_form"


class ReportService:
    """Issues report references for removals."""

    def __init__(self, repository: RemovalRepository, base_path: Optional[str] = None):
        if base_path is None:
            from gatepass.core.config import get_settings
            base_path = get_settings().report_base_path
        self.repository = repository
        self.base_path = base_path.rstrip("/")

    def generate_report(self, actor, removal_id: UUID, report_type: str) -> str:
        """
        Get the reference for a removal report.

        Raises:
            AuthenticationRequiredError: No actor
            PermissionDeniedError: Actor lacks create_report and admin_access
            RemovalValidationError: Unknown report type
            NotFoundError: Removal does not exist
        """
        if actor is None:
            raise AuthenticationRequiredError()

        checker = PermissionChecker.for_user(actor)
        if not checker.has_any_permission([PermissionName.CREATE_REPORT, PermissionName.ADMIN_ACCESS]):
            raise PermissionDeniedError(
                "Generating reports requires create_report",
                required_permission=PermissionName.CREATE_REPORT.value,
            )

        try:
            report_type = ReportType(report_type)
        except ValueError:
            raise RemovalValidationError(f"Unknown report type: {report_type}", field="report_type")

        removal = self.repository.get(removal_id)
        if removal is None:
            raise NotFoundError(f"Removal {removal_id} not found", removal_id=str(removal_id))

        reference = f"{self.base_path}/{report_type.value}/{removal.id}"
        logger.info("Report %s issued to user %s", reference, actor.id)
        return reference
