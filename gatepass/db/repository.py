"""Repository interface over Removal aggregates.

The lifecycle service depends only on ``RemovalRepository``; the SQLAlchemy
implementation below is the one the application wires in.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from gatepass.core.errors import ConflictError
from gatepass.db.models import Department, Removal, RemovalReason


class RemovalRepository(ABC):
    """Abstract store of Removal aggregates keyed by id."""

    @abstractmethod
    def get(self, removal_id: UUID, *, for_update: bool = False) -> Optional[Removal]:
        """Load a removal.

        With ``for_update`` the removal is locked for the rest of the
        transaction (where the backend supports it) and reloaded from the
        store, discarding any cached state.
        """

    @abstractmethod
    def add(self, removal: Removal) -> Removal:
        """Persist a new removal."""

    @abstractmethod
    def save(self, removal: Removal) -> Removal:
        """Persist changes to a removal.

        Raises:
            ConflictError: If another writer changed the removal first
        """

    @abstractmethod
    def list_all(self) -> List[Removal]:
        """All removals, newest first."""

    @abstractmethod
    def get_department(self, department_id: UUID) -> Optional[Department]:
        """Look up a department (reference data)."""

    @abstractmethod
    def get_removal_reason(self, reason_id: UUID) -> Optional[RemovalReason]:
        """Look up a removal reason (reference data)."""


class SqlAlchemyRemovalRepository(RemovalRepository):
    """Removal repository backed by a SQLAlchemy session.

    The session's transaction is owned by the caller: this class flushes but
    never commits or rolls back.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, removal_id: UUID, *, for_update: bool = False) -> Optional[Removal]:
        query = self.db.query(Removal).filter(Removal.id == removal_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        return query.first()

    def add(self, removal: Removal) -> Removal:
        self.db.add(removal)
        self._flush(removal)
        return removal

    def save(self, removal: Removal) -> Removal:
        self._flush(removal)
        return removal

    def list_all(self) -> List[Removal]:
        return self.db.query(Removal).order_by(Removal.created_at.desc()).all()

    def get_department(self, department_id: UUID) -> Optional[Department]:
        return self.db.get(Department, department_id)

    def get_removal_reason(self, reason_id: UUID) -> Optional[RemovalReason]:
        return self.db.get(RemovalReason, reason_id)

    def _flush(self, removal: Removal) -> None:
        try:
            self.db.flush()
        except StaleDataError as e:
            raise ConflictError(
                f"Removal {removal.id} was modified concurrently; retry the operation",
                removal_id=str(removal.id),
            ) from e
