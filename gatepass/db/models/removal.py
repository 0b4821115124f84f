"""Removal aggregate database models.

A removal (gate pass) owns its items, its append-only approval trail, an
optional return record and its extension requests.
"""

import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import Column, String, DateTime, Date, Boolean, ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import relationship

from gatepass.db.base import Base


class RemovalReason(Base):
    """Reference list of reasons an asset leaves the premises."""
    __tablename__ = "removal_reasons"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), unique=True, nullable=False)
    allow_custom = Column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<RemovalReason {self.name}>"


class Removal(Base):
    """
    Request to take assets off premises.

    ``version`` is the optimistic concurrency counter: a flush that finds a
    different version in the database fails with StaleDataError.
    """
    __tablename__ = "removals"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    requester_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    removal_type = Column(String(20), nullable=False)
    date_from = Column(Date, nullable=False)
    date_to = Column(Date, nullable=True)        # returnable only
    employee = Column(String(255), nullable=True)  # non-returnable only
    department_id = Column(Uuid, ForeignKey("departments.id", ondelete="SET NULL"), nullable=True, index=True)

    # Workflow state
    status = Column(String(50), nullable=False, default="DRAFT", index=True)
    rejection_reason = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    version = Column(Integer, nullable=False)

    # Relationships
    requester = relationship("User", foreign_keys=[requester_id])
    department = relationship("Department")
    items = relationship(
        "RemovalItem",
        back_populates="removal",
        order_by="RemovalItem.position",
        cascade="all, delete-orphan",
    )
    approvals = relationship(
        "Approval",
        back_populates="removal",
        order_by="Approval.sequence",
        cascade="save-update, merge",
    )
    return_record = relationship(
        "ReturnRecord",
        back_populates="removal",
        uselist=False,
        cascade="save-update, merge",
    )
    extension_requests = relationship(
        "ExtensionRequest",
        back_populates="removal",
        order_by="ExtensionRequest.sequence",
        cascade="save-update, merge",
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def pending_extension(self):
        """The extension request awaiting re-check, if any."""
        for extension in self.extension_requests:
            if extension.status == "PENDING":
                return extension
        return None

    def find_extension(self, extension_id: uuid.UUID):
        for extension in self.extension_requests:
            if extension.id == extension_id:
                return extension
        return None

    def record_approval(self, approval) -> None:
        """Append an approval to the trail. Existing entries are never touched."""
        approval.sequence = len(self.approvals)
        self.approvals.append(approval)

    def add_extension_request(self, extension) -> None:
        extension.sequence = len(self.extension_requests)
        self.extension_requests.append(extension)

    def __repr__(self) -> str:
        return f"<Removal {self.id} {self.removal_type} [{self.status}]>"


class RemovalItem(Base):
    __tablename__ = "removal_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    removal_id = Column(Uuid, ForeignKey("removals.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    description = Column(Text, nullable=False)
    removal_reason_id = Column(Uuid, ForeignKey("removal_reasons.id"), nullable=False)
    custom_reason = Column(Text, nullable=True)  # only kept when the reason allows it

    # Relationships
    removal = relationship("Removal", back_populates="items")
    removal_reason = relationship("RemovalReason")

    @property
    def reason_label(self) -> Optional[str]:
        if self.custom_reason:
            return self.custom_reason
        return self.removal_reason.name if self.removal_reason else None
