"""Approval trail, return record and extension request models.

Approvals are the removal's audit trail: one row per approval or rejection
event, appended in order and never updated.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Date, Boolean, ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import relationship

from gatepass.db.base import Base


class Approval(Base):
    __tablename__ = "approvals"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    removal_id = Column(Uuid, ForeignKey("removals.id", ondelete="CASCADE"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)

    # Pipeline stage: 2=department, 3=finance, 4=management, 5=security
    level = Column(Integer, nullable=False)
    approved = Column(Boolean, nullable=False)
    rejection_reason = Column(Text, nullable=True)
    comments = Column(Text, nullable=True)

    # Signature
    signature = Column(Text, nullable=False)
    signature_date = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Actor
    approved_by_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Set when override_workflow authorized the action
    override_by_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    override_at = Column(DateTime, nullable=True)

    # Relationships
    removal = relationship("Removal", back_populates="approvals")
    approved_by = relationship("User", foreign_keys=[approved_by_id])
    override_by = relationship("User", foreign_keys=[override_by_id])

    def __repr__(self) -> str:
        verdict = "approved" if self.approved else "rejected"
        return f"<Approval level {self.level} {verdict}>"


class ReturnRecord(Base):
    __tablename__ = "return_records"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    removal_id = Column(Uuid, ForeignKey("removals.id", ondelete="CASCADE"), nullable=False, unique=True)
    return_date = Column(Date, nullable=False)
    condition = Column(String(255), nullable=False)
    notes = Column(Text, nullable=True)
    recorded_by_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    removal = relationship("Removal", back_populates="return_record")
    recorded_by = relationship("User")


class ExtensionRequest(Base):
    """
    Request to push a returnable removal's return date.

    ``status`` and ``recheck_status`` are set together when the department
    re-check resolves.
    """
    __tablename__ = "extension_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    removal_id = Column(Uuid, ForeignKey("removals.id", ondelete="CASCADE"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)

    original_date = Column(Date, nullable=False)
    new_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="PENDING")

    requested_by_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Re-check outcome
    recheck_by_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    recheck_status = Column(String(20), nullable=True)
    recheck_at = Column(DateTime, nullable=True)

    # Relationships
    removal = relationship("Removal", back_populates="extension_requests")
    requested_by = relationship("User", foreign_keys=[requested_by_id])
    recheck_by = relationship("User", foreign_keys=[recheck_by_id])

    def __repr__(self) -> str:
        return f"<ExtensionRequest {self.original_date} -> {self.new_date} [{self.status}]>"
