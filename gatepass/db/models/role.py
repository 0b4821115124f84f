import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, JSON, Integer, Text, Uuid
from sqlalchemy.orm import relationship

from gatepass.db.base import Base
from gatepass.db.models.user import user_roles


class Role(Base):
    __tablename__ = "roles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(50), unique=True, nullable=False)
    level = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)
    permissions = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    users = relationship("User", secondary=user_roles, back_populates="roles")

    def __repr__(self) -> str:
        return f"<Role {self.name} (level {self.level})>"
