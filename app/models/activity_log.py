"""
ActivityLog database model
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from app.core.database import Base


class ActivityLog(Base):
    """
    Audit trail entry for a box.

    Written in the same transaction as the change it records (status change,
    checklist toggle, document added/removed/re-classified).
    """
    __tablename__ = "activity_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    box_id = Column(String(36), ForeignKey("boxes.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False)
    action = Column(String, nullable=False)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    box = relationship("Box", back_populates="activity_logs")

    def __repr__(self):
        return f"<ActivityLog(box_id={self.box_id}, action={self.action})>"
