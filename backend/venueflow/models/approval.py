"""Approval ORM model: one row per reviewer decision."""
import uuid
import enum
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from venueflow.database import Base


class Decision(str, enum.Enum):
    approved = "approved"
    needs_revisions = "needs_revisions"
    rejected = "rejected"


class Approval(Base):
    __tablename__ = "approvals"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    decision = Column(SAEnum(Decision), nullable=False)
    reviewer_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    feedback_text = Column(Text, nullable=True)
    decided_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
