"""Notification ORM model: queue consumed by the reminder dispatcher."""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from venueflow.database import Base


class NotificationType(str, enum.Enum):
    draft_reminder = "draft_reminder"


class NotificationStatus(str, enum.Enum):
    queued = "queued"
    sending = "sending"
    sent = "sent"
    failed = "failed"
    cancelled = "cancelled"


PENDING_STATUSES = (NotificationStatus.queued, NotificationStatus.sending)


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(SAEnum(NotificationType), nullable=False)
    status = Column(SAEnum(NotificationStatus), nullable=False, default=NotificationStatus.queued, index=True)
    # Duplicated out of payload so the de-duplication check is a plain column filter.
    event_id = Column(String(36), nullable=True, index=True)
    payload = Column(JSON, nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
