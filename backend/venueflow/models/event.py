"""Event and EventArea ORM models."""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from venueflow.database import Base


class EventStatus(str, enum.Enum):
    draft = "draft"
    submitted = "submitted"
    needs_revisions = "needs_revisions"
    approved = "approved"
    rejected = "rejected"
    completed = "completed"


EDITABLE_STATUSES = (EventStatus.draft, EventStatus.needs_revisions)
DECIDABLE_STATUSES = (EventStatus.submitted, EventStatus.needs_revisions)


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(150), nullable=False)
    venue_id = Column(String(36), ForeignKey("venues.id"), nullable=False, index=True)
    start_at = Column(DateTime(timezone=True), nullable=False)
    end_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(SAEnum(EventStatus), nullable=False, default=EventStatus.draft, index=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=False)
    assigned_reviewer_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    venue = relationship("Venue")
    areas = relationship(
        "EventArea",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="EventArea.venue_area_id",
    )

    @property
    def area_ids(self) -> list[str]:
        return [link.venue_area_id for link in self.areas]

    @property
    def venue_name(self):
        return self.venue.name if self.venue is not None else None


class EventArea(Base):
    __tablename__ = "event_areas"

    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), primary_key=True)
    venue_area_id = Column(String(36), ForeignKey("venue_areas.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    event = relationship("Event", back_populates="areas")
