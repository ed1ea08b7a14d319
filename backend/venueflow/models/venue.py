"""Venue, VenueArea and VenueDefaultReviewer ORM models."""
import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from venueflow.database import Base


class Venue(Base):
    __tablename__ = "venues"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(150), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    areas = relationship("VenueArea", back_populates="venue", cascade="all, delete-orphan")
    default_reviewers = relationship(
        "VenueDefaultReviewer",
        cascade="all, delete-orphan",
        order_by="VenueDefaultReviewer.id",
    )


class VenueArea(Base):
    """A named bookable sub-space within a venue."""

    __tablename__ = "venue_areas"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    venue_id = Column(String(36), ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(150), nullable=False)
    capacity = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    venue = relationship("Venue", back_populates="areas")


class VenueDefaultReviewer(Base):
    """Ordered default reviewers for a venue; the autoincrement id is the insertion order."""

    __tablename__ = "venue_default_reviewers"
    __table_args__ = (UniqueConstraint("venue_id", "reviewer_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    venue_id = Column(String(36), ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True)
    reviewer_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
