"""User ORM model: the profile behind every workflow actor."""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from venueflow.database import Base
from venueflow.services.clock import utc_now


class UserRole(str, enum.Enum):
    central_planner = "central_planner"
    venue_manager = "venue_manager"
    reviewer = "reviewer"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), nullable=True, unique=True)
    full_name = Column(String(150), nullable=True)
    role = Column(SAEnum(UserRole), nullable=False, default=UserRole.venue_manager)
    venue_id = Column(String(36), ForeignKey("venues.id"), nullable=True)  # venue managers only
    # Microsecond precision: the planner fallback orders on this column.
    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now())
