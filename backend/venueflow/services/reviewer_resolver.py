"""Reviewer resolution: who decides on a submission.

Fallback chain: the event's explicit reviewer, then the venue's first
default reviewer (insertion order), then the earliest-created central
planner. No match is a valid outcome: the submission proceeds unassigned.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from venueflow.models.event import Event
from venueflow.models.user import User, UserRole
from venueflow.models.venue import VenueDefaultReviewer
from venueflow.services import audit_sink, notification_queue
from venueflow.services.errors import ReferentialError, StoreError

logger = logging.getLogger(__name__)

REVIEWER_ROLES = (UserRole.reviewer, UserRole.central_planner)


@dataclass
class ReviewerResolution:
    reviewer_id: Optional[str]
    was_newly_assigned: bool
    audit_recorded: bool = True


def find_candidate(db: Session, venue_id: str) -> Optional[str]:
    """Walk the fallback chain below the explicit assignment."""
    default = (
        db.query(VenueDefaultReviewer)
        .filter(VenueDefaultReviewer.venue_id == venue_id)
        .order_by(VenueDefaultReviewer.id.asc())
        .first()
    )
    if default:
        return default.reviewer_id

    planner = (
        db.query(User)
        .filter(User.role == UserRole.central_planner)
        .order_by(User.created_at.asc(), User.id.asc())
        .first()
    )
    return planner.id if planner else None


def _persist_assignment(
    db: Session,
    event: Event,
    reviewer_id: str,
    actor_id: str,
    previous_reviewer_id: Optional[str] = None,
) -> bool:
    """Write the assignment, then audit and email best-effort. Returns audit success."""
    try:
        event.assigned_reviewer_id = reviewer_id
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError(f"Unable to assign reviewer: {exc}") from exc
    logger.info("Assigned reviewer %s to event %s", reviewer_id, event.id)

    details = {"reviewer_id": reviewer_id}
    if previous_reviewer_id:
        details["previous_reviewer_id"] = previous_reviewer_id
    audited = audit_sink.record(
        db,
        actor_id=actor_id,
        action=audit_sink.REVIEWER_ASSIGNED,
        entity_id=event.id,
        details=details,
    )
    notification_queue.notify_reviewer_assigned(db, event, reviewer_id)
    return audited


def resolve(db: Session, event: Event, actor_id: str) -> ReviewerResolution:
    """Resolve and persist the event's reviewer; idempotent once assigned."""
    if event.assigned_reviewer_id:
        return ReviewerResolution(event.assigned_reviewer_id, False)

    reviewer_id = find_candidate(db, event.venue_id)
    if not reviewer_id:
        logger.warning("No reviewer could be resolved for event %s (venue %s)", event.id, event.venue_id)
        return ReviewerResolution(None, False)

    audited = _persist_assignment(db, event, reviewer_id, actor_id)
    return ReviewerResolution(reviewer_id, True, audit_recorded=audited)


def assign(db: Session, event: Event, reviewer_id: str, actor_id: str) -> ReviewerResolution:
    """Explicitly assign ``reviewer_id``, overriding any previous reviewer."""
    reviewer = db.query(User).filter(User.id == reviewer_id).first()
    if not reviewer:
        raise ReferentialError("Reviewer does not exist.")
    if reviewer.role not in REVIEWER_ROLES:
        raise ReferentialError("Reviewer must have the reviewer or central planner role.")
    if event.assigned_reviewer_id == reviewer_id:
        return ReviewerResolution(reviewer_id, False)

    previous = event.assigned_reviewer_id
    audited = _persist_assignment(db, event, reviewer_id, actor_id, previous_reviewer_id=previous)
    return ReviewerResolution(reviewer_id, True, audit_recorded=audited)
