"""Venue-area ownership checks and event-area link writes."""
import logging

from sqlalchemy import delete, insert
from sqlalchemy.orm import Session

from venueflow.models.event import EventArea
from venueflow.models.venue import VenueArea
from venueflow.services.errors import ReferentialError, ValidationFailed

logger = logging.getLogger(__name__)


def count_venue_areas(db: Session, venue_id: str) -> int:
    return db.query(VenueArea).filter(VenueArea.venue_id == venue_id).count()


def validate_area_selection(db: Session, venue_id: str, area_ids: list[str], *, verb: str = "creating the draft") -> None:
    """Ensure the selection is adequate for the venue and owned by it.

    An empty selection is only allowed when the venue has no areas at all.
    Raises before any write happens.
    """
    if not area_ids:
        if count_venue_areas(db, venue_id) > 0:
            raise ValidationFailed(
                "Select at least one area before saving this draft.",
                {"area_ids": f"Select at least one area for this venue before {verb}."},
            )
        return

    areas = db.query(VenueArea).filter(VenueArea.id.in_(area_ids)).all()
    if len(areas) != len(area_ids):
        raise ReferentialError("One or more selected areas could not be found. Refresh and try again.")
    if any(area.venue_id != venue_id for area in areas):
        raise ReferentialError("Selected areas do not belong to the chosen venue.")


def get_event_area_ids(db: Session, event_id: str) -> list[str]:
    rows = db.query(EventArea.venue_area_id).filter(EventArea.event_id == event_id).all()
    return sorted(area_id for (area_id,) in rows)


def link_areas(db: Session, event_id: str, area_ids: list[str]) -> None:
    if not area_ids:
        return
    db.execute(insert(EventArea), [{"event_id": event_id, "venue_area_id": area_id} for area_id in area_ids])
    db.commit()


def replace_areas(db: Session, event_id: str, area_ids: list[str]) -> None:
    """Swap the event's area links in a single commit."""
    db.execute(delete(EventArea).where(EventArea.event_id == event_id))
    if area_ids:
        db.execute(insert(EventArea), [{"event_id": event_id, "venue_area_id": area_id} for area_id in area_ids])
    db.commit()
    logger.info("Event %s areas set to %s", event_id, area_ids)
