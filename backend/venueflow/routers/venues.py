"""Venue API routes: venues, their areas and default reviewers."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from venueflow.database import get_db
from venueflow.models.user import User
from venueflow.models.venue import Venue, VenueArea, VenueDefaultReviewer
from venueflow.schemas.venue import (
    DefaultReviewerCreate,
    DefaultReviewerOut,
    VenueAreaCreate,
    VenueAreaOut,
    VenueCreate,
    VenueOut,
)
from venueflow.services.reviewer_resolver import REVIEWER_ROLES

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_venue_or_404(db: Session, venue_id: str) -> Venue:
    venue = db.query(Venue).filter(Venue.id == venue_id).first()
    if not venue:
        raise HTTPException(status_code=404, detail="Venue not found")
    return venue


@router.post("/", response_model=VenueOut, status_code=status.HTTP_201_CREATED)
def create_venue(payload: VenueCreate, db: Session = Depends(get_db)):
    venue = Venue(name=payload.name)
    db.add(venue)
    db.commit()
    db.refresh(venue)
    logger.info("Created venue %s (%s)", venue.id, venue.name)
    return venue


@router.get("/", response_model=list[VenueOut])
def list_venues(db: Session = Depends(get_db)):
    return db.query(Venue).order_by(Venue.name).all()


@router.get("/{venue_id}", response_model=VenueOut)
def get_venue(venue_id: str, db: Session = Depends(get_db)):
    return _get_venue_or_404(db, venue_id)


@router.post("/{venue_id}/areas", response_model=VenueAreaOut, status_code=status.HTTP_201_CREATED)
def create_area(venue_id: str, payload: VenueAreaCreate, db: Session = Depends(get_db)):
    """Add a bookable area to a venue."""
    _get_venue_or_404(db, venue_id)
    area = VenueArea(venue_id=venue_id, name=payload.name, capacity=payload.capacity)
    db.add(area)
    db.commit()
    db.refresh(area)
    logger.info("Added area %s to venue %s", area.id, venue_id)
    return area


@router.get("/{venue_id}/areas", response_model=list[VenueAreaOut])
def list_areas(venue_id: str, db: Session = Depends(get_db)):
    _get_venue_or_404(db, venue_id)
    return db.query(VenueArea).filter(VenueArea.venue_id == venue_id).order_by(VenueArea.name).all()


@router.post(
    "/{venue_id}/default-reviewers",
    response_model=DefaultReviewerOut,
    status_code=status.HTTP_201_CREATED,
)
def add_default_reviewer(venue_id: str, payload: DefaultReviewerCreate, db: Session = Depends(get_db)):
    """Append a reviewer to the venue's default list; order of insertion is resolution order."""
    _get_venue_or_404(db, venue_id)
    reviewer = db.query(User).filter(User.id == payload.reviewer_id).first()
    if not reviewer:
        raise HTTPException(status_code=404, detail="Reviewer not found")
    if reviewer.role not in REVIEWER_ROLES:
        raise HTTPException(status_code=400, detail="Reviewer must have the reviewer or central planner role")

    entry = VenueDefaultReviewer(venue_id=venue_id, reviewer_id=payload.reviewer_id)
    db.add(entry)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Reviewer is already a default for this venue")
    db.refresh(entry)
    return entry


@router.get("/{venue_id}/default-reviewers", response_model=list[DefaultReviewerOut])
def list_default_reviewers(venue_id: str, db: Session = Depends(get_db)):
    return _get_venue_or_404(db, venue_id).default_reviewers
