"""Event API routes: delegates to event_lifecycle for every transition."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from venueflow.database import get_db
from venueflow.models.event import EventStatus
from venueflow.models.user import User
from venueflow.routers.deps import get_actor
from venueflow.schemas.event import EventDraftInput, EventOut, EventVersionOut, WorkflowResultOut
from venueflow.services import event_lifecycle, version_store
from venueflow.services.event_lifecycle import WorkflowResult

logger = logging.getLogger(__name__)
router = APIRouter()


def workflow_result_out(result: WorkflowResult) -> WorkflowResultOut:
    return WorkflowResultOut(
        event=EventOut.model_validate(result.event),
        version=result.version,
        reviewer_id=result.reviewer_id,
        warnings=result.warnings,
    )


@router.post("/", response_model=WorkflowResultOut, status_code=status.HTTP_201_CREATED)
def create_draft(payload: EventDraftInput, actor: User = Depends(get_actor), db: Session = Depends(get_db)):
    """Create a draft; ``intent=submit`` chains straight into submission."""
    return workflow_result_out(event_lifecycle.create_draft(db, payload, actor))


@router.get("/", response_model=list[EventOut])
def list_events(
    status_filter: Optional[EventStatus] = Query(None, alias="status"),
    venue_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """List events with optional status and venue filters."""
    return event_lifecycle.list_events(db, status=status_filter, venue_id=venue_id)


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    return event_lifecycle.get_event(db, event_id)


@router.put("/{event_id}", response_model=WorkflowResultOut)
def update_draft(
    event_id: str,
    payload: EventDraftInput,
    actor: User = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Replace a draft's fields and areas (owner or central planner only)."""
    return workflow_result_out(event_lifecycle.update_draft(db, event_id, payload, actor))


@router.post("/{event_id}/submit", response_model=WorkflowResultOut)
def submit_event(event_id: str, actor: User = Depends(get_actor), db: Session = Depends(get_db)):
    return workflow_result_out(event_lifecycle.submit(db, event_id, actor))


@router.post("/{event_id}/clone", response_model=WorkflowResultOut, status_code=status.HTTP_201_CREATED)
def clone_event(event_id: str, actor: User = Depends(get_actor), db: Session = Depends(get_db)):
    """Copy an event into a new unassigned draft (central planners only)."""
    return workflow_result_out(event_lifecycle.clone(db, event_id, actor))


@router.get("/{event_id}/versions", response_model=list[EventVersionOut])
def list_versions(event_id: str, db: Session = Depends(get_db)):
    """Version history, oldest first."""
    event = event_lifecycle.get_event(db, event_id)
    return version_store.list_versions(db, event.id)
