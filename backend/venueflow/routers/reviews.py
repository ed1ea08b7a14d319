"""Review API routes: decisions and reviewer assignment."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from venueflow.database import get_db
from venueflow.models.user import User
from venueflow.routers.deps import get_actor
from venueflow.routers.events import workflow_result_out
from venueflow.schemas.event import DecisionInput, ReviewerAssignmentInput, WorkflowResultOut
from venueflow.services import event_lifecycle

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/{event_id}/decision", response_model=WorkflowResultOut)
def decide(
    event_id: str,
    payload: DecisionInput,
    actor: User = Depends(get_actor),
    db: Session = Depends(get_db),
):
    """Approve, reject or send back for revisions (assigned reviewer or central planner)."""
    return workflow_result_out(event_lifecycle.decide(db, event_id, payload, actor))


@router.post("/{event_id}/assign", response_model=WorkflowResultOut)
def assign_reviewer(
    event_id: str,
    payload: ReviewerAssignmentInput,
    actor: User = Depends(get_actor),
    db: Session = Depends(get_db),
):
    return workflow_result_out(event_lifecycle.assign_reviewer(db, event_id, payload.reviewer_id, actor))
