"""Notification API routes: the draft-reminder dispatcher trigger."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from venueflow.database import get_db
from venueflow.services import notification_queue

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/draft-reminders/dispatch")
def dispatch_draft_reminders(db: Session = Depends(get_db)):
    """Send every due draft reminder. Intended to be hit by a scheduler."""
    return notification_queue.dispatch_draft_reminders(db)
