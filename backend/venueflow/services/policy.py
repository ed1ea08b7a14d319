"""Authorization policy: the only place role and ownership rules live."""
import enum
import logging
from typing import Optional

from sqlalchemy.orm import Session

from venueflow.models.event import Event
from venueflow.models.user import User, UserRole
from venueflow.services.errors import NotAuthenticated, PermissionDenied

logger = logging.getLogger(__name__)


class WorkflowAction(str, enum.Enum):
    create = "create"
    update = "update"
    submit = "submit"
    decide = "decide"
    clone = "clone"
    assign_reviewer = "assign_reviewer"


def load_actor(db: Session, actor_id: str) -> User:
    """Resolve the request actor's profile; unknown ids are unauthenticated."""
    actor = db.query(User).filter(User.id == actor_id).first()
    if not actor:
        raise NotAuthenticated("You must be signed in to perform this action.")
    return actor


def denial_reason(
    actor: User,
    action: WorkflowAction,
    event: Optional[Event] = None,
    venue_id: Optional[str] = None,
) -> Optional[str]:
    """Return why ``actor`` may not perform ``action``, or None if allowed."""
    is_planner = actor.role == UserRole.central_planner
    is_manager = actor.role == UserRole.venue_manager
    is_reviewer = actor.role == UserRole.reviewer

    if action == WorkflowAction.create:
        if not (is_planner or is_manager):
            return "You do not have permission to create event drafts."
        if is_manager and actor.venue_id and venue_id and actor.venue_id != venue_id:
            return "You can only create drafts for your assigned venue."
        return None

    if action in (WorkflowAction.update, WorkflowAction.submit):
        is_owner = event is not None and event.created_by == actor.id
        if is_planner or (is_manager and is_owner):
            return None
        if action == WorkflowAction.update:
            return "You do not have permission to update this event."
        return "You do not have permission to submit this draft."

    if action == WorkflowAction.decide:
        if is_planner:
            return None
        if not is_reviewer:
            return "You do not have permission to record a decision."
        if event is None or event.assigned_reviewer_id != actor.id:
            return "You are not assigned to this event. Ask a central planner to reassign it before deciding."
        return None

    if action == WorkflowAction.clone:
        return None if is_planner else "Only central planners can clone events."

    if action == WorkflowAction.assign_reviewer:
        return None if (is_planner or is_reviewer) else "You do not have permission to assign reviewers."

    return "Unknown action."


def authorize(
    actor: User,
    action: WorkflowAction,
    *,
    event: Optional[Event] = None,
    venue_id: Optional[str] = None,
) -> None:
    reason = denial_reason(actor, action, event=event, venue_id=venue_id)
    if reason:
        logger.info("Denied %s for user %s (%s): %s", action.value, actor.id, actor.role.value, reason)
        raise PermissionDenied(reason)
