"""Event lifecycle engine: the draft → submit → decision state machine.

Responsibilities:
- Authorization through the single policy function (services.policy)
- Area adequacy and ownership checks before any write
- Version snapshots for every draft write, submission and decision
- Reviewer resolution on submission
- Audit entries for every transition (best-effort, surfaced as warnings)
- Rollback semantics: create, update and clone are all-or-nothing via a
  compensating saga; submit and decide treat the status write as the commit
  point and report, without reverting, anything that fails after it
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from venueflow.models.approval import Approval, Decision
from venueflow.models.event import (
    DECIDABLE_STATUSES,
    EDITABLE_STATUSES,
    Event,
    EventArea,
    EventStatus,
)
from venueflow.models.event_version import EventVersion
from venueflow.models.user import User
from venueflow.models.venue import Venue
from venueflow.schemas.event import DecisionInput, EventDraftInput
from venueflow.services import (
    area_validator,
    audit_sink,
    notification_queue,
    reviewer_resolver,
    version_store,
)
from venueflow.services.clock import isoformat, utc_now
from venueflow.services.errors import (
    InvalidTransition,
    NotFound,
    PartialFailure,
    ReferentialError,
    StoreError,
    ValidationFailed,
    WorkflowError,
)
from venueflow.services.policy import WorkflowAction, authorize
from venueflow.services.saga import Saga

logger = logging.getLogger(__name__)

COPY_SUFFIX = " (Copy)"
TITLE_MAX_LENGTH = 150
# Review metadata that must not leak from a source event into its clone.
_REVIEW_KEYS = ("submitted_at", "submitted_by", "decision", "decision_note", "decided_by", "decided_at")


@dataclass
class WorkflowResult:
    event: Event
    version: Optional[int] = None
    reviewer_id: Optional[str] = None
    warnings: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def get_event(db: Session, event_id: str) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFound("We could not find that event. Refresh and try again.")
    return event


def list_events(db: Session, status: Optional[EventStatus] = None, venue_id: Optional[str] = None) -> list[Event]:
    query = db.query(Event)
    if status:
        query = query.filter(Event.status == status)
    if venue_id:
        query = query.filter(Event.venue_id == venue_id)
    return query.order_by(Event.start_at).all()


def _ensure_venue(db: Session, venue_id: str) -> Venue:
    venue = db.query(Venue).filter(Venue.id == venue_id).first()
    if not venue:
        raise ReferentialError("Select a valid venue before saving this draft.")
    return venue


def _draft_snapshot(payload: EventDraftInput) -> dict[str, Any]:
    return {
        "title": payload.title,
        "start_at": isoformat(payload.start_at),
        "end_at": isoformat(payload.end_at),
        "venue_id": payload.venue_id,
        "venue_area_ids": sorted(payload.area_ids),
    }


def _audit(db: Session, result: WorkflowResult, actor_id: str, action: str, entity_id: str, details: dict) -> None:
    if not audit_sink.record(db, actor_id=actor_id, action=action, entity_id=entity_id, details=details):
        result.warnings.append(f"Audit entry '{action}' could not be recorded.")


def _queue_reminder(db: Session, result: WorkflowResult, event_id: str, user_id: str) -> None:
    if notification_queue.queue_draft_reminder(db, event_id, user_id) is None:
        result.warnings.append("Draft reminder could not be queued.")


def _insert_event(db: Session, **values) -> Event:
    event = Event(status=EventStatus.draft, assigned_reviewer_id=None, **values)
    db.add(event)
    db.commit()
    return event


def _delete_event(db: Session, event_id: str) -> None:
    """Compensation for a failed create or clone."""
    db.execute(delete(EventArea).where(EventArea.event_id == event_id))
    db.execute(delete(EventVersion).where(EventVersion.event_id == event_id))
    db.execute(delete(Event).where(Event.id == event_id))


def _apply_fields(db: Session, event: Event, payload: EventDraftInput) -> None:
    event.title = payload.title
    event.venue_id = payload.venue_id
    event.start_at = payload.start_at
    event.end_at = payload.end_at
    db.commit()


def _restore_fields(db: Session, event_id: str, previous: dict[str, Any]) -> None:
    db.execute(update(Event).where(Event.id == event_id).values(**previous))


def _chain_submission(db: Session, event_id: str, actor: User, saved: WorkflowResult) -> WorkflowResult:
    """Submit a just-saved draft; a failure here leaves the draft in place."""
    try:
        submitted = submit(db, event_id, actor)
    except PartialFailure:
        raise
    except WorkflowError as exc:
        raise PartialFailure(
            f"Draft saved but submission failed: {exc.message}",
            event_id=event_id,
            rolled_back=False,
            status_code=exc.status_code,
        ) from exc
    submitted.warnings = saved.warnings + submitted.warnings
    return submitted


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------
def create_draft(db: Session, payload: EventDraftInput, actor: User) -> WorkflowResult:
    """Create a draft with its area links and version 1, all or nothing."""
    authorize(actor, WorkflowAction.create, venue_id=payload.venue_id)
    _ensure_venue(db, payload.venue_id)
    area_validator.validate_area_selection(db, payload.venue_id, payload.area_ids)

    saga = Saga(db, "create_draft")
    event = saga.run(
        lambda: _insert_event(
            db,
            title=payload.title,
            venue_id=payload.venue_id,
            start_at=payload.start_at,
            end_at=payload.end_at,
            created_by=actor.id,
        ),
        failure="Unable to create event draft",
    )
    event_id = event.id
    saga.event_id = event_id
    saga.on_rollback(f"delete draft {event_id}", lambda: _delete_event(db, event_id))

    saga.run(
        lambda: area_validator.link_areas(db, event_id, payload.area_ids),
        failure="Draft created but venue areas could not be saved",
    )
    snapshot = _draft_snapshot(payload)
    saga.run(
        lambda: version_store.append_version(db, event_id, 1, snapshot),
        failure="Draft created but version snapshot failed",
    )
    logger.info("Created draft '%s' (%s) by %s", payload.title, event_id, actor.id)

    result = WorkflowResult(event=event, version=1)
    _audit(db, result, actor.id, audit_sink.DRAFT_CREATED, event_id, {**snapshot, "version": 1})

    if payload.intent == "submit":
        return _chain_submission(db, event_id, actor, result)
    _queue_reminder(db, result, event_id, actor.id)
    return result


def update_draft(db: Session, event_id: str, payload: EventDraftInput, actor: User) -> WorkflowResult:
    """Replace a draft's editable fields and areas, restoring both on failure."""
    event = get_event(db, event_id)
    authorize(actor, WorkflowAction.update, event=event)
    if event.status not in EDITABLE_STATUSES:
        raise InvalidTransition("Only drafts or revisions can be updated.")
    _ensure_venue(db, payload.venue_id)
    area_validator.validate_area_selection(db, payload.venue_id, payload.area_ids, verb="saving changes")

    current_status = event.status
    previous_fields = {
        "title": event.title,
        "venue_id": event.venue_id,
        "start_at": event.start_at,
        "end_at": event.end_at,
    }
    previous_area_ids = area_validator.get_event_area_ids(db, event_id)

    saga = Saga(db, "update_draft")
    saga.event_id = event_id
    saga.run(
        lambda: area_validator.replace_areas(db, event_id, payload.area_ids),
        failure="Unable to update venue areas",
    )
    saga.on_rollback("restore venue areas", lambda: area_validator.replace_areas(db, event_id, previous_area_ids))

    saga.run(lambda: _apply_fields(db, event, payload), failure="Unable to update event draft")
    saga.on_rollback("restore event fields", lambda: _restore_fields(db, event_id, previous_fields))

    snapshot = _draft_snapshot(payload)
    version = saga.run(
        lambda: version_store.append_next_version(db, event_id, {**snapshot, "status": current_status.value}),
        failure="Draft updated but version snapshot failed",
    )
    logger.info("Updated draft %s to version %d", event_id, version.version)

    result = WorkflowResult(event=event, version=version.version)
    _audit(db, result, actor.id, audit_sink.DRAFT_UPDATED, event_id, {
        "previous": {
            "title": previous_fields["title"],
            "venue_id": previous_fields["venue_id"],
            "start_at": isoformat(previous_fields["start_at"]),
            "end_at": isoformat(previous_fields["end_at"]),
            "venue_area_ids": previous_area_ids,
        },
        "updated": snapshot,
    })

    if payload.intent == "submit":
        return _chain_submission(db, event_id, actor, result)
    _queue_reminder(db, result, event_id, actor.id)
    return result


def submit(db: Session, event_id: str, actor: User) -> WorkflowResult:
    """Move a draft into the review queue.

    The status write is the commit point: a snapshot failure after it is
    reported as a partial failure and the event stays submitted.
    """
    event = get_event(db, event_id)
    authorize(actor, WorkflowAction.submit, event=event)
    if event.status not in EDITABLE_STATUSES:
        raise InvalidTransition("Only drafts or revisions can be submitted.")

    area_ids = area_validator.get_event_area_ids(db, event_id)
    if not area_ids and area_validator.count_venue_areas(db, event.venue_id) > 0:
        message = "Assign at least one venue area before submitting this draft."
        raise ValidationFailed(message, {"area_ids": message})

    result = WorkflowResult(event=event)
    resolution = reviewer_resolver.resolve(db, event, actor.id)
    if not resolution.audit_recorded:
        result.warnings.append(f"Audit entry '{audit_sink.REVIEWER_ASSIGNED}' could not be recorded.")

    submitted_at = utc_now()
    try:
        event.status = EventStatus.submitted
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError(f"Unable to submit draft: {exc}") from exc
    logger.info("Event %s submitted by %s (reviewer: %s)", event_id, actor.id, resolution.reviewer_id)

    changes = {
        "status": EventStatus.submitted.value,
        "title": event.title,
        "start_at": isoformat(event.start_at),
        "end_at": isoformat(event.end_at),
        "venue_id": event.venue_id,
        "venue_area_ids": area_ids,
        "assigned_reviewer_id": resolution.reviewer_id,
        "submitted_at": submitted_at.isoformat(),
        "submitted_by": actor.id,
    }
    try:
        version = version_store.append_next_version(
            db, event_id, changes, submitted_at=submitted_at, submitted_by=actor.id
        )
    except SQLAlchemyError as exc:
        db.rollback()
        raise PartialFailure(
            f"Draft submitted but version snapshot failed: {exc}",
            event_id=event_id,
            rolled_back=False,
        ) from exc

    result.version = version.version
    result.reviewer_id = resolution.reviewer_id
    _audit(db, result, actor.id, audit_sink.SUBMITTED, event_id, {
        "version": version.version,
        "submitted_at": submitted_at.isoformat(),
        "venue_area_ids": area_ids,
        "assigned_reviewer_id": resolution.reviewer_id,
    })
    return result


def _insert_approval(
    db: Session, event_id: str, decision: Decision, reviewer_id: str, note: Optional[str], decided_at: datetime
) -> Approval:
    approval = Approval(
        event_id=event_id,
        decision=decision,
        reviewer_id=reviewer_id,
        feedback_text=note,
        decided_at=decided_at,
    )
    db.add(approval)
    db.commit()
    return approval


def decide(db: Session, event_id: str, payload: DecisionInput, actor: User) -> WorkflowResult:
    """Record a reviewer decision. The status write is the commit point."""
    event = get_event(db, event_id)
    authorize(actor, WorkflowAction.decide, event=event)
    if event.status not in DECIDABLE_STATUSES:
        raise InvalidTransition("Only submitted drafts or revisions can receive a new decision.")

    decision = payload.decision
    previous_status = event.status
    decided_at = utc_now()
    try:
        event.status = EventStatus(decision.value)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError(f"Unable to apply decision: {exc}") from exc
    logger.info("Event %s marked %s by %s", event_id, decision.value, actor.id)

    changes = {
        "status": decision.value,
        "decision": decision.value,
        "decision_note": payload.note,
        "decided_by": actor.id,
        "decided_at": decided_at.isoformat(),
    }
    try:
        version = version_store.append_next_version(db, event_id, changes)
    except SQLAlchemyError as exc:
        db.rollback()
        raise PartialFailure(
            f"Decision applied but version snapshot failed: {exc}",
            event_id=event_id,
            rolled_back=False,
        ) from exc

    try:
        _insert_approval(db, event_id, decision, actor.id, payload.note, decided_at)
    except SQLAlchemyError as exc:
        db.rollback()
        raise PartialFailure(
            f"Decision recorded but approval log failed: {exc}",
            event_id=event_id,
            rolled_back=False,
        ) from exc

    result = WorkflowResult(event=event, version=version.version, reviewer_id=event.assigned_reviewer_id)
    _audit(db, result, actor.id, audit_sink.decision_action(decision.value), event_id, {
        "decision": decision.value,
        "note": payload.note,
        "version": version.version,
        "previous_status": previous_status.value,
    })
    notification_queue.notify_decision(db, event, decision.value, payload.note, actor)
    return result


def clone(db: Session, event_id: str, actor: User) -> WorkflowResult:
    """Copy an event into a fresh unassigned draft, all or nothing."""
    authorize(actor, WorkflowAction.clone)
    source = get_event(db, event_id)
    source_id = source.id
    source_latest = version_store.latest_version(db, source_id)
    source_area_ids = area_validator.get_event_area_ids(db, source_id)

    title = source.title[: TITLE_MAX_LENGTH - len(COPY_SUFFIX)] + COPY_SUFFIX
    cloned_at = utc_now()

    saga = Saga(db, "clone")
    new_event = saga.run(
        lambda: _insert_event(
            db,
            title=title,
            venue_id=source.venue_id,
            start_at=source.start_at,
            end_at=source.end_at,
            created_by=actor.id,
        ),
        failure="Unable to create cloned draft",
    )
    new_id = new_event.id
    saga.event_id = new_id
    saga.on_rollback(f"delete cloned draft {new_id}", lambda: _delete_event(db, new_id))

    saga.run(
        lambda: area_validator.link_areas(db, new_id, source_area_ids),
        failure="Draft created but venue areas could not be copied",
    )

    carried = dict(source_latest.payload) if source_latest else {}
    for key in _REVIEW_KEYS:
        carried.pop(key, None)
    snapshot = version_store.merge_payload(carried, {
        "title": title,
        "status": EventStatus.draft.value,
        "assigned_reviewer_id": None,
        "venue_area_ids": source_area_ids,
        "cloned_from": source_id,
        "cloned_at": cloned_at.isoformat(),
    })
    saga.run(
        lambda: version_store.append_version(db, new_id, 1, snapshot),
        failure="Draft created but version snapshot failed",
    )
    logger.info("Cloned event %s into draft %s", source_id, new_id)

    result = WorkflowResult(event=new_event, version=1)
    _audit(db, result, actor.id, audit_sink.CLONED, new_id, {
        "source_event_id": source_id,
        "cloned_at": cloned_at.isoformat(),
        "venue_area_ids": source_area_ids,
    })
    return result


def assign_reviewer(db: Session, event_id: str, reviewer_id: str, actor: User) -> WorkflowResult:
    """Explicitly assign a reviewer; the first stage of the fallback chain."""
    authorize(actor, WorkflowAction.assign_reviewer)
    event = get_event(db, event_id)
    resolution = reviewer_resolver.assign(db, event, reviewer_id, actor.id)
    result = WorkflowResult(event=event, reviewer_id=resolution.reviewer_id)
    if not resolution.audit_recorded:
        result.warnings.append(f"Audit entry '{audit_sink.REVIEWER_ASSIGNED}' could not be recorded.")
    return result
