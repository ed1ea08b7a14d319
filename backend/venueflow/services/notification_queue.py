"""Notification queue: draft reminders and best-effort workflow emails.

Nothing in here may fail a lifecycle transition: reminder queueing and
email dispatch log their failures and report them as return values.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from venueflow.models.event import Event, EventStatus
from venueflow.models.notification import (
    Notification,
    NotificationStatus,
    NotificationType,
    PENDING_STATUSES,
)
from venueflow.models.user import User
from venueflow.services import email_service
from venueflow.services.clock import isoformat, utc_now

logger = logging.getLogger(__name__)

DRAFT_REMINDER_DELAY = timedelta(hours=48)


def pending_draft_reminder(db: Session, event_id: str, user_id: str) -> Optional[Notification]:
    return (
        db.query(Notification)
        .filter(
            Notification.type == NotificationType.draft_reminder,
            Notification.user_id == user_id,
            Notification.event_id == event_id,
            Notification.status.in_(PENDING_STATUSES),
        )
        .first()
    )


def queue_draft_reminder(
    db: Session,
    event_id: str,
    user_id: str,
    now: Optional[datetime] = None,
) -> Optional[Notification]:
    """Queue a reminder 48h out unless one is already queued or sending.

    Returns the pending reminder (new or existing), or None if the insert failed.
    """
    existing = pending_draft_reminder(db, event_id, user_id)
    if existing:
        logger.debug("Draft reminder already pending for event %s / user %s", event_id, user_id)
        return existing

    remind_at = (now or utc_now()) + DRAFT_REMINDER_DELAY
    reminder = Notification(
        user_id=user_id,
        type=NotificationType.draft_reminder,
        status=NotificationStatus.queued,
        event_id=event_id,
        payload={"event_id": event_id, "remind_at": remind_at.isoformat()},
    )
    try:
        db.add(reminder)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to queue draft reminder for event %s / user %s: %s", event_id, user_id, exc)
        return None
    logger.info("Queued draft reminder for event %s at %s", event_id, remind_at.isoformat())
    return reminder


def notify_reviewer_assigned(db: Session, event: Event, reviewer_id: str) -> bool:
    try:
        reviewer = db.query(User).filter(User.id == reviewer_id).first()
        if not reviewer or not reviewer.email:
            logger.warning("Reviewer %s has no email address; assignment email skipped", reviewer_id)
            return False
        email_service.send_reviewer_assignment_email(
            to_email=reviewer.email,
            reviewer_name=reviewer.full_name,
            event_title=event.title,
            venue_name=event.venue_name,
            start_at=isoformat(event.start_at),
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not load reviewer %s for the assignment email", reviewer_id)
        return False
    except Exception:
        logger.exception("Failed to send assignment email to reviewer %s", reviewer_id)
        return False
    return True


def notify_decision(db: Session, event: Event, decision: str, note: Optional[str], reviewer: User) -> bool:
    try:
        creator = db.query(User).filter(User.id == event.created_by).first()
        if not creator or not creator.email:
            logger.warning("Event creator has no email address; %s decision email skipped", decision)
            return False
        email_service.send_reviewer_decision_email(
            to_email=creator.email,
            recipient_name=creator.full_name,
            event_title=event.title,
            decision=decision,
            note=note,
            reviewer_name=reviewer.full_name,
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not load the event creator for the %s decision email", decision)
        return False
    except Exception:
        logger.exception("Failed to send %s decision email", decision)
        return False
    return True


def _due(reminder: Notification, now: datetime) -> bool:
    remind_at = (reminder.payload or {}).get("remind_at")
    if not remind_at:
        return True
    return datetime.fromisoformat(remind_at) <= now


def _mark_failed(db: Session, reminder_id: str) -> None:
    """Move a reminder out of `sending` so the (user, event) pair can be queued again."""
    try:
        db.execute(
            update(Notification)
            .where(Notification.id == reminder_id)
            .values(status=NotificationStatus.failed)
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Draft reminder %s left in sending state", reminder_id)


def dispatch_draft_reminders(db: Session, now: Optional[datetime] = None) -> dict[str, int]:
    """Send every queued draft reminder whose ``remind_at`` has passed.

    Reminders for events that are gone, no longer drafts, or whose creator
    has no email are cancelled rather than sent.
    """
    now = now or utc_now()
    counts = {"processed": 0, "sent": 0, "failed": 0, "cancelled": 0}

    queued = (
        db.query(Notification)
        .filter(
            Notification.type == NotificationType.draft_reminder,
            Notification.status == NotificationStatus.queued,
        )
        .order_by(Notification.created_at)
        .all()
    )

    for reminder in queued:
        if not _due(reminder, now):
            continue
        counts["processed"] += 1
        reminder_id = reminder.id
        payload = dict(reminder.payload or {})
        retry_count = (payload.get("send_meta") or {}).get("retry_count", 0) + 1

        reminder.status = NotificationStatus.sending
        db.commit()

        attempted_at = utc_now()
        event_id = reminder.event_id or payload.get("event_id")
        try:
            event = db.query(Event).filter(Event.id == event_id).first() if event_id else None
            creator = db.query(User).filter(User.id == event.created_by).first() if event else None
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Could not load event %s for draft reminder %s: %s", event_id, reminder_id, exc)
            _mark_failed(db, reminder_id)
            counts[NotificationStatus.failed.value] += 1
            continue

        error = None
        if not event_id:
            error = "Missing event_id"
        elif event is None or event.status != EventStatus.draft:
            error = "Draft no longer available"
        elif not creator or not creator.email:
            error = "Creator email not found"

        if error:
            final_status = NotificationStatus.cancelled
        else:
            try:
                email_service.send_draft_reminder_email(
                    to_email=creator.email,
                    recipient_name=creator.full_name,
                    event_title=event.title,
                    venue_name=event.venue_name,
                    event_id=event.id,
                )
                final_status = NotificationStatus.sent
            except Exception as exc:
                logger.exception("Failed to send draft reminder %s (event %s)", reminder.id, event_id)
                error = str(exc) or exc.__class__.__name__
                final_status = NotificationStatus.failed

        reminder.status = final_status
        reminder.sent_at = attempted_at if final_status == NotificationStatus.sent else None
        reminder.payload = {
            **payload,
            "send_meta": {
                "attempted_at": attempted_at.isoformat(),
                "retry_count": retry_count,
                "error": error,
            },
        }
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Could not record %s for draft reminder %s: %s", final_status.value, reminder_id, exc)
            _mark_failed(db, reminder_id)
            counts[NotificationStatus.failed.value] += 1
            continue
        counts[final_status.value] += 1

    logger.info("Draft reminder dispatch: %s", counts)
    return counts
