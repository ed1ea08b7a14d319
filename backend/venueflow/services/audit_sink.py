"""Audit sink: append-only log of lifecycle transitions.

Writes never abort the transition that triggered them. A failed write is
logged and reported back as ``False`` so the caller can surface a warning.
"""
import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from venueflow.models.audit_log import AuditLog

logger = logging.getLogger(__name__)

DRAFT_CREATED = "event.draft_created"
DRAFT_UPDATED = "event.draft_updated"
SUBMITTED = "event.submitted"
CLONED = "event.cloned"
REVIEWER_ASSIGNED = "event.reviewer_assigned"


def decision_action(decision: str) -> str:
    """``approved`` -> ``event.approved`` and so on."""
    return f"event.{decision}"


def insert_entry(
    db: Session,
    actor_id: Optional[str],
    action: str,
    entity_id: Optional[str],
    details: Optional[dict[str, Any]],
    entity_type: str = "event",
) -> AuditLog:
    entry = AuditLog(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
    )
    db.add(entry)
    db.commit()
    return entry


def record(
    db: Session,
    *,
    actor_id: Optional[str],
    action: str,
    entity_id: Optional[str],
    details: Optional[dict[str, Any]] = None,
    entity_type: str = "event",
) -> bool:
    try:
        insert_entry(db, actor_id, action, entity_id, details, entity_type=entity_type)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Audit write failed for %s on %s %s: %s", action, entity_type, entity_id, exc)
        return False
    return True
