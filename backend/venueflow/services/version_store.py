"""Version store: append-only per-event snapshots.

Version numbers are never supplied by callers: ``next_version`` reads the
current maximum and the engine inserts the following number. The
``UNIQUE(event_id, version)`` constraint turns a concurrent double insert
into a store error instead of a silent duplicate.
"""
import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from venueflow.models.event_version import EventVersion

logger = logging.getLogger(__name__)


def latest_version(db: Session, event_id: str) -> Optional[EventVersion]:
    return (
        db.query(EventVersion)
        .filter(EventVersion.event_id == event_id)
        .order_by(EventVersion.version.desc())
        .first()
    )


def next_version(db: Session, event_id: str) -> int:
    current = db.query(func.max(EventVersion.version)).filter(EventVersion.event_id == event_id).scalar()
    return (current or 0) + 1


def merge_payload(previous: Optional[dict[str, Any]], changes: dict[str, Any]) -> dict[str, Any]:
    """Shallow-merge ``changes`` over the previous snapshot so untouched fields persist."""
    merged = dict(previous) if isinstance(previous, dict) else {}
    merged.update(changes)
    return merged


def append_version(
    db: Session,
    event_id: str,
    version: int,
    payload: dict[str, Any],
    submitted_at: Optional[datetime] = None,
    submitted_by: Optional[str] = None,
) -> EventVersion:
    """Insert a snapshot row and commit. Never updates an existing row."""
    row = EventVersion(
        event_id=event_id,
        version=version,
        payload=payload,
        submitted_at=submitted_at,
        submitted_by=submitted_by,
    )
    db.add(row)
    db.commit()
    logger.info("Event %s snapshot v%d written", event_id, version)
    return row


def append_next_version(
    db: Session,
    event_id: str,
    changes: dict[str, Any],
    submitted_at: Optional[datetime] = None,
    submitted_by: Optional[str] = None,
) -> EventVersion:
    """Layer ``changes`` over the latest snapshot and append it as the next version."""
    previous = latest_version(db, event_id)
    number = (previous.version if previous else 0) + 1
    payload = merge_payload(previous.payload if previous else None, changes)
    return append_version(db, event_id, number, payload, submitted_at=submitted_at, submitted_by=submitted_by)


def list_versions(db: Session, event_id: str) -> list[EventVersion]:
    return (
        db.query(EventVersion)
        .filter(EventVersion.event_id == event_id)
        .order_by(EventVersion.version.asc())
        .all()
    )
