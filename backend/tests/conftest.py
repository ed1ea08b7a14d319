"""Pytest fixtures: file-backed SQLite database, fresh schema per test."""
import os
from datetime import datetime, timezone
from typing import Optional

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_venueflow.db")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from fastapi.testclient import TestClient

from venueflow.database import Base, get_db
from venueflow.main import app

# Import all models so they register with Base.metadata
from venueflow.models.user import User, UserRole
from venueflow.models.venue import Venue, VenueArea, VenueDefaultReviewer
from venueflow.models.event import Event, EventArea                   # noqa: F401
from venueflow.models.event_version import EventVersion               # noqa: F401
from venueflow.models.approval import Approval                        # noqa: F401
from venueflow.models.audit_log import AuditLog                       # noqa: F401
from venueflow.models.notification import Notification                # noqa: F401

SQLITE_URL = "sqlite:///./test_venueflow.db"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session bound to the per-test engine."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture outgoing emails instead of calling Resend."""
    from venueflow.services import email_service

    outbox: list[tuple[str, dict]] = []

    def _capture(kind):
        def _send(**kwargs):
            outbox.append((kind, kwargs))
            return {"id": f"test-{len(outbox)}"}
        return _send

    monkeypatch.setattr(email_service, "send_reviewer_assignment_email", _capture("assignment"))
    monkeypatch.setattr(email_service, "send_reviewer_decision_email", _capture("decision"))
    monkeypatch.setattr(email_service, "send_draft_reminder_email", _capture("reminder"))
    return outbox


# ---------------------------------------------------------------------------
# Seeding helpers: write rows straight through a session
# ---------------------------------------------------------------------------
def make_user(
    db: Session,
    role: UserRole = UserRole.venue_manager,
    name: str = "Test User",
    email: Optional[str] = None,
    venue_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> User:
    user = User(role=role, full_name=name, email=email, venue_id=venue_id)
    if created_at is not None:
        user.created_at = created_at
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_venue(db: Session, name: str = "The Taproom") -> Venue:
    venue = Venue(name=name)
    db.add(venue)
    db.commit()
    db.refresh(venue)
    return venue


def make_area(db: Session, venue_id: str, name: str = "Main Bar", capacity: Optional[int] = 80) -> VenueArea:
    area = VenueArea(venue_id=venue_id, name=name, capacity=capacity)
    db.add(area)
    db.commit()
    db.refresh(area)
    return area


def add_default_reviewer(db: Session, venue_id: str, reviewer_id: str) -> VenueDefaultReviewer:
    entry = VenueDefaultReviewer(venue_id=venue_id, reviewer_id=reviewer_id)
    db.add(entry)
    db.commit()
    return entry


def draft_input(venue_id: str, area_ids: Optional[list[str]] = None, **overrides):
    """Build an EventDraftInput with sensible defaults."""
    from venueflow.schemas.event import EventDraftInput

    fields = {
        "title": "Tap Takeover",
        "venue_id": venue_id,
        "start_at": datetime(2026, 11, 20, 19, 0, tzinfo=timezone.utc),
        "end_at": datetime(2026, 11, 20, 23, 0, tzinfo=timezone.utc),
        "area_ids": area_ids or [],
    }
    fields.update(overrides)
    return EventDraftInput(**fields)


# ---------------------------------------------------------------------------
# API helpers: return the response JSON
# ---------------------------------------------------------------------------
def create_test_user(client: TestClient, role: str = "venue_manager", name: str = "Test User",
                     email: Optional[str] = None, venue_id: Optional[str] = None) -> dict:
    """Helper: POST /api/users and return response JSON."""
    resp = client.post("/api/users/", json={
        "full_name": name,
        "email": email,
        "role": role,
        "venue_id": venue_id,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_venue(client: TestClient, name: str = "The Taproom") -> dict:
    """Helper: POST /api/venues and return response JSON."""
    resp = client.post("/api/venues/", json={"name": name})
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_area(client: TestClient, venue_id: str, name: str = "Main Bar") -> dict:
    """Helper: POST /api/venues/{id}/areas and return response JSON."""
    resp = client.post(f"/api/venues/{venue_id}/areas", json={"name": name, "capacity": 60})
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_draft(client: TestClient, actor_id: str, venue_id: str, area_ids: Optional[list] = None,
                      title: str = "Tap Takeover", intent: str = "save"):
    """Helper: POST /api/events and return the raw response."""
    return client.post(f"/api/events/?actor_id={actor_id}", json={
        "title": title,
        "venue_id": venue_id,
        "start_at": "2026-11-20T19:00:00",
        "end_at": "2026-11-20T23:00:00",
        "area_ids": area_ids or [],
        "intent": intent,
    })


def break_user_lookups(monkeypatch, db: Session) -> None:
    """Make every ``db.query(User, ...)`` on this session raise a store error."""
    from sqlalchemy.exc import SQLAlchemyError

    real_query = db.query

    def _query(*entities, **kwargs):
        if entities and entities[0] is User:
            raise SQLAlchemyError("simulated users table outage")
        return real_query(*entities, **kwargs)

    monkeypatch.setattr(db, "query", _query)
