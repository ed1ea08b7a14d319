"""Draft creation and update through the lifecycle engine.

Covers:
- Area adequacy and ownership checks on create and update
- Version #1 on create, merged snapshots on update
- Audit entries and the 48h draft reminder
- Full rollback when a post-insert step fails
- "Submit immediately" chaining and its non-reverting failure mode
"""
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import SQLAlchemyError

from venueflow.models.audit_log import AuditLog
from venueflow.models.event import Event, EventArea, EventStatus
from venueflow.models.event_version import EventVersion
from venueflow.models.notification import Notification
from venueflow.models.user import UserRole
from venueflow.services import area_validator, event_lifecycle, version_store
from venueflow.services.errors import (
    InvalidTransition,
    PartialFailure,
    PermissionDenied,
    ReferentialError,
    StoreError,
    ValidationFailed,
)
from tests.conftest import make_area, make_user, make_venue, draft_input


def _store_failure(*args, **kwargs):
    raise SQLAlchemyError("simulated store outage")


class TestCreateDraft:
    """Draft creation contract."""

    def test_tap_takeover_on_venue_without_areas(self, db):
        manager = make_user(db, UserRole.venue_manager)
        venue = make_venue(db)

        result = event_lifecycle.create_draft(db, draft_input(venue.id), manager)

        assert result.version == 1
        assert result.event.status == EventStatus.draft
        assert result.event.title == "Tap Takeover"
        assert result.event.assigned_reviewer_id is None
        assert result.warnings == []
        versions = version_store.list_versions(db, result.event.id)
        assert [v.version for v in versions] == [1]
        assert versions[0].payload["title"] == "Tap Takeover"
        assert versions[0].payload["venue_area_ids"] == []

    def test_area_selection_required_once_venue_has_areas(self, db):
        manager = make_user(db, UserRole.venue_manager)
        venue = make_venue(db)
        bar = make_area(db, venue.id, "Main Bar")
        make_area(db, venue.id, "Beer Garden")

        with pytest.raises(ValidationFailed) as exc_info:
            event_lifecycle.create_draft(db, draft_input(venue.id), manager)
        assert "area_ids" in exc_info.value.field_errors
        assert db.query(Event).count() == 0

        result = event_lifecycle.create_draft(db, draft_input(venue.id, [bar.id]), manager)
        assert result.event.area_ids == [bar.id]

    def test_areas_from_another_venue_are_rejected(self, db):
        manager = make_user(db, UserRole.venue_manager)
        venue = make_venue(db, "The Taproom")
        other = make_venue(db, "The Cellar")
        make_area(db, venue.id)
        foreign = make_area(db, other.id, "Cellar Bar")

        with pytest.raises(ReferentialError, match="do not belong to the chosen venue"):
            event_lifecycle.create_draft(db, draft_input(venue.id, [foreign.id]), manager)
        assert db.query(Event).count() == 0

    def test_unknown_area_is_rejected(self, db):
        manager = make_user(db, UserRole.venue_manager)
        venue = make_venue(db)
        make_area(db, venue.id)

        with pytest.raises(ReferentialError, match="could not be found"):
            event_lifecycle.create_draft(db, draft_input(venue.id, ["missing-area"]), manager)

    def test_unknown_venue_is_rejected(self, db):
        planner = make_user(db, UserRole.central_planner)
        with pytest.raises(ReferentialError):
            event_lifecycle.create_draft(db, draft_input("missing-venue"), planner)

    def test_manager_scoped_to_their_venue(self, db):
        venue = make_venue(db, "The Taproom")
        other = make_venue(db, "The Cellar")
        manager = make_user(db, UserRole.venue_manager, venue_id=other.id)

        with pytest.raises(PermissionDenied):
            event_lifecycle.create_draft(db, draft_input(venue.id), manager)

    def test_reviewer_cannot_create(self, db):
        venue = make_venue(db)
        reviewer = make_user(db, UserRole.reviewer)
        with pytest.raises(PermissionDenied):
            event_lifecycle.create_draft(db, draft_input(venue.id), reviewer)

    def test_create_writes_audit_and_queues_reminder(self, db):
        manager = make_user(db, UserRole.venue_manager)
        venue = make_venue(db)

        result = event_lifecycle.create_draft(db, draft_input(venue.id), manager)

        audit = db.query(AuditLog).filter(AuditLog.entity_id == result.event.id).all()
        assert [a.action for a in audit] == ["event.draft_created"]
        assert audit[0].actor_id == manager.id
        reminders = db.query(Notification).filter(Notification.event_id == result.event.id).all()
        assert len(reminders) == 1
        assert reminders[0].user_id == manager.id
        assert reminders[0].status.value == "queued"


class TestCreateRollback:
    """A failing post-insert step leaves nothing behind."""

    def test_failing_area_link_removes_event(self, db, monkeypatch):
        manager = make_user(db, UserRole.venue_manager)
        venue = make_venue(db)
        area = make_area(db, venue.id)
        monkeypatch.setattr(area_validator, "link_areas", _store_failure)

        with pytest.raises(PartialFailure) as exc_info:
            event_lifecycle.create_draft(db, draft_input(venue.id, [area.id]), manager)

        assert exc_info.value.rolled_back is True
        assert "venue areas could not be saved" in exc_info.value.message
        assert db.query(Event).count() == 0
        assert db.query(EventVersion).count() == 0

    def test_failing_version_snapshot_removes_event_and_links(self, db, monkeypatch):
        manager = make_user(db, UserRole.venue_manager)
        venue = make_venue(db)
        area = make_area(db, venue.id)
        monkeypatch.setattr(version_store, "append_version", _store_failure)

        with pytest.raises(PartialFailure, match="version snapshot failed"):
            event_lifecycle.create_draft(db, draft_input(venue.id, [area.id]), manager)

        assert db.query(Event).count() == 0
        assert db.query(EventArea).count() == 0
        assert db.query(Notification).count() == 0

    def test_failing_insert_is_a_store_error(self, db, monkeypatch):
        manager = make_user(db, UserRole.venue_manager)
        venue = make_venue(db)
        monkeypatch.setattr(event_lifecycle, "_insert_event", _store_failure)

        with pytest.raises(StoreError, match="Unable to create event draft"):
            event_lifecycle.create_draft(db, draft_input(venue.id), manager)
        assert db.query(Event).count() == 0


class TestSubmitImmediately:
    """intent=submit chains into submission after the draft is saved."""

    def test_create_and_submit(self, db):
        planner = make_user(db, UserRole.central_planner, email="planner@example.com")
        manager = make_user(db, UserRole.venue_manager)
        venue = make_venue(db)

        result = event_lifecycle.create_draft(db, draft_input(venue.id, intent="submit"), manager)

        assert result.event.status == EventStatus.submitted
        assert result.version == 2
        assert result.reviewer_id == planner.id
        # No reminder for a draft that went straight to review
        assert db.query(Notification).count() == 0

    def test_submission_failure_keeps_the_draft(self, db, monkeypatch):
        manager = make_user(db, UserRole.venue_manager)
        venue = make_venue(db)

        def _failing_submit(*args, **kwargs):
            raise StoreError("Unable to submit draft: simulated")

        monkeypatch.setattr(event_lifecycle, "submit", _failing_submit)

        with pytest.raises(PartialFailure) as exc_info:
            event_lifecycle.create_draft(db, draft_input(venue.id, intent="submit"), manager)

        assert exc_info.value.rolled_back is False
        assert exc_info.value.message.startswith("Draft saved but submission failed")
        event = db.query(Event).one()
        assert exc_info.value.event_id == event.id
        assert event.status == EventStatus.draft
        assert [v.version for v in version_store.list_versions(db, event.id)] == [1]


class TestUpdateDraft:
    """Draft update contract."""

    def test_update_merges_snapshot_and_swaps_areas(self, db):
        manager = make_user(db, UserRole.venue_manager)
        venue = make_venue(db)
        bar = make_area(db, venue.id, "Main Bar")
        garden = make_area(db, venue.id, "Beer Garden")
        created = event_lifecycle.create_draft(db, draft_input(venue.id, [bar.id]), manager)
        event_id = created.event.id

        # Seed an unrelated field that later writes must carry forward
        first = version_store.latest_version(db, event_id)
        first.payload = {**first.payload, "notes": "bring extra kegs"}
        db.commit()

        result = event_lifecycle.update_draft(
            db, event_id, draft_input(venue.id, [garden.id], title="Tap Takeover II"), manager
        )

        assert result.version == 2
        assert result.event.title == "Tap Takeover II"
        assert result.event.area_ids == [garden.id]
        latest = version_store.latest_version(db, event_id)
        assert latest.payload["title"] == "Tap Takeover II"
        assert latest.payload["venue_area_ids"] == [garden.id]
        assert latest.payload["notes"] == "bring extra kegs"

    def test_update_audits_previous_and_new_values(self, db):
        manager = make_user(db, UserRole.venue_manager)
        venue = make_venue(db)
        created = event_lifecycle.create_draft(db, draft_input(venue.id), manager)

        event_lifecycle.update_draft(db, created.event.id, draft_input(venue.id, title="Cask Festival"), manager)

        entry = (
            db.query(AuditLog)
            .filter(AuditLog.entity_id == created.event.id, AuditLog.action == "event.draft_updated")
            .one()
        )
        assert entry.details["previous"]["title"] == "Tap Takeover"
        assert entry.details["updated"]["title"] == "Cask Festival"

    def test_reminder_is_not_duplicated_by_updates(self, db):
        manager = make_user(db, UserRole.venue_manager)
        venue = make_venue(db)
        created = event_lifecycle.create_draft(db, draft_input(venue.id), manager)

        event_lifecycle.update_draft(db, created.event.id, draft_input(venue.id, title="Second"), manager)
        event_lifecycle.update_draft(db, created.event.id, draft_input(venue.id, title="Third"), manager)

        assert db.query(Notification).count() == 1

    def test_only_owner_or_planner_may_update(self, db):
        owner = make_user(db, UserRole.venue_manager, name="Owner")
        other = make_user(db, UserRole.venue_manager, name="Other")
        planner = make_user(db, UserRole.central_planner)
        venue = make_venue(db)
        created = event_lifecycle.create_draft(db, draft_input(venue.id), owner)

        with pytest.raises(PermissionDenied):
            event_lifecycle.update_draft(db, created.event.id, draft_input(venue.id, title="Hijack"), other)

        result = event_lifecycle.update_draft(db, created.event.id, draft_input(venue.id, title="Planned"), planner)
        assert result.event.title == "Planned"

    def test_submitted_event_cannot_be_updated(self, db):
        manager = make_user(db, UserRole.venue_manager)
        venue = make_venue(db)
        created = event_lifecycle.create_draft(db, draft_input(venue.id), manager)
        event_lifecycle.submit(db, created.event.id, manager)

        with pytest.raises(InvalidTransition, match="Only drafts or revisions can be updated"):
            event_lifecycle.update_draft(db, created.event.id, draft_input(venue.id, title="Late edit"), manager)

    def test_update_revalidates_areas(self, db):
        manager = make_user(db, UserRole.venue_manager)
        venue = make_venue(db)
        area = make_area(db, venue.id)
        created = event_lifecycle.create_draft(db, draft_input(venue.id, [area.id]), manager)

        with pytest.raises(ValidationFailed):
            event_lifecycle.update_draft(db, created.event.id, draft_input(venue.id, []), manager)
        assert area_validator.get_event_area_ids(db, created.event.id) == [area.id]

    def test_unknown_event_is_not_found(self, db):
        from venueflow.services.errors import NotFound

        manager = make_user(db, UserRole.venue_manager)
        venue = make_venue(db)
        with pytest.raises(NotFound):
            event_lifecycle.update_draft(db, "missing", draft_input(venue.id), manager)


class TestUpdateRollback:
    """A failing step restores both the event row and its area links."""

    def _setup(self, db):
        manager = make_user(db, UserRole.venue_manager)
        venue = make_venue(db)
        bar = make_area(db, venue.id, "Main Bar")
        garden = make_area(db, venue.id, "Beer Garden")
        created = event_lifecycle.create_draft(db, draft_input(venue.id, [bar.id]), manager)
        event = db.query(Event).filter(Event.id == created.event.id).one()
        before = (event.title, event.venue_id, event.start_at, event.end_at)
        return manager, venue, bar, garden, event.id, before

    def _assert_restored(self, db, event_id, before, area_ids):
        db.expire_all()
        event = db.query(Event).filter(Event.id == event_id).one()
        assert (event.title, event.venue_id, event.start_at, event.end_at) == before
        assert area_validator.get_event_area_ids(db, event_id) == area_ids
        assert [v.version for v in version_store.list_versions(db, event_id)] == [1]

    def test_failing_version_insert_restores_everything(self, db, monkeypatch):
        manager, venue, bar, garden, event_id, before = self._setup(db)
        monkeypatch.setattr(version_store, "append_next_version", _store_failure)

        payload = draft_input(
            venue.id, [garden.id], title="Changed",
            start_at=datetime(2026, 12, 1, 18, 0, tzinfo=timezone.utc),
            end_at=datetime(2026, 12, 1, 22, 0, tzinfo=timezone.utc),
        )
        with pytest.raises(PartialFailure) as exc_info:
            event_lifecycle.update_draft(db, event_id, payload, manager)

        assert exc_info.value.rolled_back is True
        assert "Draft updated but version snapshot failed" in exc_info.value.message
        self._assert_restored(db, event_id, before, [bar.id])

    def test_failing_field_update_restores_areas(self, db, monkeypatch):
        manager, venue, bar, garden, event_id, before = self._setup(db)
        monkeypatch.setattr(event_lifecycle, "_apply_fields", _store_failure)

        with pytest.raises(PartialFailure, match="Unable to update event draft"):
            event_lifecycle.update_draft(db, event_id, draft_input(venue.id, [garden.id], title="Changed"), manager)

        self._assert_restored(db, event_id, before, [bar.id])

    def test_failing_area_swap_changes_nothing(self, db, monkeypatch):
        manager, venue, bar, garden, event_id, before = self._setup(db)
        monkeypatch.setattr(area_validator, "replace_areas", _store_failure)

        with pytest.raises(StoreError, match="Unable to update venue areas"):
            event_lifecycle.update_draft(db, event_id, draft_input(venue.id, [garden.id], title="Changed"), manager)

        self._assert_restored(db, event_id, before, [bar.id])
