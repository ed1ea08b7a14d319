"""Transactional email via Resend.

Delivery itself is an external collaborator: these functions raise on
transport errors and leave the best-effort policy to their callers.
"""
import logging
from html import escape
from typing import Optional

import resend

from venueflow.config import settings

logger = logging.getLogger(__name__)


def _send(to_email: str, subject: str, html: str) -> dict:
    if not settings.RESEND_API_KEY:
        logger.warning("RESEND_API_KEY not configured, skipping email '%s' to %s", subject, to_email)
        return {"skipped": True}

    resend.api_key = settings.RESEND_API_KEY
    response = resend.Emails.send({
        "from": settings.EMAIL_FROM,
        "to": [to_email],
        "subject": subject,
        "html": html,
    })
    logger.info("Email '%s' sent to %s", subject, to_email)
    return {"id": response.get("id")}


def send_reviewer_assignment_email(
    to_email: str,
    reviewer_name: Optional[str],
    event_title: str,
    venue_name: Optional[str],
    start_at: Optional[str],
) -> dict:
    html = f"""
    <p>Hi {escape(reviewer_name or "there")},</p>
    <p>You have been assigned to review <strong>{escape(event_title)}</strong>
    at {escape(venue_name or "Venue TBC")} ({escape(start_at or "date TBC")}).</p>
    <p><a href="{settings.APP_URL}/reviews">Open the review queue</a></p>
    """
    return _send(to_email, f"New event assigned: {event_title}", html)


def send_reviewer_decision_email(
    to_email: str,
    recipient_name: Optional[str],
    event_title: str,
    decision: str,
    note: Optional[str],
    reviewer_name: Optional[str],
) -> dict:
    label = decision.replace("_", " ")
    note_html = f"<blockquote>{escape(note)}</blockquote>" if note else ""
    html = f"""
    <p>Hi {escape(recipient_name or "there")},</p>
    <p><strong>{escape(event_title)}</strong> was marked <strong>{escape(label)}</strong>
    by {escape(reviewer_name or "a reviewer")}.</p>
    {note_html}
    <p><a href="{settings.APP_URL}/events">View your events</a></p>
    """
    return _send(to_email, f"Event {label} – {event_title}", html)


def send_draft_reminder_email(
    to_email: str,
    recipient_name: Optional[str],
    event_title: str,
    venue_name: Optional[str],
    event_id: str,
) -> dict:
    html = f"""
    <p>Hi {escape(recipient_name or "there")},</p>
    <p>Your draft <strong>{escape(event_title)}</strong> at {escape(venue_name or "your venue")}
    has not been submitted for review yet.</p>
    <p><a href="{settings.APP_URL}/events/{event_id}">Finish the draft</a></p>
    """
    return _send(to_email, f"Reminder: finish your draft {event_title}", html)
