"""Time helpers: the backend owns all timezone conversion."""
from datetime import datetime, timezone

import pytz

from venueflow.config import settings


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime, tz_name: str | None = None) -> datetime:
    """Normalise a timestamp to UTC.

    Naive values come from local form inputs and are interpreted in the
    configured venue timezone (DST-aware via pytz).
    """
    if value.tzinfo is None:
        local_tz = pytz.timezone(tz_name or settings.DEFAULT_TIMEZONE)
        value = local_tz.localize(value)
    return value.astimezone(pytz.utc)


def isoformat(value: datetime | None) -> str | None:
    """Serialize for JSON snapshots; naive values read back from the store are UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()
