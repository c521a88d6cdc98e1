from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC (MySQL DATETIME columns come back naive)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_db(value: datetime) -> datetime:
    """Store instants as naive UTC."""
    return ensure_aware(value).astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 instant (``Z`` suffix accepted)."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_aware(datetime.fromisoformat(text))
