"""Datetime normalization: everything is stored and compared as UTC."""
from datetime import datetime, timezone


def as_utc(value: datetime) -> datetime:
    """Aware datetimes are converted to UTC; naive ones (e.g. read back from SQLite) are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def iso(value: datetime | None) -> str | None:
    return as_utc(value).isoformat() if value else None
