"""Timestamp helpers shared by the API and the terminal client.

All instants are timezone-aware UTC.  Naive datetimes (e.g. read back
from a driver that drops the offset) are treated as UTC.
"""

from datetime import datetime, timezone

JUST_NOW = "Just now"

_MINUTE = 60
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR
_MONTH = 30 * _DAY


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso(value: datetime | None) -> str:
    """ISO-8601 string for *value*, or for the current time when unset."""
    return ensure_utc(value or utc_now()).isoformat()


def parse_iso(value: str | None) -> datetime | None:
    """Parse an ISO-8601 string; ``None`` for empty or malformed input."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return ensure_utc(parsed)


def format_relative(
    value: datetime | None,
    now: datetime | None = None,
    *,
    include_days: bool = False,
) -> str:
    """Human-friendly age of *value*: ``Just now``, ``5m ago``, ``3h ago``.

    With ``include_days`` ages under thirty days render as ``2d ago``;
    anything older falls back to the calendar date.
    """
    if value is None:
        return JUST_NOW
    value = ensure_utc(value)
    reference = ensure_utc(now) if now is not None else utc_now()
    seconds = int((reference - value).total_seconds())

    if seconds < _MINUTE:
        return JUST_NOW
    if seconds < _HOUR:
        return f"{seconds // _MINUTE}m ago"
    if seconds < _DAY:
        return f"{seconds // _HOUR}h ago"
    if include_days and seconds < _MONTH:
        return f"{seconds // _DAY}d ago"
    return value.astimezone().date().isoformat()
