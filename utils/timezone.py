"""UTC-everywhere time handling. Eliminates timezone bugs at the source."""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    Raises ValueError if datetime is naive (no timezone).
    """
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot convert naive datetime to UTC. Datetime must be timezone-aware."
        )
    return dt.astimezone(timezone.utc)


def from_unix(timestamp: int) -> datetime:
    """Convert unix seconds (e.g. a Telegram auth_date) to a UTC datetime."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def parse_iso(iso_string: str) -> datetime:
    """
    Parse ISO 8601 datetime string to UTC datetime.

    Raises ValueError if string has no timezone info.
    """
    dt = datetime.fromisoformat(iso_string)
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot parse naive datetime string. "
            "Include timezone offset (e.g., 'Z' or '+00:00')."
        )
    return to_utc(dt)


def seconds_until(moment: datetime) -> int:
    """Whole seconds from now until `moment`, rounded up. Zero if already past."""
    remaining = (moment - now_utc()).total_seconds()
    if remaining <= 0:
        return 0
    return int(remaining) + (0 if remaining.is_integer() else 1)
