"""Date helpers shared by the models, the transformer and the engine."""

from datetime import datetime, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Current time in UTC, as an aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Normalize a datetime to aware UTC; naive values are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso(value: str) -> datetime:
    """Parse an ISO 8601 string (``Z`` suffix allowed) into aware UTC."""
    return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def to_iso_z(dt: datetime) -> str:
    """Format as ``2023-11-14T22:13:20.000Z`` (millisecond precision, UTC)."""
    return ensure_utc(dt).isoformat(timespec="milliseconds").replace("+00:00", "Z")
