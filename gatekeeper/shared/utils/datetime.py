"""UTC datetime helpers.

Every timestamp the service stores or compares (token expiry, tenant
validity, audit and outbox times) is timezone-aware UTC.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Normalize a datetime read back from storage to aware UTC.

    SQLite hands back naive values even for timezone-aware columns, so a
    naive value is taken to already be UTC. Aware values are converted.
    None passes through.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
