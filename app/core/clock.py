from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp; SQLite hands back naive datetimes, so we store them that way."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
