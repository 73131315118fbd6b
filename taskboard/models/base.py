"""Shared model helpers."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current UTC time, used for timestamp columns."""
    return datetime.now(timezone.utc)
