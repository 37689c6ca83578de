"""Timestamp helpers shared by models and services."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Timezone-aware current UTC time. All timestamps are stored in UTC."""
    return datetime.now(timezone.utc)
