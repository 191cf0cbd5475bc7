"""
Date helpers shared by the models, the filter service and the exporters.
GitHub returns ISO-8601 UTC timestamps; everything inside the app is kept
timezone-aware in UTC.
"""
from datetime import datetime, timezone
from typing import Optional

EXPORT_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
FILENAME_TIMESTAMP_FORMAT = "%Y-%m-%d-%H%M"


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC.

    Naive values are interpreted as UTC so that filter bounds typed by a user
    compare cleanly against GitHub timestamps.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_github_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse a GitHub timestamp such as ``2024-03-01T12:00:00Z``."""
    if not value:
        return None
    # fromisoformat only accepts the trailing "Z" from Python 3.11 on
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(value))


def format_export_datetime(value: Optional[datetime]) -> str:
    """Format a datetime for CSV export, empty string when absent."""
    if value is None:
        return ""
    return ensure_utc(value).strftime(EXPORT_DATETIME_FORMAT)
