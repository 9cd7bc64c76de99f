"""Date and time utility functions."""

from datetime import datetime, UTC
from typing import Optional


def utc_timestamp() -> str:
    """Current UTC time as an ISO string suitable for storage."""
    return format_timestamp(datetime.now(UTC), include_microseconds=True)


def format_timestamp(dt: datetime, include_microseconds: bool = False) -> str:
    """Format datetime to ISO string, normalized to UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    dt = dt.astimezone(UTC)
    if include_microseconds:
        return dt.isoformat()
    else:
        return dt.replace(microsecond=0).isoformat()


def parse_timestamp(timestamp_str: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp to an aware UTC datetime.

    Accepts ISO strings and SQLite's ``CURRENT_TIMESTAMP`` format
    (``YYYY-MM-DD HH:MM:SS``, implicitly UTC).
    """
    if not timestamp_str:
        return None

    try:
        parsed = datetime.fromisoformat(timestamp_str.replace('Z', '+00:00'))
    except ValueError:
        # Try alternative formats
        formats = [
            '%Y-%m-%d %H:%M:%S.%f',
            '%Y-%m-%d %H:%M:%S',
            '%Y-%m-%d',
        ]

        for fmt in formats:
            try:
                parsed = datetime.strptime(timestamp_str, fmt)
                break
            except ValueError:
                continue
        else:
            raise ValueError(f"Unable to parse timestamp: {timestamp_str}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
