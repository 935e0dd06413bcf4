"""Time and timestamp helpers for YouTube API interactions."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)

_DURATION_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


def format_rfc3339(dt: datetime) -> str:
    """Format datetimes as RFC3339 strings."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")


def parse_rfc3339(timestamp: Optional[str]) -> Optional[datetime]:
    if not timestamp:
        return None
    try:
        cleaned = timestamp.strip().replace("Z", "+00:00")
        parsed = datetime.fromisoformat(cleaned)
    except (AttributeError, ValueError):
        logger.debug("Failed to parse timestamp %s", timestamp)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_iso8601_duration(duration_iso: Optional[str]) -> int:
    """Parse an ISO 8601 duration string (e.g., 'PT1H5M10S') to total seconds.

    Malformed or missing input decodes to 0.
    """
    if not isinstance(duration_iso, str):
        return 0
    match = _DURATION_RE.search(duration_iso)
    if not match or not any(match.groups()):
        return 0

    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    seconds = int(match.group(3) or 0)

    return hours * 3600 + minutes * 60 + seconds


__all__ = ["format_rfc3339", "parse_rfc3339", "parse_iso8601_duration"]
