"""Date and time utilities for HazardFusion.

Report timestamps arrive as ISO strings, epoch values, or naive datetimes
depending on the ingestion channel. Always route them through parse_timestamp()
so every comparison inside the fusion core is between timezone-aware UTC values.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from dateutil import parser as dateutil_parser


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(raw: Any) -> Optional[datetime]:
    """Normalize any supported timestamp representation to an aware UTC datetime.

    Args:
        raw: datetime, ISO 8601 / free-form date string, or epoch seconds.

    Returns:
        UTC datetime, or None when the value is empty or unparseable.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return ensure_utc(raw)
    if isinstance(raw, (int, float)):
        try:
            return datetime.fromtimestamp(float(raw), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    try:
        return ensure_utc(dateutil_parser.parse(str(raw).strip()))
    except (ValueError, OverflowError, TypeError):
        return None


def hours_between(a: datetime, b: datetime) -> float:
    """Absolute difference between two datetimes in hours."""
    return abs((ensure_utc(a) - ensure_utc(b)).total_seconds()) / 3600.0


def format_time_window(start: datetime, end: datetime) -> str:
    """Human-readable duration of a cluster's time range, e.g. ``"3 hours"``."""
    return f"{round(hours_between(start, end))} hours"


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime as an ISO 8601 UTC string (None passes through)."""
    if value is None:
        return None
    return ensure_utc(value).isoformat()
