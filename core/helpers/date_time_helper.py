"""
date_time_helper.py

Helpers for conversion and formatting of date and time values.
Timestamps are stored as UTC ISO8601 strings; display uses the local zone
of the machine unless an explicit zone is passed.
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime (microseconds kept for ordering)."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """
    Returns the current UTC time as an ISO8601 string (YYYY-MM-DDTHH:MM:SS.ffffff+00:00).
    Used for activity logs and signed_at stamps.
    """
    return utc_now().isoformat()


def epoch_millis(dt: Optional[datetime] = None) -> int:
    """Milliseconds since the epoch for *dt* (default: now)."""
    return int((dt or utc_now()).timestamp() * 1000)


def parse_iso(value: str) -> datetime:
    """Parse an ISO8601 string; naive values are treated as UTC."""
    dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def utc_to_local_str(utc_iso: str, tz: Optional[tzinfo] = None,
                     fmt: str = "%m/%d/%Y, %I:%M:%S %p") -> str:
    """
    Formats a UTC ISO8601 timestamp as a human-readable local time string.

    :param utc_iso: UTC time as ISO string (from store/logs)
    :param tz: target zone; ``None`` means the machine's local zone
    :param fmt: strftime pattern
    """
    dt_local = parse_iso(utc_iso).astimezone(tz)
    return dt_local.strftime(fmt)
