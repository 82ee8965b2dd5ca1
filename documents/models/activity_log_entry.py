from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ActivityLogEntry:
    timestamp: str   # ISO-8601 UTC
    message: str
