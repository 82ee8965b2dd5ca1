from __future__ import annotations

from enum import Enum


class RecipientStatus(str, Enum):
    """Per-recipient signing progress."""

    PENDING = "Pending"
    SIGNED = "Signed"
