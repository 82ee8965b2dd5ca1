from __future__ import annotations

from enum import Enum


class SignatureSource(str, Enum):
    """How a recipient produced a signature or initials image."""
    DRAW = "draw"
    TYPE = "type"
    UPLOAD = "upload"
