"""
data_url.py

Helpers for ``data:<mime>;base64,<payload>`` URLs as produced by file and
canvas widgets.
"""

from __future__ import annotations

import base64
import binascii
from typing import Tuple, Union


def is_data_url(value: object) -> bool:
    return isinstance(value, str) and value.startswith("data:") and "," in value


def decode_data_url(data_url: str) -> Tuple[bytes, str]:
    """
    Split a data URL into ``(raw_bytes, mime_type)``.

    Raises ValueError when the value is not a base64 data URL.
    """
    if not is_data_url(data_url):
        raise ValueError("Not a data URL")
    header, encoded = data_url.split(",", 1)
    meta = header[len("data:"):]
    if not meta.endswith(";base64"):
        raise ValueError("Only base64 data URLs are supported")
    mime_type = meta[: -len(";base64")] or "application/octet-stream"
    try:
        return base64.b64decode(encoded, validate=True), mime_type
    except binascii.Error as ex:
        raise ValueError(f"Invalid base64 payload: {ex}") from ex


def encode_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def coerce_bytes(value: Union[bytes, bytearray, str], default_mime: str = "application/octet-stream") -> Tuple[bytes, str]:
    """Accept raw bytes or a data URL; returns ``(bytes, mime_type)``."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value), default_mime
    return decode_data_url(value)
