from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Attachment:
    """File a recipient uploaded into one FILE_UPLOAD field (raw bytes)."""
    id: str
    field_id: str
    recipient_id: str
    file_name: str
    data: bytes
    mime_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)
