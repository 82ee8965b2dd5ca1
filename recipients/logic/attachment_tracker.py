# recipients/logic/attachment_tracker.py
"""
Files uploaded into FILE_UPLOAD fields.

At most one attachment per field: a new upload replaces the previous one.
A recipient may finalize only when each of their FILE_UPLOAD fields has one.
"""
from __future__ import annotations

import logging
import uuid
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from core.helpers.data_url import coerce_bytes
from documents.exceptions.errors import ConstraintError, MissingUploadsError, ValidationError
from fields.models.field_type import FieldType
from fields.models.signature_field import SignatureField

from ..models.attachment import Attachment

logger = logging.getLogger(__name__)


class AttachmentTracker:
    def __init__(self, fields: Callable[[], Iterable[SignatureField]],
                 attachments: Sequence[Attachment] = ()) -> None:
        self._fields = fields
        # keyed by field id, insertion order kept for export
        self._by_field: Dict[str, Attachment] = {a.field_id: a for a in attachments}

    # ------------------------------------------------------------ queries
    @property
    def attachments(self) -> Tuple[Attachment, ...]:
        return tuple(self._by_field.values())

    def for_field(self, field_id: str) -> Optional[Attachment]:
        return self._by_field.get(field_id)

    def for_recipient(self, recipient_id: str) -> Tuple[Attachment, ...]:
        return tuple(a for a in self._by_field.values() if a.recipient_id == recipient_id)

    def _upload_fields(self, recipient_id: str) -> List[SignatureField]:
        return [f for f in self._fields()
                if f.recipient_id == recipient_id and f.type == FieldType.FILE_UPLOAD]

    def missing_uploads(self, recipient_id: str) -> List[str]:
        return [f.id for f in self._upload_fields(recipient_id) if f.id not in self._by_field]

    def is_ready_to_finalize(self, recipient_id: str) -> bool:
        return not self.missing_uploads(recipient_id)

    def ensure_ready(self, recipient_id: str) -> None:
        missing = self.missing_uploads(recipient_id)
        if missing:
            raise MissingUploadsError(missing)

    # ------------------------------------------------------------ commands
    def upload_attachment(self, field_id: str, recipient_id: str,
                          data: Union[bytes, bytearray, str], file_name: str,
                          mime_type: Optional[str] = None) -> Attachment:
        if not any(f.id == field_id for f in self._upload_fields(recipient_id)):
            raise ConstraintError(f"Field {field_id} is not a file upload field of this recipient.")
        if not file_name:
            raise ValidationError("File name is required.", field="file_name")
        try:
            raw, detected_mime = coerce_bytes(data)
        except ValueError as ex:
            raise ValidationError(f"Could not read uploaded file: {ex}", field="data") from ex

        attachment = Attachment(
            id=f"attachment-{uuid.uuid4().hex[:12]}",
            field_id=field_id,
            recipient_id=recipient_id,
            file_name=file_name,
            data=raw,
            mime_type=mime_type or detected_mime,
        )
        replaced = field_id in self._by_field
        self._by_field[field_id] = attachment
        logger.info(f"{'Replaced' if replaced else 'Stored'} attachment '{file_name}' for field {field_id}")
        return attachment

    def remove_attachment(self, field_id: str) -> None:
        self._by_field.pop(field_id, None)

    def remove_for_field(self, field_id: str) -> None:
        self.remove_attachment(field_id)

    def remove_for_recipient(self, recipient_id: str) -> None:
        for field_id in [k for k, a in self._by_field.items() if a.recipient_id == recipient_id]:
            del self._by_field[field_id]
