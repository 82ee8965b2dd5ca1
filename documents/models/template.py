"""
Template = one prepared document with everything needed to collect signatures.

Values are immutable; every change produces a complete replacement (see
``dataclasses.replace``) which the repository writes as a whole.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple

from fields.models.signature_field import SignatureField
from recipients.enum.recipient_status import RecipientStatus
from recipients.models.attachment import Attachment
from recipients.models.recipient import Recipient

from ..enum.template_status import TemplateStatus
from .activity_log_entry import ActivityLogEntry

CURRENT_SCHEMA_VERSION = 2


@dataclass(frozen=True)
class Requester:
    name: str
    email: str


@dataclass(frozen=True)
class Template:
    id: str
    pdf: bytes
    original_pdf: bytes
    file_name: str
    requester: Requester
    recipients: Tuple[Recipient, ...] = ()
    fields: Tuple[SignatureField, ...] = ()
    attachments: Tuple[Attachment, ...] = ()
    status: TemplateStatus = TemplateStatus.DRAFT
    activity_log: Tuple[ActivityLogEntry, ...] = ()
    page_rotations: Dict[int, int] = field(default_factory=dict)
    last_signed_pdf: Optional[bytes] = None
    schema_version: int = CURRENT_SCHEMA_VERSION

    # ------------------------------------------------------------ lookups
    def recipient(self, recipient_id: str) -> Optional[Recipient]:
        return next((r for r in self.recipients if r.id == recipient_id), None)

    def fields_for(self, recipient_id: str) -> Tuple[SignatureField, ...]:
        return tuple(f for f in self.fields if f.recipient_id == recipient_id)

    def rotation_for(self, page: int) -> int:
        return int(self.page_rotations.get(page, 0))

    @property
    def signing_base_pdf(self) -> bytes:
        """Bytes the next signature is composited onto."""
        return self.last_signed_pdf or self.original_pdf

    @property
    def all_signed(self) -> bool:
        return bool(self.recipients) and all(
            r.status == RecipientStatus.SIGNED for r in self.recipients
        )

    @property
    def signed_count(self) -> int:
        return sum(1 for r in self.recipients if r.status == RecipientStatus.SIGNED)

    # ------------------------------------------------------------ changes
    def with_log(self, message: str, timestamp: str) -> "Template":
        return replace(self, activity_log=self.activity_log + (ActivityLogEntry(timestamp, message),))

    def with_recipient(self, recipient: Recipient) -> "Template":
        return replace(
            self,
            recipients=tuple(recipient if r.id == recipient.id else r for r in self.recipients),
        )
