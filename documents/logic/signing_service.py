# documents/logic/signing_service.py
"""
Recipient-side signing.

open_session  -> validates the link (template exists, recipient belongs to it,
                 has not signed yet, document is Sent)
session       -> collects uploads for the recipient's FILE_UPLOAD fields and
                 the drawn, typed or uploaded signature and initials images
finalize      -> resolves the recipient's fields to PDF placements, composites
                 them onto the newest signed snapshot, marks the recipient
                 Signed and completes the document once everyone has signed

A failure anywhere before the final save leaves the stored template untouched.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from core.config.config_service import SigningConfig
from core.helpers.date_time_helper import utc_now_iso
from fields.logic.geometry import to_page_placement
from fields.models.field_type import FieldType
from fields.models.signature_field import SignatureField
from fields.models.signature_placement import SignaturePlacement
from recipients.logic.attachment_tracker import AttachmentTracker
from recipients.models.attachment import Attachment
from recipients.models.recipient import Recipient
from signature.logic.attestation import AttestationIdentity, create_attestation_identity
from signature.logic.naming_strategy import signed_file_name
from signature.logic.pdf_loader import page_sizes
from signature.logic.pdf_signer import PdfSigner
from signature.logic.signature_images import normalize_signer_info, produce_signature_image
from signature.models.signature_source import SignatureSource
from signature.models.signer_info import SignerInfo

from ..exceptions.errors import AlreadySignedError, NotFoundError, ValidationError
from ..models.template import Template
from ..repository.template_repository import TemplateRepository
from .activity_log import ActivityLog
from .lifecycle import DocumentLifecycle

logger = logging.getLogger(__name__)

SESSION_NOT_FOUND = "Signing session not found. The link may be invalid or expired."
NOT_A_RECIPIENT = "You are not a valid recipient for this document."

_IMAGE_FIELDS = (FieldType.SIGNATURE, FieldType.INITIALS)


@dataclass(frozen=True)
class SigningResult:
    template: Template
    pdf: bytes
    file_name: str


class SigningSession:
    """One recipient working through their fields. Field geometry is read-only here."""

    def __init__(self, template: Template, recipient: Recipient) -> None:
        self.template_id = template.id
        self.file_name = template.file_name
        self.recipient = recipient
        self.fields: Tuple[SignatureField, ...] = template.fields_for(recipient.id)
        self.attachments = AttachmentTracker(
            lambda: self.fields,
            [a for a in template.attachments if a.recipient_id == recipient.id],
        )
        self.attestation: Optional[AttestationIdentity] = None
        self._images: Dict[FieldType, bytes] = {}

    def upload_attachment(self, field_id: str, data: Union[bytes, bytearray, str],
                          file_name: str, mime_type: Optional[str] = None) -> Attachment:
        return self.attachments.upload_attachment(field_id, self.recipient.id, data, file_name, mime_type)

    def remove_attachment(self, field_id: str) -> None:
        self.attachments.remove_attachment(field_id)

    def is_ready_to_finalize(self) -> bool:
        return self.attachments.is_ready_to_finalize(self.recipient.id)

    def needs(self, field_type: FieldType) -> bool:
        return any(f.type == field_type for f in self.fields)

    def capture_image(self, field_type: FieldType, source: SignatureSource, value: Any,
                      **options: Any) -> bytes:
        """Produce the recipient's signature or initials from a pad, typed text or an upload."""
        if field_type not in _IMAGE_FIELDS:
            raise ValidationError(f"{field_type.label} fields do not take an image.", field="field_type")
        png = produce_signature_image(source, value, **options)
        self._images[field_type] = png
        return png

    def signer_info(self, first_name: str, last_name: str) -> SignerInfo:
        """Names from the signer dialog plus the images captured in this session."""
        return SignerInfo.from_names(
            first_name, last_name,
            signature_image=self._images.get(FieldType.SIGNATURE),
            initials_image=self._images.get(FieldType.INITIALS),
        )


class SigningService:
    def __init__(self, repository: TemplateRepository, *,
                 lifecycle: Optional[DocumentLifecycle] = None,
                 activity_log: Optional[ActivityLog] = None,
                 signer: Optional[PdfSigner] = None,
                 config: Optional[SigningConfig] = None,
                 clock: Callable[[], str] = utc_now_iso) -> None:
        self._repo = repository
        self._log = activity_log or ActivityLog(clock)
        self._lifecycle = lifecycle or DocumentLifecycle(self._log)
        self._cfg = config or SigningConfig()
        self._signer = signer or PdfSigner(self._cfg)
        self._clock = clock

    # ------------------------------------------------------------ session
    def _check_link(self, template_id: str, recipient_id: str) -> Tuple[Template, Recipient]:
        template = self._repo.find(template_id)
        if template is None:
            raise NotFoundError("Signing session", template_id, message=SESSION_NOT_FOUND)
        recipient = template.recipient(recipient_id)
        if recipient is None:
            raise NotFoundError("Recipient", recipient_id, message=NOT_A_RECIPIENT)
        if recipient.has_signed:
            raise AlreadySignedError(recipient_id)
        self._lifecycle.ensure(template, "sign", reason="the document is not open for signing")
        return template, recipient

    def open_session(self, template_id: str, recipient_id: str) -> SigningSession:
        template, recipient = self._check_link(template_id, recipient_id)
        logger.info(f"Signing session opened for {recipient.email} on {template_id}")
        return SigningSession(template, recipient)

    # ------------------------------------------------------------ finalize
    def resolve_placements(self, template: Template, fields: Tuple[SignatureField, ...]) -> List[SignaturePlacement]:
        """Map fields onto each unrotated media box, undoing the page rotation in effect now."""
        sizes = page_sizes(template.signing_base_pdf)
        placements: List[SignaturePlacement] = []
        for f in fields:
            if not 1 <= f.page <= len(sizes):
                logger.warning(f"Field {f.id} references page {f.page}; document has {len(sizes)} pages")
                continue
            placements.append(to_page_placement(f, sizes[f.page - 1], template.rotation_for(f.page)))
        return placements

    def _identity(self, session: SigningSession, signer_info: SignerInfo) -> AttestationIdentity:
        if session.attestation is None:
            session.attestation = create_attestation_identity(
                signer_info.full_name or session.recipient.name,
                country=self._cfg.certificate_country,
                locality=self._cfg.certificate_locality,
                organization=self._cfg.certificate_organization,
            )
        return session.attestation

    def finalize(self, session: SigningSession, signer_info: SignerInfo) -> SigningResult:
        session.attachments.ensure_ready(session.recipient.id)
        signer_info = normalize_signer_info(signer_info)

        # newest snapshot: another recipient may have signed since the session opened
        latest, recipient = self._check_link(session.template_id, session.recipient.id)
        fields = latest.fields_for(recipient.id)
        placements = self.resolve_placements(latest, fields)

        attestation = self._identity(session, signer_info) if any(
            p.type == FieldType.SIGNATURE for p in placements
        ) else None
        signed_pdf = self._signer.composite(latest.signing_base_pdf, placements, signer_info,
                                            attestation=attestation)

        signed_recipient = recipient.mark_signed(
            self._clock(),
            full_name=signer_info.full_name,
            initials=signer_info.initials,
        )
        kept = tuple(a for a in latest.attachments if a.recipient_id != recipient.id)
        updated = replace(
            latest.with_recipient(signed_recipient),
            pdf=signed_pdf,
            last_signed_pdf=signed_pdf,
            attachments=kept + session.attachments.attachments,
        )
        updated = self._log.append(updated, f"Signed by {recipient.name} ({recipient.email}).")
        updated = self._lifecycle.complete_if_all_signed(updated)
        self._repo.save(updated)

        logger.info(f"{recipient.email} signed {latest.id} "
                    f"({updated.signed_count}/{len(updated.recipients)} signed)")
        return SigningResult(template=updated, pdf=signed_pdf, file_name=signed_file_name(latest.file_name))
