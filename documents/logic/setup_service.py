# documents/logic/setup_service.py
"""
Owner-side preparation of a document.

A :class:`SetupSession` collects recipients, fields and page rotations in
memory. Nothing is written to the store until the session validates, then
:meth:`SetupService.generate_links` (status Sent) or
:meth:`SetupService.save_changes` (status Draft) persists one complete
template value.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from core.config.config_service import FieldsConfig, LinksConfig
from fields.logic.field_interaction import FieldInteraction, PointerEvents
from fields.logic.field_service import FieldService
from fields.logic.geometry import centered_rect, normalize_rotation, rotated_size
from fields.models.field_type import FieldType
from fields.models.page_geometry import PageDimensions
from fields.models.signature_field import SignatureField
from recipients.logic.attachment_tracker import AttachmentTracker
from recipients.logic.recipient_service import RecipientService
from recipients.models.recipient import Recipient
from signature.logic.pdf_loader import page_sizes

from ..enum.template_status import TemplateStatus
from ..exceptions.errors import InvalidTransitionError, MissingRecipientError, ValidationError
from ..models.template import Requester, Template
from ..repository.template_repository import TemplateRepository
from .activity_log import ActivityLog
from .lifecycle import DocumentLifecycle
from .signing_links import build_signing_link

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SigningLink:
    recipient: Recipient
    url: str


@dataclass(frozen=True)
class SetupResult:
    template: Template
    links: Tuple[SigningLink, ...]


class SetupSession:
    """Editable state of one document before it is saved."""

    def __init__(self, *, pdf: bytes, file_name: str, requester: Requester,
                 existing: Optional[Template] = None,
                 fields_config: Optional[FieldsConfig] = None) -> None:
        self.pdf = pdf
        self.file_name = file_name
        self.requester = requester
        self.existing = existing
        self.page_sizes: List[PageDimensions] = page_sizes(pdf)
        self.page_rotations: Dict[int, int] = dict(existing.page_rotations) if existing else {}
        self.selected_field_type: Optional[FieldType] = None
        self._fields_config = fields_config or FieldsConfig()

        self.attachments = AttachmentTracker(
            lambda: self.fields.fields,
            existing.attachments if existing else (),
        )
        self.recipients = RecipientService(existing.recipients if existing else ())
        self.fields = FieldService(
            lambda: self.recipients.ids,
            fields=existing.fields if existing else (),
            page_count=len(self.page_sizes),
            attachments=self.attachments,
        )
        self.recipients.add_listener(self.fields)
        self.recipients.add_listener(self.attachments)

    # ------------------------------------------------------------ pages
    @property
    def page_count(self) -> int:
        return len(self.page_sizes)

    def rotation(self, page: int) -> int:
        return self.page_rotations.get(page, 0)

    def rotate_page(self, page: int, degrees: int = 90) -> int:
        """Rotate one page clockwise; fields keep their normalized geometry."""
        if not 1 <= page <= self.page_count:
            raise ValidationError(f"Page {page} is outside the document.", field="page")
        new = normalize_rotation(self.rotation(page) + degrees)
        if new:
            self.page_rotations[page] = new
        else:
            self.page_rotations.pop(page, None)
        return new

    def displayed_size(self, page: int) -> PageDimensions:
        """Page size in points as displayed (after rotation)."""
        size = self.page_sizes[page - 1]
        return rotated_size(size.width, size.height, self.rotation(page))

    # ------------------------------------------------------------ fields
    def select_field_type(self, field_type: Optional[FieldType]) -> None:
        """Selecting the active type again clears the selection."""
        if field_type is not None and field_type == self.selected_field_type:
            self.selected_field_type = None
        else:
            self.selected_field_type = field_type

    def place_at(self, click_x: float, click_y: float, dims: PageDimensions, page: int) -> SignatureField:
        """Place a field for the selected recipient/type centred on a click in page pixels."""
        if self.selected_field_type is None or self.recipients.selected_id is None:
            raise MissingRecipientError()
        rect = centered_rect(click_x, click_y, self.selected_field_type, dims)
        return self.fields.place_field(self.recipients.selected_id, self.selected_field_type, rect, page)

    def interaction(self, pointer_events: PointerEvents) -> FieldInteraction:
        """Drag/resize controller whose updates go through the placement rules."""
        return FieldInteraction(
            pointer_events,
            lambda field_id, geometry: self.fields.update_field(field_id, **geometry),
            min_width=self._fields_config.min_width,
            min_height=self._fields_config.min_height,
        )

    # ------------------------------------------------------------ validation
    def validate(self) -> None:
        if not self.requester.name.strip() or not self.requester.email.strip():
            raise ValidationError("Please enter your name and email as the requester.", field="requester")
        if not self.recipients.recipients:
            raise ValidationError("Please add at least one recipient.", field="recipients")
        if not self.fields.fields:
            raise ValidationError("Please place at least one field on the document.", field="fields")


class SetupService:
    def __init__(self, repository: TemplateRepository, *,
                 lifecycle: Optional[DocumentLifecycle] = None,
                 activity_log: Optional[ActivityLog] = None,
                 links: Optional[LinksConfig] = None,
                 fields_config: Optional[FieldsConfig] = None) -> None:
        self._repo = repository
        self._log = activity_log or ActivityLog()
        self._lifecycle = lifecycle or DocumentLifecycle(self._log)
        self._links = links or LinksConfig()
        self.fields_config = fields_config or FieldsConfig()

    # ------------------------------------------------------------ sessions
    def new_session(self, pdf: bytes, file_name: str, requester: Requester) -> SetupSession:
        session = SetupSession(pdf=pdf, file_name=file_name, requester=requester,
                               fields_config=self.fields_config)
        logger.info(f"Started setup for '{file_name}' ({session.page_count} pages)")
        return session

    def edit_session(self, template_id: str) -> SetupSession:
        template = self._repo.get(template_id)
        if not template.status.allows_field_edits:
            raise InvalidTransitionError(template.status.value, "edit",
                                         "fields can only be changed while Draft or Sent")
        return SetupSession(pdf=template.original_pdf, file_name=template.file_name,
                            requester=template.requester, existing=template,
                            fields_config=self.fields_config)

    # ------------------------------------------------------------ saving
    def generate_links(self, session: SetupSession, actor: Optional[str] = None) -> SetupResult:
        """Validate, save with status Sent and return one link per recipient."""
        session.validate()
        template = self._lifecycle.send(self._build(session), actor or session.requester.name)
        self._repo.save(template)
        return SetupResult(template=template, links=self.links_for(template))

    def save_changes(self, session: SetupSession, actor: Optional[str] = None) -> Template:
        """Validate and save as Draft."""
        session.validate()
        template = self._lifecycle.save_draft(self._build(session), actor or session.requester.name)
        self._repo.save(template)
        return template

    def links_for(self, template: Template) -> Tuple[SigningLink, ...]:
        return tuple(
            SigningLink(r, build_signing_link(self._links.base_url, template.id, r.id))
            for r in template.recipients
        )

    def _build(self, session: SetupSession) -> Template:
        field_ids = {f.id for f in session.fields.fields}
        attachments = tuple(a for a in session.attachments.attachments if a.field_id in field_ids)
        if session.existing is not None:
            return replace(
                session.existing,
                requester=session.requester,
                recipients=session.recipients.recipients,
                fields=session.fields.fields,
                attachments=attachments,
                page_rotations=dict(session.page_rotations),
            )
        template = Template(
            id=self._repo.new_template_id(),
            pdf=session.pdf,
            original_pdf=session.pdf,
            file_name=session.file_name,
            requester=session.requester,
            recipients=session.recipients.recipients,
            fields=session.fields.fields,
            attachments=attachments,
            status=TemplateStatus.DRAFT,
            page_rotations=dict(session.page_rotations),
        )
        return self._log.append(template, f"Document '{session.file_name}' created by {session.requester.name}.")
