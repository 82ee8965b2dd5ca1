"""
documents/tests/test_setup_service.py

Owner workflow: nothing is stored until the session validates.
"""
from __future__ import annotations

import unittest
from dataclasses import replace

from core.config.config_service import LinksConfig
from documents.enum.template_status import TemplateStatus
from documents.exceptions.errors import DecodeError, InvalidTransitionError, MissingRecipientError, ValidationError
from documents.logic.setup_service import SetupService
from documents.models.template import Requester
from documents.repository import InMemoryTemplateStore, TemplateRepository
from documents.tests.helpers import make_pdf
from fields.logic.field_interaction import PointerEvent, PointerEvents
from fields.models.field_type import FieldType
from fields.models.page_geometry import PageDimensions
from recipients.enum.recipient_status import RecipientStatus

OWNER = Requester("Owner", "owner@example.com")
RECT = (0.1, 0.1, 0.2, 0.05)


class TestSetupService(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryTemplateStore()
        self.repo = TemplateRepository(self.store)
        self.svc = SetupService(self.repo, links=LinksConfig(base_url="https://sign.example.com/"))
        self.session = self.svc.new_session(make_pdf(2), "contract.pdf", OWNER)

    def _prepared(self):
        r = self.session.recipients.add_recipient("Alice", "alice@example.com")
        self.session.fields.place_field(r.id, FieldType.SIGNATURE, RECT, 1)
        return r

    def test_validation_messages_and_no_writes(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.svc.generate_links(self.session)
        self.assertEqual(ctx.exception.message, "Please add at least one recipient.")

        self.session.recipients.add_recipient("Alice", "alice@example.com")
        with self.assertRaises(ValidationError) as ctx:
            self.svc.save_changes(self.session)
        self.assertEqual(ctx.exception.message, "Please place at least one field on the document.")
        self.assertEqual(self.store.list(), [])

    def test_requester_required(self) -> None:
        session = self.svc.new_session(make_pdf(1), "a.pdf", Requester("", ""))
        r = session.recipients.add_recipient("Alice", "alice@example.com")
        session.fields.place_field(r.id, FieldType.DATE, RECT, 1)
        with self.assertRaises(ValidationError):
            self.svc.generate_links(session)

    def test_generate_links_saves_as_sent(self) -> None:
        r = self._prepared()
        result = self.svc.generate_links(self.session)
        self.assertEqual(result.template.status, TemplateStatus.SENT)
        self.assertEqual(self.repo.get(result.template.id), result.template)
        self.assertEqual(len(result.links), 1)
        self.assertEqual(
            result.links[0].url,
            f"https://sign.example.com/?templateId={result.template.id}&recipientId={r.id}",
        )
        self.assertEqual(result.template.original_pdf, self.session.pdf)
        self.assertEqual(len(result.template.activity_log), 2)

    def test_edit_saves_as_draft_and_keeps_recipient_state(self) -> None:
        self._prepared()
        template = self.svc.generate_links(self.session).template
        signed = template.recipients[0].mark_signed("2024-01-01T00:00:00+00:00")
        self.repo.save(template.with_recipient(signed))

        edit = self.svc.edit_session(template.id)
        edit.fields.place_field(signed.id, FieldType.DATE, RECT, 2)
        saved = self.svc.save_changes(edit)
        self.assertEqual(saved.id, template.id)
        self.assertEqual(saved.status, TemplateStatus.DRAFT)
        self.assertEqual(len(saved.fields), 2)
        self.assertEqual(saved.recipients[0].status, RecipientStatus.SIGNED)

        resent = self.svc.generate_links(self.svc.edit_session(template.id))
        self.assertEqual(resent.template.status, TemplateStatus.SENT)

    def test_completed_documents_cannot_be_edited(self) -> None:
        self._prepared()
        template = self.svc.generate_links(self.session).template
        self.repo.save(replace(template, status=TemplateStatus.COMPLETED))
        with self.assertRaises(InvalidTransitionError):
            self.svc.edit_session(template.id)

    def test_removing_recipient_cascades(self) -> None:
        r = self._prepared()
        upload = self.session.fields.place_field(r.id, FieldType.FILE_UPLOAD, RECT, 1)
        self.session.attachments.upload_attachment(upload.id, r.id, b"x", "x.txt")
        self.session.recipients.remove_recipient(r.id)
        self.assertEqual(self.session.fields.fields, ())
        self.assertEqual(self.session.attachments.attachments, ())

    def test_click_placement_uses_selection(self) -> None:
        dims = PageDimensions(600, 800)
        self.session.select_field_type(FieldType.INITIALS)
        with self.assertRaises(MissingRecipientError):
            self.session.place_at(300, 400, dims, 1)
        r = self.session.recipients.add_recipient("Alice", "alice@example.com")
        field = self.session.place_at(300, 400, dims, 1)
        self.assertEqual(field.recipient_id, r.id)
        self.assertAlmostEqual(field.x, 0.5 - 0.075)
        self.assertAlmostEqual(field.width, 0.15)
        # choosing the active type again clears it
        self.session.select_field_type(FieldType.INITIALS)
        self.assertIsNone(self.session.selected_field_type)

    def test_page_rotation_is_document_state(self) -> None:
        self.assertEqual(self.session.rotate_page(1), 90)
        size = self.session.displayed_size(1)
        self.assertEqual((size.width, size.height), (792, 612))
        for _ in range(3):
            self.session.rotate_page(1)
        self.assertEqual(self.session.rotation(1), 0)
        self.assertEqual(self.session.page_rotations, {})
        with self.assertRaises(ValidationError):
            self.session.rotate_page(3)

    def test_drag_updates_field_through_session(self) -> None:
        r = self._prepared()
        field = self.session.fields.fields_for(r.id)[0]
        events = PointerEvents()
        interaction = self.session.interaction(events)
        interaction.begin_drag(field, 0, 0, PageDimensions(1000, 1000))
        events.emit(PointerEvent("move", 100, 200))
        events.emit(PointerEvent("up", 100, 200))
        moved = self.session.fields.get(field.id)
        self.assertAlmostEqual(moved.x, 0.2)
        self.assertAlmostEqual(moved.y, 0.3)
        self.assertEqual(events.listener_count, 0)

    def test_invalid_pdf(self) -> None:
        with self.assertRaises(DecodeError):
            self.svc.new_session(b"not a pdf", "x.pdf", OWNER)


if __name__ == "__main__":
    unittest.main()
