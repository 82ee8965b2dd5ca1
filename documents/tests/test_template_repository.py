"""
documents/tests/test_template_repository.py

Serialization, listing, schema migration and both store backends.
"""
from __future__ import annotations

import base64
import json
import tempfile
import unittest
from dataclasses import replace
from pathlib import Path

from documents.enum.template_status import TemplateStatus
from documents.exceptions.errors import NotFoundError, PersistenceReadError
from documents.logic.migrations import migrate
from documents.models.activity_log_entry import ActivityLogEntry
from documents.models.template import CURRENT_SCHEMA_VERSION
from documents.repository import InMemoryTemplateStore, SQLiteTemplateStore, TemplateRepository
from documents.tests.helpers import make_template
from fields.models.field_type import FieldType
from fields.models.signature_field import SignatureField
from recipients.enum.recipient_status import RecipientStatus
from recipients.models.attachment import Attachment

V1_TEMPLATE = {
    "id": "template-1600000000000",
    "pdf": base64.b64encode(b"%PDF-1.4 old").decode(),
    "fileName": "old.pdf",
    "recipients": [{"id": "r1", "name": "Old", "email": "old@example.com", "color": "#22c55e"}],
    "fields": [{"id": "f1", "recipientId": "r1", "page": 1, "x": 0.1, "y": 0.2,
                "width": 0.2, "height": 0.05, "type": "SIGNATURE"}],
    "status": "Sent",
}


class _RepositoryContract:
    """Shared cases, run once per store backend."""

    repo: TemplateRepository

    def _full_template(self):
        field = SignatureField("f1", "r1", 1, 0.1, 0.2, 0.3, 0.05, FieldType.FILE_UPLOAD)
        return replace(
            make_template(fields=[field]),
            attachments=(Attachment("a1", "f1", "r1", "id.png", b"\x00\x01binary", "image/png"),),
            activity_log=(ActivityLogEntry("2024-01-01T00:00:00+00:00", "Created."),),
            page_rotations={2: 90},
            last_signed_pdf=b"%PDF signed",
        )

    def test_save_and_get_round_trip(self) -> None:
        t = self._full_template()
        self.repo.save(t)
        self.assertEqual(self.repo.get(t.id), t)

    def test_get_missing(self) -> None:
        with self.assertRaises(NotFoundError):
            self.repo.get("template-0")
        self.assertIsNone(self.repo.find("template-0"))

    def test_listing_sorted_newest_first_and_skips_corrupt(self) -> None:
        for tid in ("template-1", "template-3", "template-2"):
            self.repo.save(replace(make_template(), id=tid))
        self.store.put("template-9", "{not json")
        self.store.put("settings", "{}")
        ids = [t.id for t in self.repo.list_templates()]
        self.assertEqual(ids, ["template-3", "template-2", "template-1"])
        with self.assertRaises(PersistenceReadError):
            self.repo.get("template-9")

    def test_non_object_json_is_skipped(self) -> None:
        self.repo.save(replace(make_template(), id="template-5"))
        for key, raw in (("template-1", "[]"), ("template-2", "null"), ("template-3", '"x"'),
                         ("template-4", '{"id": "template-4", "recipients": [1]}')):
            self.store.put(key, raw)
        self.assertEqual([t.id for t in self.repo.list_templates()], ["template-5"])
        for key in ("template-1", "template-2", "template-3", "template-4"):
            with self.assertRaises(PersistenceReadError):
                self.repo.get(key)

    def test_new_ids_are_unique(self) -> None:
        ids = {self.repo.new_template_id() for _ in range(50)}
        self.assertEqual(len(ids), 50)
        self.assertTrue(all(i.startswith("template-") for i in ids))

    def test_clear_all_only_removes_templates(self) -> None:
        self.repo.save(make_template())
        self.store.put("settings", "{}")
        self.assertEqual(self.repo.clear_all(), 1)
        self.assertEqual(self.repo.list_templates(), [])
        self.assertEqual(self.store.get("settings"), "{}")

    def test_v1_value_is_migrated_on_load(self) -> None:
        self.store.put(V1_TEMPLATE["id"], json.dumps(V1_TEMPLATE))
        t = self.repo.get(V1_TEMPLATE["id"])
        self.assertEqual(t.schema_version, CURRENT_SCHEMA_VERSION)
        self.assertEqual(t.original_pdf, b"%PDF-1.4 old")
        self.assertEqual(t.recipients[0].status, RecipientStatus.PENDING)
        self.assertEqual(t.status, TemplateStatus.SENT)
        self.assertEqual(t.attachments, ())
        self.assertEqual(t.page_rotations, {})


class TestInMemoryRepository(_RepositoryContract, unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryTemplateStore()
        self.repo = TemplateRepository(self.store)


class TestSQLiteRepository(_RepositoryContract, unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.store = SQLiteTemplateStore(Path(self._tmp.name) / "sub" / "templates.db")
        self.repo = TemplateRepository(self.store)

    def tearDown(self) -> None:
        self.store.close()
        self._tmp.cleanup()

    def test_put_replaces_value(self) -> None:
        self.store.put("k", "1")
        self.store.put("k", "2")
        self.assertEqual(self.store.get("k"), "2")
        self.store.delete("k")
        self.assertIsNone(self.store.get("k"))


class TestMigrations(unittest.TestCase):
    def test_current_version_is_untouched(self) -> None:
        data = {"id": "x", "schemaVersion": CURRENT_SCHEMA_VERSION}
        self.assertIs(migrate(data), data)

    def test_newer_version_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            migrate({"schemaVersion": CURRENT_SCHEMA_VERSION + 1})

    def test_v1_keeps_existing_recipient_status(self) -> None:
        data = dict(V1_TEMPLATE, recipients=[dict(V1_TEMPLATE["recipients"][0], status="Signed")])
        self.assertEqual(migrate(data)["recipients"][0]["status"], "Signed")


if __name__ == "__main__":
    unittest.main()
