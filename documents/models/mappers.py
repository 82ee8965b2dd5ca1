"""
JSON mapping for stored templates.

Stored shape (camelCase keys, byte payloads base64 encoded)::

    {"id", "schemaVersion", "pdf", "originalPdf", "lastSignedPdf", "fileName",
     "requester": {"name", "email"}, "recipients": [...], "fields": [...],
     "attachments": [{"..., "dataUrl"}], "status", "activityLog": [...],
     "pageRotations": {"<page>": degrees}}

Older shapes are upgraded by :mod:`documents.logic.migrations` before
:func:`template_from_dict` is called.
"""
from __future__ import annotations

import base64
import binascii
from typing import Any, Dict, Optional

from core.helpers.data_url import decode_data_url, encode_data_url, is_data_url
from fields.models.field_type import FieldType
from fields.models.signature_field import SignatureField
from recipients.enum.recipient_status import RecipientStatus
from recipients.models.attachment import Attachment
from recipients.models.recipient import Recipient

from ..enum.template_status import TemplateStatus
from .activity_log_entry import ActivityLogEntry
from .template import Requester, Template


# ----------------------------------------------------------------- bytes
def encode_bytes(data: Optional[bytes]) -> Optional[str]:
    if data is None:
        return None
    return base64.b64encode(data).decode("ascii")


def decode_bytes(value: Optional[str]) -> Optional[bytes]:
    if value is None:
        return None
    if is_data_url(value):
        return decode_data_url(value)[0]
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as ex:
        raise ValueError(f"invalid base64 payload: {ex}") from ex


# ----------------------------------------------------------------- parts
def recipient_to_dict(r: Recipient) -> Dict[str, Any]:
    return {
        "id": r.id,
        "name": r.name,
        "email": r.email,
        "phone": r.phone,
        "color": r.color,
        "status": r.status.value,
        "signedAt": r.signed_at,
        "signedFullName": r.signed_full_name,
        "signedInitials": r.signed_initials,
    }


def recipient_from_dict(d: Dict[str, Any]) -> Recipient:
    return Recipient(
        id=str(d["id"]),
        name=str(d["name"]),
        email=str(d["email"]),
        color=str(d["color"]),
        phone=d.get("phone") or None,
        status=RecipientStatus(d.get("status", RecipientStatus.PENDING.value)),
        signed_at=d.get("signedAt"),
        signed_full_name=d.get("signedFullName"),
        signed_initials=d.get("signedInitials"),
    )


def field_to_dict(f: SignatureField) -> Dict[str, Any]:
    return {
        "id": f.id,
        "recipientId": f.recipient_id,
        "page": f.page,
        "x": f.x,
        "y": f.y,
        "width": f.width,
        "height": f.height,
        "type": f.type.value,
    }


def field_from_dict(d: Dict[str, Any]) -> SignatureField:
    return SignatureField(
        id=str(d["id"]),
        recipient_id=str(d["recipientId"]),
        page=int(d["page"]),
        x=float(d["x"]),
        y=float(d["y"]),
        width=float(d["width"]),
        height=float(d["height"]),
        type=FieldType(d["type"]),
    )


def attachment_to_dict(a: Attachment) -> Dict[str, Any]:
    return {
        "id": a.id,
        "fieldId": a.field_id,
        "recipientId": a.recipient_id,
        "fileName": a.file_name,
        "dataUrl": encode_data_url(a.data, a.mime_type),
        "mimeType": a.mime_type,
    }


def attachment_from_dict(d: Dict[str, Any]) -> Attachment:
    data, mime = decode_data_url(d["dataUrl"])
    return Attachment(
        id=str(d["id"]),
        field_id=str(d["fieldId"]),
        recipient_id=str(d["recipientId"]),
        file_name=str(d["fileName"]),
        data=data,
        mime_type=d.get("mimeType") or mime,
    )


# ----------------------------------------------------------------- template
def template_to_dict(t: Template) -> Dict[str, Any]:
    return {
        "id": t.id,
        "schemaVersion": t.schema_version,
        "pdf": encode_bytes(t.pdf),
        "originalPdf": encode_bytes(t.original_pdf),
        "lastSignedPdf": encode_bytes(t.last_signed_pdf),
        "fileName": t.file_name,
        "requester": {"name": t.requester.name, "email": t.requester.email},
        "recipients": [recipient_to_dict(r) for r in t.recipients],
        "fields": [field_to_dict(f) for f in t.fields],
        "attachments": [attachment_to_dict(a) for a in t.attachments],
        "status": t.status.value,
        "activityLog": [{"timestamp": e.timestamp, "message": e.message} for e in t.activity_log],
        "pageRotations": {str(page): deg for page, deg in sorted(t.page_rotations.items())},
    }


def template_from_dict(d: Dict[str, Any]) -> Template:
    requester = d.get("requester") or {}
    return Template(
        id=str(d["id"]),
        pdf=decode_bytes(d["pdf"]),
        original_pdf=decode_bytes(d["originalPdf"]),
        last_signed_pdf=decode_bytes(d.get("lastSignedPdf")),
        file_name=str(d["fileName"]),
        requester=Requester(name=str(requester.get("name", "")), email=str(requester.get("email", ""))),
        recipients=tuple(recipient_from_dict(r) for r in d.get("recipients", [])),
        fields=tuple(field_from_dict(f) for f in d.get("fields", [])),
        attachments=tuple(attachment_from_dict(a) for a in d.get("attachments", [])),
        status=TemplateStatus(d["status"]),
        activity_log=tuple(ActivityLogEntry(str(e["timestamp"]), str(e["message"]))
                           for e in d.get("activityLog", [])),
        page_rotations={int(k): int(v) for k, v in (d.get("pageRotations") or {}).items()},
        schema_version=int(d["schemaVersion"]),
    )
