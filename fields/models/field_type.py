# fields/models/field_type.py
from __future__ import annotations
from enum import Enum


class FieldType(str, Enum):
    """Kind of artifact a recipient supplies for a field."""
    SIGNATURE = "SIGNATURE"
    INITIALS = "INITIALS"
    FULL_NAME = "FULL_NAME"
    DATE = "DATE"
    FILE_UPLOAD = "FILE_UPLOAD"

    @property
    def is_exclusive(self) -> bool:
        """At most one field of this type per recipient."""
        return self in EXCLUSIVE_FIELD_TYPES

    @property
    def label(self) -> str:
        return _LABELS[self]


EXCLUSIVE_FIELD_TYPES = frozenset({FieldType.SIGNATURE, FieldType.INITIALS, FieldType.FULL_NAME})

_LABELS = {
    FieldType.SIGNATURE: "Signature",
    FieldType.INITIALS: "Initials",
    FieldType.FULL_NAME: "Full Name",
    FieldType.DATE: "Date",
    FieldType.FILE_UPLOAD: "File Upload",
}
