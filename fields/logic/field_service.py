# fields/logic/field_service.py
"""
Field placement rules for the setup step.

- A field always belongs to an existing recipient.
- SIGNATURE, INITIALS and FULL_NAME are exclusive per recipient;
  DATE and FILE_UPLOAD may be placed any number of times.
- Updates only move/resize; ownership, type and page are fixed at placement.
"""
from __future__ import annotations

import logging
import uuid
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Tuple

from documents.exceptions.errors import (
    ConstraintError,
    DuplicateExclusiveFieldError,
    InvalidPageError,
    MissingRecipientError,
)

from ..models.field_type import FieldType
from ..models.signature_field import GEOMETRY_KEYS, SignatureField

logger = logging.getLogger(__name__)

Rect = Tuple[float, float, float, float]


class FieldRemovalListener(Protocol):
    def remove_for_field(self, field_id: str) -> None: ...


def _new_field_id() -> str:
    return f"field-{uuid.uuid4().hex[:12]}"


class FieldService:
    """Holds the fields of one document while it is being set up."""

    def __init__(
        self,
        recipient_ids: Callable[[], Iterable[str]],
        *,
        fields: Sequence[SignatureField] = (),
        page_count: Optional[int] = None,
        attachments: Optional[FieldRemovalListener] = None,
        id_factory: Callable[[], str] = _new_field_id,
    ) -> None:
        self._recipient_ids = recipient_ids
        self._fields: List[SignatureField] = list(fields)
        self._page_count = page_count
        self._attachments = attachments
        self._id_factory = id_factory

    # ------------------------------------------------------------ queries
    @property
    def fields(self) -> Tuple[SignatureField, ...]:
        return tuple(self._fields)

    @property
    def page_count(self) -> Optional[int]:
        return self._page_count

    @page_count.setter
    def page_count(self, value: Optional[int]) -> None:
        self._page_count = value

    def get(self, field_id: str) -> Optional[SignatureField]:
        return next((f for f in self._fields if f.id == field_id), None)

    def fields_for(self, recipient_id: str) -> Tuple[SignatureField, ...]:
        return tuple(f for f in self._fields if f.recipient_id == recipient_id)

    def fields_on_page(self, page: int) -> Tuple[SignatureField, ...]:
        return tuple(f for f in self._fields if f.page == page)

    def available_types(self, recipient_id: str) -> Tuple[FieldType, ...]:
        """Types the recipient can still receive (exclusive types drop out once used)."""
        used = {f.type for f in self._fields if f.recipient_id == recipient_id}
        return tuple(t for t in FieldType if not (t.is_exclusive and t in used))

    # ------------------------------------------------------------ commands
    def place_field(self, recipient_id: Optional[str], field_type: FieldType,
                    rect: Rect, page: int) -> SignatureField:
        if not recipient_id:
            raise MissingRecipientError()
        if recipient_id not in set(self._recipient_ids()):
            raise MissingRecipientError(recipient_id)

        field_type = FieldType(field_type)
        if field_type.is_exclusive and any(
            f.recipient_id == recipient_id and f.type == field_type for f in self._fields
        ):
            raise DuplicateExclusiveFieldError(recipient_id, field_type.label)

        if page < 1 or (self._page_count is not None and page > self._page_count):
            raise InvalidPageError(page, self._page_count or 0)

        x, y, width, height = rect
        field = SignatureField(
            id=self._id_factory(),
            recipient_id=recipient_id,
            page=int(page),
            x=float(x),
            y=float(y),
            width=float(width),
            height=float(height),
            type=field_type,
        )
        self._fields.append(field)
        logger.debug(f"Placed {field_type.value} field {field.id} for {recipient_id} on page {page}")
        return field

    def update_field(self, field_id: str, **changes: float) -> Optional[SignatureField]:
        """Apply geometry changes; unknown ids are ignored (returns None)."""
        illegal = set(changes) - set(GEOMETRY_KEYS)
        if illegal:
            raise ConstraintError(
                f"Only {', '.join(GEOMETRY_KEYS)} can be changed; got {', '.join(sorted(illegal))}."
            )
        for idx, field in enumerate(self._fields):
            if field.id == field_id:
                updated = field.with_geometry(**changes)
                self._fields[idx] = updated
                return updated
        return None

    def remove_field(self, field_id: str) -> None:
        before = len(self._fields)
        self._fields = [f for f in self._fields if f.id != field_id]
        if len(self._fields) == before:
            return
        if self._attachments is not None:
            self._attachments.remove_for_field(field_id)
        logger.debug(f"Removed field {field_id}")

    def remove_for_recipient(self, recipient_id: str) -> List[str]:
        """Drop every field of a recipient; returns the removed ids."""
        removed = [f.id for f in self._fields if f.recipient_id == recipient_id]
        for field_id in removed:
            self.remove_field(field_id)
        return removed
