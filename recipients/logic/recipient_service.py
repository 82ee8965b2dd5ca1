# recipients/logic/recipient_service.py
"""Recipient list of a document during setup, including the current selection."""
from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

from documents.exceptions.errors import ValidationError

from ..models.recipient import Recipient
from .color_palette import next_color

logger = logging.getLogger(__name__)


class RecipientRemovalListener(Protocol):
    def remove_for_recipient(self, recipient_id: str) -> object: ...


def _new_recipient_id() -> str:
    return f"recipient-{uuid.uuid4().hex[:12]}"


class RecipientService:
    """
    Adds/removes recipients and tracks which one new fields are placed for.

    Removing a recipient notifies the listeners (fields, attachments) so that
    nothing keyed to the removed id survives.
    """

    def __init__(
        self,
        recipients: Sequence[Recipient] = (),
        *,
        listeners: Sequence[RecipientRemovalListener] = (),
        id_factory: Callable[[], str] = _new_recipient_id,
    ) -> None:
        self._recipients: List[Recipient] = list(recipients)
        self._listeners = list(listeners)
        self._id_factory = id_factory
        self._selected_id: Optional[str] = None
        self._auto_select()

    # ------------------------------------------------------------ queries
    @property
    def recipients(self) -> Tuple[Recipient, ...]:
        return tuple(self._recipients)

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(r.id for r in self._recipients)

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    def get(self, recipient_id: str) -> Optional[Recipient]:
        return next((r for r in self._recipients if r.id == recipient_id), None)

    # ------------------------------------------------------------ commands
    def add_listener(self, listener: RecipientRemovalListener) -> None:
        self._listeners.append(listener)

    def add_recipient(self, name: str, email: str, phone: Optional[str] = None) -> Recipient:
        name = (name or "").strip()
        email = (email or "").strip()
        if not name:
            raise ValidationError("Recipient name is required.", field="name")
        if not email:
            raise ValidationError("Recipient email is required.", field="email")

        recipient = Recipient(
            id=self._id_factory(),
            name=name,
            email=email,
            phone=(phone or "").strip() or None,
            color=next_color(r.color for r in self._recipients),
        )
        self._recipients.append(recipient)
        self._auto_select()
        logger.debug(f"Added recipient {recipient.id} ({recipient.email})")
        return recipient

    def update_recipient(self, recipient_id: str, *, name: Optional[str] = None,
                         email: Optional[str] = None, phone: Optional[str] = None) -> Optional[Recipient]:
        for idx, r in enumerate(self._recipients):
            if r.id != recipient_id:
                continue
            changes = {}
            if name is not None and name.strip():
                changes["name"] = name.strip()
            if email is not None and email.strip():
                changes["email"] = email.strip()
            if phone is not None:
                changes["phone"] = phone.strip() or None
            updated = replace(r, **changes)
            self._recipients[idx] = updated
            return updated
        return None

    def remove_recipient(self, recipient_id: str) -> None:
        before = len(self._recipients)
        self._recipients = [r for r in self._recipients if r.id != recipient_id]
        if len(self._recipients) == before:
            return
        for listener in self._listeners:
            listener.remove_for_recipient(recipient_id)
        if self._selected_id == recipient_id:
            self._selected_id = None
        self._auto_select()
        logger.debug(f"Removed recipient {recipient_id}")

    def select_recipient(self, recipient_id: Optional[str]) -> None:
        if recipient_id is not None and self.get(recipient_id) is None:
            raise ValidationError(f"Unknown recipient: {recipient_id}", field="recipient_id")
        self._selected_id = recipient_id

    def _auto_select(self) -> None:
        if self._selected_id is None and self._recipients:
            self._selected_id = self._recipients[0].id
