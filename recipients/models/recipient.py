from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from ..enum.recipient_status import RecipientStatus


@dataclass(frozen=True)
class Recipient:
    """
    A party asked to fill in fields on a document.

    ``signed_full_name``/``signed_initials`` are folded in from the signer's
    info when they finalize; revert-to-draft drops them together with
    ``signed_at``.
    """
    id: str
    name: str
    email: str
    color: str
    phone: Optional[str] = None
    status: RecipientStatus = RecipientStatus.PENDING
    signed_at: Optional[str] = None
    signed_full_name: Optional[str] = None
    signed_initials: Optional[str] = None

    @property
    def has_signed(self) -> bool:
        return self.status == RecipientStatus.SIGNED

    def mark_signed(self, signed_at: str, *, full_name: Optional[str] = None,
                    initials: Optional[str] = None) -> "Recipient":
        return replace(
            self,
            status=RecipientStatus.SIGNED,
            signed_at=signed_at,
            signed_full_name=full_name,
            signed_initials=initials,
        )

    def reset(self) -> "Recipient":
        return replace(
            self,
            status=RecipientStatus.PENDING,
            signed_at=None,
            signed_full_name=None,
            signed_initials=None,
        )
