"""Document lifecycle statuses."""
from __future__ import annotations

from enum import Enum


class TemplateStatus(str, Enum):
    """Lifecycle of a prepared document; Approved and Rejected are terminal."""

    DRAFT = "Draft"
    SENT = "Sent"
    COMPLETED = "Completed"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (TemplateStatus.APPROVED, TemplateStatus.REJECTED)

    @property
    def allows_field_edits(self) -> bool:
        return self in (TemplateStatus.DRAFT, TemplateStatus.SENT)
