# documents/logic/lifecycle.py
"""
Document lifecycle rules.

    Draft ──send──▶ Sent ──(all recipients signed)──▶ Completed ──approve──▶ Approved
      ▲               │                                  │  └──reject──▶ Rejected
      └──revert_to_draft (confirmed) ◀───────────────────┘

- send is also allowed from Sent (re-issuing links).
- Approved and Rejected are terminal.
- Every transition appends exactly one activity log entry.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, FrozenSet, Optional

from ..enum.template_status import TemplateStatus
from ..exceptions.errors import ConfirmationRequiredError, InvalidTransitionError
from ..models.template import Template
from .activity_log import ActivityLog

logger = logging.getLogger(__name__)

COMPLETION_MESSAGE = "Document fully signed and completed."

_ALLOWED: Dict[str, FrozenSet[TemplateStatus]] = {
    "send": frozenset({TemplateStatus.DRAFT, TemplateStatus.SENT}),
    "save_draft": frozenset({TemplateStatus.DRAFT, TemplateStatus.SENT}),
    "sign": frozenset({TemplateStatus.SENT}),
    "complete": frozenset({TemplateStatus.SENT}),
    "revert_to_draft": frozenset({TemplateStatus.DRAFT, TemplateStatus.SENT, TemplateStatus.COMPLETED}),
    "approve": frozenset({TemplateStatus.COMPLETED}),
    "reject": frozenset({TemplateStatus.COMPLETED}),
}


def _by(actor: Optional[str]) -> str:
    return f" by {actor}" if actor else ""


class DocumentLifecycle:
    """Stateless transition rules; callers persist the returned template."""

    def __init__(self, activity_log: Optional[ActivityLog] = None) -> None:
        self._log = activity_log or ActivityLog()

    # ------------------------------------------------------------ guards
    @staticmethod
    def can(status: TemplateStatus, action: str) -> bool:
        return status in _ALLOWED.get(action, frozenset())

    def ensure(self, template: Template, action: str, reason: Optional[str] = None) -> None:
        if not self.can(template.status, action):
            raise InvalidTransitionError(template.status.value, action, reason)

    # ------------------------------------------------------------ transitions
    def send(self, template: Template, actor: Optional[str] = None) -> Template:
        self.ensure(template, "send")
        n = len(template.recipients)
        logger.info(f"Template {template.id}: {template.status.value} -> Sent")
        return self._log.append(
            replace(template, status=TemplateStatus.SENT),
            f"Signing links generated for {n} recipient(s){_by(actor)}. Status: Sent.",
        )

    def save_draft(self, template: Template, actor: Optional[str] = None) -> Template:
        self.ensure(template, "save_draft")
        logger.info(f"Template {template.id}: {template.status.value} -> Draft (edited)")
        return self._log.append(
            replace(template, status=TemplateStatus.DRAFT),
            f"Document changes saved{_by(actor)}. Status: Draft.",
        )

    def complete_if_all_signed(self, template: Template) -> Template:
        """Sent → Completed the moment every recipient has signed; otherwise unchanged."""
        if template.status != TemplateStatus.SENT or not template.all_signed:
            return template
        logger.info(f"Template {template.id}: all {len(template.recipients)} recipient(s) signed -> Completed")
        return self._log.append(replace(template, status=TemplateStatus.COMPLETED), COMPLETION_MESSAGE)

    def revert_to_draft(self, template: Template, *, confirmed: bool = False,
                        actor: Optional[str] = None) -> Template:
        """Back to Draft: every recipient Pending again and the signed snapshot dropped."""
        if not confirmed:
            raise ConfirmationRequiredError(
                "Reverting to Draft clears all signatures. Confirmation is required."
            )
        self.ensure(template, "revert_to_draft")
        logger.warning(f"Template {template.id}: {template.status.value} -> Draft (signatures cleared)")
        reverted = replace(
            template,
            status=TemplateStatus.DRAFT,
            recipients=tuple(r.reset() for r in template.recipients),
            last_signed_pdf=None,
            pdf=template.original_pdf,
        )
        return self._log.append(
            reverted,
            f"Document reverted to Draft{_by(actor)}. All signatures were cleared.",
        )

    def approve(self, template: Template, actor: Optional[str] = None) -> Template:
        return self._close(template, "approve", TemplateStatus.APPROVED, actor)

    def reject(self, template: Template, actor: Optional[str] = None) -> Template:
        return self._close(template, "reject", TemplateStatus.REJECTED, actor)

    def _close(self, template: Template, action: str, target: TemplateStatus,
               actor: Optional[str]) -> Template:
        self.ensure(template, action, reason="only completed documents can be approved or rejected")
        logger.info(f"Template {template.id}: Completed -> {target.value}")
        return self._log.append(
            replace(template, status=target),
            f"Document {target.value.lower()}{_by(actor)}.",
        )
