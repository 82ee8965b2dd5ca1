"""Exception hierarchy for templates, field placement and signing.

Every error carries a stable ``code`` (for callers that branch on the kind of
failure) and a human-readable ``message``.
"""
from __future__ import annotations

from typing import Optional


class SigningDeskError(Exception):
    """Base exception for the document signing feature."""

    code = "SIGNDESK_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# ----------------------------------------------------------------- validation
class ValidationError(SigningDeskError):
    """A precondition failed before anything was written (recoverable)."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message)


class MissingUploadsError(ValidationError):
    """Recipient tried to finalize while FILE_UPLOAD fields are still empty."""

    code = "MISSING_UPLOADS"

    def __init__(self, field_ids: list[str]) -> None:
        self.field_ids = list(field_ids)
        super().__init__(f"{len(self.field_ids)} required file upload(s) missing.", field="attachments")


class ConfirmationRequiredError(ValidationError):
    """A destructive action was invoked without the caller's confirmation."""

    code = "CONFIRMATION_REQUIRED"


# ---------------------------------------------------------------- constraints
class ConstraintError(SigningDeskError):
    """Field placement or update rejected (recoverable, no state change)."""

    code = "CONSTRAINT_ERROR"


class MissingRecipientError(ConstraintError):
    code = "MISSING_RECIPIENT"

    def __init__(self, recipient_id: Optional[str] = None) -> None:
        self.recipient_id = recipient_id
        if recipient_id:
            msg = f"Recipient not found: {recipient_id}"
        else:
            msg = "Please select a recipient and a field type before placing a field."
        super().__init__(msg)


class DuplicateExclusiveFieldError(ConstraintError):
    code = "DUPLICATE_EXCLUSIVE_FIELD"

    def __init__(self, recipient_id: str, field_type: str) -> None:
        self.recipient_id = recipient_id
        self.field_type = field_type
        super().__init__(f"Only one {field_type} field is allowed per recipient.")


class InvalidPageError(ConstraintError):
    code = "INVALID_PAGE"

    def __init__(self, page: int, page_count: int) -> None:
        self.page = page
        self.page_count = page_count
        super().__init__(f"Page {page} is outside the document (1..{page_count}).")


# ------------------------------------------------------------------ lookup
class NotFoundError(SigningDeskError):
    """Template or recipient referenced by a link does not exist."""

    code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Optional[str] = None,
                 message: Optional[str] = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        if message is None:
            message = f"{resource} not found"
            if resource_id:
                message += f": {resource_id}"
        super().__init__(message)


class AlreadySignedError(SigningDeskError):
    code = "ALREADY_SIGNED"

    def __init__(self, recipient_id: str) -> None:
        self.recipient_id = recipient_id
        super().__init__("You have already signed this document.")


# ---------------------------------------------------------------- lifecycle
class InvalidTransitionError(SigningDeskError):
    code = "INVALID_TRANSITION"

    def __init__(self, current_status: str, requested: str, reason: Optional[str] = None) -> None:
        self.current_status = current_status
        self.requested = requested
        message = f"Invalid status transition from {current_status} via {requested}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


# ---------------------------------------------------------------- pdf / io
class DecodeError(SigningDeskError):
    """PDF bytes could not be parsed."""

    code = "DECODE_ERROR"


class CompositeError(SigningDeskError):
    """Compositing failed; no partially signed bytes were produced."""

    code = "COMPOSITE_ERROR"


class PersistenceReadError(SigningDeskError):
    """A stored template value is corrupt or unreadable."""

    code = "PERSISTENCE_READ_ERROR"

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        super().__init__(f"Stored template {key} is unreadable: {reason}")


class RenderCancelledError(SigningDeskError):
    """Raised inside a render task that was superseded; never surfaced."""

    code = "RENDER_CANCELLED"

    def __init__(self, message: str = "Rendering cancelled") -> None:
        super().__init__(message)


class InteractionError(SigningDeskError):
    """A drag/resize gesture was started while another one is active."""

    code = "INTERACTION_ERROR"
