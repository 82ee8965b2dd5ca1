from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Callable, Optional

from core.helpers.date_time_helper import utc_now_iso, utc_to_local_str

from ..exceptions.errors import ValidationError
from ..models.template import Template


@dataclass(frozen=True)
class ActivityLogExport:
    file_name: str
    text: str


class ActivityLog:
    """Append-only activity trail of a template plus its plain-text export."""

    def __init__(self, clock: Callable[[], str] = utc_now_iso) -> None:
        self._clock = clock

    def append(self, template: Template, message: str) -> Template:
        return template.with_log(message, self._clock())

    @staticmethod
    def export_file_name(template: Template) -> str:
        name = template.file_name
        stem = name[:-4] if name.lower().endswith(".pdf") else name
        return f"{stem}-activity-log.txt"

    @staticmethod
    def export(template: Template, tz: Optional[tzinfo] = None) -> ActivityLogExport:
        if not template.activity_log:
            raise ValidationError("No activity to download.", field="activity_log")
        header = f"Activity Log for: {template.file_name}\nDocument ID: {template.id}\n\n"
        lines = [f"[{utc_to_local_str(e.timestamp, tz)}] {e.message}" for e in template.activity_log]
        return ActivityLogExport(
            file_name=ActivityLog.export_file_name(template),
            text=header + "\n".join(lines),
        )
