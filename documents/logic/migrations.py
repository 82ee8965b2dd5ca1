"""
Upgrades stored template dicts to the current schema before mapping.

Version 1 (no ``schemaVersion`` key) is the shape written by the first
release: recipients without status/phone, no requester, attachments,
activity log, original PDF or page rotations.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from ..models.template import CURRENT_SCHEMA_VERSION

logger = logging.getLogger(__name__)

Migration = Callable[[Dict[str, Any]], Dict[str, Any]]


def _v1_to_v2(data: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(data)
    out.setdefault("requester", {"name": "", "email": ""})
    out["recipients"] = [
        {"status": "Pending", "phone": None, **recipient} for recipient in data.get("recipients", [])
    ]
    out.setdefault("attachments", [])
    out.setdefault("activityLog", [])
    out.setdefault("pageRotations", {})
    out.setdefault("lastSignedPdf", None)
    if not out.get("originalPdf"):
        out["originalPdf"] = out.get("pdf")
    out.setdefault("status", "Draft")
    out["schemaVersion"] = 2
    return out


MIGRATIONS: Dict[int, Migration] = {
    1: _v1_to_v2,
}


def schema_version_of(data: Dict[str, Any]) -> int:
    return int(data.get("schemaVersion") or 1)


def migrate(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply migrations in order until the data is at the current version."""
    version = schema_version_of(data)
    if version > CURRENT_SCHEMA_VERSION:
        raise ValueError(f"schema version {version} is newer than supported ({CURRENT_SCHEMA_VERSION})")
    while version < CURRENT_SCHEMA_VERSION:
        step = MIGRATIONS[version]
        data = step(data)
        logger.info(f"Migrated template {data.get('id')} from schema v{version} to v{version + 1}")
        version = schema_version_of(data)
    return data
