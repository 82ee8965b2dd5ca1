"""Template repository: typed access on top of a TemplateStore.

Handles JSON (de)serialization and schema migration at load time.
"""

from __future__ import annotations

import json
import logging
from threading import Lock
from typing import List, Optional

from core.helpers.date_time_helper import epoch_millis

from ..exceptions.errors import NotFoundError, PersistenceReadError
from ..logic.migrations import migrate
from ..models.mappers import template_from_dict, template_to_dict
from ..models.template import Template
from .template_store import TemplateStore

logger = logging.getLogger(__name__)

TEMPLATE_KEY_PREFIX = "template-"


def is_template_key(key: str) -> bool:
    return key.startswith(TEMPLATE_KEY_PREFIX)


class TemplateRepository:
    def __init__(self, store: TemplateStore) -> None:
        self._store = store
        self._id_lock = Lock()
        self._last_millis = 0

    # ------------------------------------------------------------ ids
    def new_template_id(self) -> str:
        """``template-<epoch millis>``, bumped by one if the millisecond is taken."""
        with self._id_lock:
            millis = max(epoch_millis(), self._last_millis + 1)
            while self._store.get(f"{TEMPLATE_KEY_PREFIX}{millis}") is not None:
                millis += 1
            self._last_millis = millis
            return f"{TEMPLATE_KEY_PREFIX}{millis}"

    # ------------------------------------------------------------ reads
    def find(self, template_id: str) -> Optional[Template]:
        raw = self._store.get(template_id)
        if raw is None:
            return None
        return self._decode(template_id, raw)

    def get(self, template_id: str) -> Template:
        template = self.find(template_id)
        if template is None:
            raise NotFoundError("Template", template_id)
        return template

    def list_templates(self) -> List[Template]:
        """All readable templates, newest id first; unreadable entries are logged and skipped."""
        result: List[Template] = []
        for key in self._store.list(is_template_key):
            raw = self._store.get(key)
            if raw is None:
                continue
            try:
                result.append(self._decode(key, raw))
            except PersistenceReadError as ex:
                logger.error(f"Skipping template {key}: {ex.message}")
        result.sort(key=lambda t: t.id, reverse=True)
        return result

    # ------------------------------------------------------------ writes
    def save(self, template: Template) -> None:
        self._store.put(template.id, json.dumps(template_to_dict(template)))
        logger.debug(f"Saved template {template.id} ({template.status.value})")

    def delete(self, template_id: str) -> None:
        self._store.delete(template_id)

    def clear_all(self) -> int:
        keys = self._store.list(is_template_key)
        for key in keys:
            self._store.delete(key)
        logger.info(f"Cleared {len(keys)} template(s)")
        return len(keys)

    # ------------------------------------------------------------ internals
    @staticmethod
    def _decode(key: str, raw: str) -> Template:
        try:
            data = json.loads(raw)
        except ValueError as ex:
            raise PersistenceReadError(key, str(ex)) from ex
        if not isinstance(data, dict):
            raise PersistenceReadError(key, f"expected a JSON object, got {type(data).__name__}")
        try:
            return template_from_dict(migrate(data))
        except (ValueError, KeyError, TypeError, AttributeError) as ex:
            raise PersistenceReadError(key, str(ex)) from ex
