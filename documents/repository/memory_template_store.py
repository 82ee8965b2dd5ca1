from __future__ import annotations

from threading import RLock
from typing import Callable, Dict, List, Optional


class InMemoryTemplateStore:
    """Dict-backed TemplateStore for tests and throw-away sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = RLock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def list(self, predicate: Callable[[str], bool] = lambda key: True) -> List[str]:
        with self._lock:
            return [k for k in self._data if predicate(k)]

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)
