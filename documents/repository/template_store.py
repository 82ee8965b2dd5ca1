"""Key/value persistence seam for templates (interface)."""

from __future__ import annotations

from typing import Callable, List, Optional, Protocol


class TemplateStore(Protocol):
    """Opaque string-keyed store; values are serialized templates."""

    def get(self, key: str) -> Optional[str]:
        """Stored value or None."""
        ...

    def put(self, key: str, value: str) -> None:
        """Insert or replace (last write wins)."""
        ...

    def list(self, predicate: Callable[[str], bool] = lambda key: True) -> List[str]:
        """Keys matching *predicate*, in no particular order."""
        ...

    def delete(self, key: str) -> None:
        """Remove a key; unknown keys are ignored."""
        ...
