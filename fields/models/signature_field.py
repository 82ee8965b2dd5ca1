from __future__ import annotations
from dataclasses import dataclass, replace

from .field_type import FieldType

GEOMETRY_KEYS = ("x", "y", "width", "height")


@dataclass(frozen=True)
class SignatureField:
    """
    A typed, recipient-owned rectangle on one page.

    x/y/width/height are fractions of the rendered page box as displayed when
    the field was placed (rotation is page state, not stored here).
    """
    id: str
    recipient_id: str
    page: int                  # 1-based
    x: float
    y: float
    width: float
    height: float
    type: FieldType

    def with_geometry(self, **geometry: float) -> "SignatureField":
        unknown = set(geometry) - set(GEOMETRY_KEYS)
        if unknown:
            raise KeyError(f"Not a geometry attribute: {', '.join(sorted(unknown))}")
        return replace(self, **{k: float(v) for k, v in geometry.items()})

    @property
    def rect(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)
