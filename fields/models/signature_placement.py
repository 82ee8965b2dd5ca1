from __future__ import annotations
from dataclasses import dataclass

from .field_type import FieldType


@dataclass(frozen=True)
class SignaturePlacement:
    """
    Absolute placement on a PDF page (points; 1 pt = 1/72 inch), origin bottom-left.
    Derived from a SignatureField at signing time, never stored. ``rotation``
    is the clockwise page rotation the content must read upright in.
    """
    page_index: int
    x: float
    y: float
    width: float
    height: float
    type: FieldType
    rotation: int = 0
