from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class PageDimensions:
    """
    Size of a page box. Rendered pages use pixels (top-left origin),
    unscaled pages use PDF points (1 pt = 1/72 inch).
    """
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Page dimensions must be positive, got {self.width}x{self.height}")


@dataclass(frozen=True)
class PixelRect:
    """Rectangle on a rendered page, origin top-left."""
    left: float
    top: float
    width: float
    height: float
