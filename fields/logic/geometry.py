# fields/logic/geometry.py
"""
Coordinate transforms between the three spaces a field lives in:

  • normalized   – fractions (0..1) of the rendered page box, origin top-left
  • pixel        – rendered page pixels at the current scale/rotation, origin top-left
  • PDF points   – unscaled page size, origin bottom-left (y axis flipped)

Fields are authored against the orientation on screen. At signing time the
rect is mapped back onto the unrotated media box with the page rotation then
in effect, so a mark lands where it was placed as long as that rotation equals
the one used while placing.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Tuple

from ..models.field_type import FieldType
from ..models.page_geometry import PageDimensions, PixelRect
from ..models.signature_field import SignatureField
from ..models.signature_placement import SignaturePlacement

MIN_WIDTH_FRACTION = 0.05
MIN_HEIGHT_FRACTION = 0.03

DEFAULT_FIELD_HEIGHT = 0.05
SIGNATURE_FIELD_WIDTH = 0.20
DEFAULT_FIELD_WIDTH = 0.15

_VALID_ROTATIONS = (0, 90, 180, 270)


def normalize_rotation(rotation: int) -> int:
    """Map any multiple of 90 into 0/90/180/270."""
    r = int(rotation) % 360
    if r not in _VALID_ROTATIONS:
        raise ValueError(f"Rotation must be a multiple of 90 degrees, got {rotation}")
    return r


def rotated_size(width: float, height: float, rotation: int) -> PageDimensions:
    """Page box as displayed after rotation (90/270 swap the axes)."""
    if normalize_rotation(rotation) in (90, 270):
        return PageDimensions(width=height, height=width)
    return PageDimensions(width=width, height=height)


# --------------------------------------------------------------------- pixels
def to_pixel_rect(field: SignatureField, dims: PageDimensions) -> PixelRect:
    return PixelRect(
        left=field.x * dims.width,
        top=field.y * dims.height,
        width=field.width * dims.width,
        height=field.height * dims.height,
    )


def from_pixel_rect(rect: PixelRect, dims: PageDimensions) -> Tuple[float, float, float, float]:
    """Inverse of :func:`to_pixel_rect`; returns normalized (x, y, width, height)."""
    return (
        rect.left / dims.width,
        rect.top / dims.height,
        rect.width / dims.width,
        rect.height / dims.height,
    )


# ----------------------------------------------------------------- PDF points
def to_pdf_placement(field: SignatureField, page_size: PageDimensions) -> SignaturePlacement:
    """
    Resolve a field to absolute PDF coordinates.

    ``page_size`` is the page at scale 1 in the orientation in effect at signing
    time. ``pdfY = H - y*H - h*H`` flips the top-left origin to bottom-left.
    """
    w, h = page_size.width, page_size.height
    height_pt = field.height * h
    return SignaturePlacement(
        page_index=field.page - 1,
        x=field.x * w,
        y=h - (field.y * h) - height_pt,
        width=field.width * w,
        height=height_pt,
        type=field.type,
    )


def from_pdf_placement(placement: SignaturePlacement,
                       page_size: PageDimensions) -> Tuple[float, float, float, float]:
    """Inverse of :func:`to_pdf_placement`; returns normalized (x, y, width, height)."""
    w, h = page_size.width, page_size.height
    return (
        placement.x / w,
        (h - placement.y - placement.height) / h,
        placement.width / w,
        placement.height / h,
    )


def unrotate_rect(x: float, y: float, width: float, height: float,
                  rotation: int) -> Tuple[float, float, float, float]:
    """
    Map a normalized rect drawn on a page displayed rotated clockwise by
    *rotation* onto the unrotated page (normalized, origin top-left).
    """
    r = normalize_rotation(rotation)
    if r == 90:
        return y, 1 - x - width, height, width
    if r == 180:
        return 1 - x - width, 1 - y - height, width, height
    if r == 270:
        return 1 - y - height, x, height, width
    return x, y, width, height


def to_page_placement(field: SignatureField, media_size: PageDimensions,
                      rotation: int = 0) -> SignaturePlacement:
    """
    Resolve a field authored on the displayed page onto the unrotated media
    box. The placement keeps the rotation so its content can be drawn upright
    as displayed.
    """
    r = normalize_rotation(rotation)
    x, y, w, h = unrotate_rect(field.x, field.y, field.width, field.height, r)
    placement = to_pdf_placement(field.with_geometry(x=x, y=y, width=w, height=h), media_size)
    return replace(placement, rotation=r)


# -------------------------------------------------------------- interaction
def apply_drag(origin: SignatureField, dx_px: float, dy_px: float,
               dims: PageDimensions) -> SignatureField:
    """Move the field origin by a pixel delta measured from the gesture start."""
    return origin.with_geometry(
        x=origin.x + dx_px / dims.width,
        y=origin.y + dy_px / dims.height,
    )


def apply_resize(origin: SignatureField, dx_px: float, dy_px: float, dims: PageDimensions, *,
                 min_width: float = MIN_WIDTH_FRACTION,
                 min_height: float = MIN_HEIGHT_FRACTION) -> SignatureField:
    """Grow/shrink from the bottom-right handle; only the lower bound is enforced."""
    return origin.with_geometry(
        width=max(min_width, origin.width + dx_px / dims.width),
        height=max(min_height, origin.height + dy_px / dims.height),
    )


def centered_rect(click_x_px: float, click_y_px: float, field_type: FieldType,
                  dims: PageDimensions) -> Tuple[float, float, float, float]:
    """Default rect for a click-to-place, centred on the click position."""
    width = SIGNATURE_FIELD_WIDTH if field_type == FieldType.SIGNATURE else DEFAULT_FIELD_WIDTH
    height = DEFAULT_FIELD_HEIGHT
    return (
        click_x_px / dims.width - width / 2,
        click_y_px / dims.height - height / 2,
        width,
        height,
    )
