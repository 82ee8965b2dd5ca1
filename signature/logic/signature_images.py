"""
Producers of signature/initials PNGs: freehand strokes, typed text and
uploaded images. All return PNG bytes with an alpha channel.
"""
from __future__ import annotations

import io
from dataclasses import replace
from typing import Any, Optional, Sequence, Tuple, Union

from PIL import Image, ImageColor, ImageDraw, ImageFont, UnidentifiedImageError

from core.helpers.data_url import coerce_bytes
from documents.exceptions.errors import ValidationError

from ..models.signature_source import SignatureSource
from ..models.signer_info import SignerInfo

ImageData = Union[bytes, bytearray, str]
Stroke = Sequence[Sequence[float]]

# drawing pad size used when the caller does not pass one
PAD_SIZE = (500, 200)

# canvas heights used by the typed-signature styles
_TYPED_HEIGHTS = {"cursive": 100, "sans": 80}
_TYPED_SIZES = {"cursive": 48, "sans": 36}


def _ink(color: str) -> Tuple[int, int, int, int]:
    """Opaque RGBA for ``#RGB``, ``#RRGGBB`` or a CSS colour name."""
    try:
        r, g, b = ImageColor.getrgb(color or "#000000")[:3]
    except ValueError as ex:
        raise ValidationError(f"Unknown colour {color!r}.", field="color") from ex
    return r, g, b, 255


def _to_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def render_png_from_strokes(strokes: Sequence[Stroke], size: Tuple[int, int] = PAD_SIZE,
                            stroke_width: int = 3, color: str = "#000000") -> bytes:
    """
    Convert freehand strokes (from a drawing pad) into a transparent PNG.
    Single-point strokes are ignored.
    """
    img = Image.new("RGBA", tuple(size), (0, 0, 0, 0))
    drw = ImageDraw.Draw(img)
    ink = _ink(color)
    for poly in strokes:
        points = [(float(p[0]), float(p[1])) for p in poly]
        if len(points) >= 2:
            drw.line(points, fill=ink, width=stroke_width, joint="curve")
    return _to_png(img)


def _load_font(style: str, font_path: Optional[str]) -> ImageFont.ImageFont:
    size = _TYPED_SIZES.get(style, _TYPED_SIZES["sans"])
    if font_path:
        return ImageFont.truetype(font_path, size)
    return ImageFont.load_default(size=size)


def render_typed_signature(text: str, *, style: str = "cursive",
                           font_path: Optional[str] = None, color: str = "#000000") -> bytes:
    """Typed name drawn left-aligned with 20px padding, vertically centred."""
    text = (text or "").strip()
    if not text:
        raise ValidationError("Type your name to create a signature.", field="text")
    font = _load_font(style, font_path)
    left, _top, right, _bottom = ImageDraw.Draw(Image.new("RGBA", (1, 1))).textbbox((0, 0), text, font=font)
    width = int(right - left) + 40
    height = _TYPED_HEIGHTS.get(style, _TYPED_HEIGHTS["sans"])

    img = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    ImageDraw.Draw(img).text((20, height / 2), text, font=font, fill=_ink(color), anchor="lm")
    return _to_png(img)


def normalize_signature_image(data: ImageData) -> bytes:
    """Accept PNG/JPEG bytes or a data URL and return RGBA PNG bytes."""
    try:
        raw, _mime = coerce_bytes(data, default_mime="image/png")
        with Image.open(io.BytesIO(raw)) as img:
            return _to_png(img.convert("RGBA"))
    except (ValueError, UnidentifiedImageError, OSError) as ex:
        raise ValidationError(f"Signature image could not be read: {ex}", field="image") from ex


def produce_signature_image(source: SignatureSource, value: Any, *,
                            size: Tuple[int, int] = PAD_SIZE, style: str = "cursive",
                            color: str = "#000000") -> bytes:
    """
    One entry point for the three ways of signing: *value* is a list of
    strokes (DRAW), the typed text (TYPE) or image bytes / a data URL (UPLOAD).
    """
    source = SignatureSource(source)
    if source == SignatureSource.DRAW:
        return render_png_from_strokes(value or [], size, color=color)
    if source == SignatureSource.TYPE:
        return render_typed_signature(value, style=style, color=color)
    return normalize_signature_image(value)


def normalize_signer_info(info: SignerInfo) -> SignerInfo:
    """Decode and re-encode both images as RGBA PNG; missing images stay missing."""
    return replace(
        info,
        signature_image=normalize_signature_image(info.signature_image) if info.signature_image else None,
        initials_image=normalize_signature_image(info.initials_image) if info.initials_image else None,
    )
