"""Signature image producers, signer names and the attestation identity."""
from __future__ import annotations

import base64
import io
from datetime import datetime, timezone

import pytest
from PIL import Image

from documents.exceptions.errors import ValidationError
from documents.tests.helpers import make_png
from signature.logic.attestation import attestation_lines, create_attestation_identity
from signature.logic.naming_strategy import signed_file_name
from signature.logic.signature_images import (
    normalize_signature_image,
    normalize_signer_info,
    produce_signature_image,
    render_png_from_strokes,
    render_typed_signature,
)
from signature.models.signature_source import SignatureSource
from signature.models.signer_info import SignerInfo


def _open(png: bytes) -> Image.Image:
    return Image.open(io.BytesIO(png))


def test_strokes_render_transparent_png() -> None:
    png = render_png_from_strokes([[(0, 0), (50, 20), (90, 5)], [(3, 3)]], size=(100, 30))
    img = _open(png)
    assert img.size == (100, 30)
    assert img.mode == "RGBA"
    assert img.getpixel((0, 29))[3] == 0
    assert img.getbbox() is not None


def test_typed_signature_pads_text() -> None:
    img = _open(render_typed_signature("Jane Doe", style="sans"))
    assert img.height == 80
    assert img.width > 40
    with pytest.raises(ValidationError):
        render_typed_signature("   ")


def test_uploaded_image_is_normalized() -> None:
    jpeg = io.BytesIO()
    Image.new("RGB", (20, 10), (255, 0, 0)).save(jpeg, format="JPEG")
    url = "data:image/jpeg;base64," + base64.b64encode(jpeg.getvalue()).decode()
    img = _open(normalize_signature_image(url))
    assert img.format == "PNG"
    assert img.mode == "RGBA"
    assert _open(normalize_signature_image(make_png())).size == (60, 20)
    with pytest.raises(ValidationError):
        normalize_signature_image(b"garbage")


def test_stroke_colour_accepts_short_hex_and_names() -> None:
    short = _open(render_png_from_strokes([[(0, 5), (99, 5)]], size=(100, 10), color="#f00"))
    assert short.getpixel((50, 5)) == (255, 0, 0, 255)
    named = _open(render_png_from_strokes([[[0, 5], [99, 5]]], size=(100, 10), color="blue"))
    assert named.getpixel((50, 5)) == (0, 0, 255, 255)
    with pytest.raises(ValidationError):
        render_png_from_strokes([], size=(10, 10), color="not-a-colour")


def test_produce_signature_image_dispatches_on_source() -> None:
    drawn = _open(produce_signature_image(SignatureSource.DRAW, [[(0, 0), (40, 40)]], size=(50, 50)))
    assert drawn.size == (50, 50)
    typed = _open(produce_signature_image("type", "Jane", style="cursive"))
    assert typed.height == 100
    uploaded = _open(produce_signature_image(SignatureSource.UPLOAD, make_png((12, 8))))
    assert uploaded.size == (12, 8)
    with pytest.raises(ValueError):
        produce_signature_image("scan", b"")


def test_normalize_signer_info_keeps_missing_images() -> None:
    jpeg = io.BytesIO()
    Image.new("RGB", (20, 10), (0, 0, 0)).save(jpeg, format="JPEG")
    info = normalize_signer_info(SignerInfo("Jane Doe", "JD", signature_image=jpeg.getvalue()))
    assert _open(info.signature_image).mode == "RGBA"
    assert info.initials_image is None
    assert info.full_name == "Jane Doe"


def test_signer_info_from_names() -> None:
    info = SignerInfo.from_names(" jane ", "doe")
    assert info.full_name == "jane doe"
    assert info.initials == "JD"
    assert info.signature_image is None


def test_attestation_identity_and_lines() -> None:
    identity = create_attestation_identity("Jane Doe", country="de", locality="Berlin", organization="Acme")
    assert identity.subject == "CN=Jane Doe,O=Acme,L=Berlin,C=DE"
    assert identity.common_name == "Jane Doe"
    lines = attestation_lines(identity, datetime(2024, 1, 2, tzinfo=timezone.utc), "Approval", "%d.%m.%Y")
    assert lines == [
        "Digitally Signed by: CN=Jane Doe,O=Acme,L=Berlin,C=DE",
        "Date: 02.01.2024",
        "Reason: Approval",
        f"ID: {identity.session_id}",
    ]


def test_signed_file_name() -> None:
    assert signed_file_name("contract.pdf") == "[SIGNED] contract.pdf"
    assert signed_file_name("[SIGNED] contract.pdf") == "[SIGNED] contract.pdf"
