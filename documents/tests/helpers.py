"""Test fixtures: small PDFs and PNGs generated on the fly."""
from __future__ import annotations

import io
from typing import Sequence, Tuple

from PIL import Image
from pypdf import PdfReader, PdfWriter
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


def make_pdf(pages: int = 1, pagesize: Tuple[float, float] = letter,
             rotations: Sequence[int] = ()) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=pagesize)
    for i in range(pages):
        c.drawString(72, 72, f"Page {i + 1}")
        c.showPage()
    c.save()
    if not rotations:
        return buf.getvalue()

    reader = PdfReader(io.BytesIO(buf.getvalue()))
    writer = PdfWriter()
    for i, page in enumerate(reader.pages):
        if i < len(rotations) and rotations[i]:
            page.rotate(rotations[i])
        writer.add_page(page)
    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()


def make_png(size: Tuple[int, int] = (60, 20), color=(0, 0, 0, 255)) -> bytes:
    img = Image.new("RGBA", size, color)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def page_text(pdf_bytes: bytes, index: int = 0) -> str:
    return PdfReader(io.BytesIO(pdf_bytes)).pages[index].extract_text() or ""


def page_image_count(pdf_bytes: bytes, index: int = 0) -> int:
    page = PdfReader(io.BytesIO(pdf_bytes)).pages[index]
    resources = page.get("/Resources") or {}
    xobjects = resources.get("/XObject") if resources else None
    if not xobjects:
        return 0
    xobjects = xobjects.get_object()
    return sum(1 for name in xobjects if xobjects[name].get_object().get("/Subtype") == "/Image")


def make_template(*, recipients=2, status=None, pdf: bytes = b"%PDF-1.4 stub", fields=()):
    """Template with *recipients* pending recipients (ids r1, r2, ...)."""
    from documents.enum.template_status import TemplateStatus
    from documents.models.template import Requester, Template
    from recipients.models.recipient import Recipient

    return Template(
        id="template-1700000000000",
        pdf=pdf,
        original_pdf=pdf,
        file_name="contract.pdf",
        requester=Requester("Owner", "owner@example.com"),
        recipients=tuple(
            Recipient(id=f"r{i}", name=f"Recipient {i}", email=f"r{i}@example.com", color="#f97316")
            for i in range(1, recipients + 1)
        ),
        fields=tuple(fields),
        status=status or TemplateStatus.SENT,
    )
