"""Open PDF bytes with pypdf, tolerating owner-password encryption."""
from __future__ import annotations

import logging
from io import BytesIO
from typing import Callable, List

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from core.common.render_task import CancelToken
from documents.exceptions.errors import DecodeError
from fields.models.page_geometry import PageDimensions

logger = logging.getLogger(__name__)


def open_pdf(pdf_bytes: bytes) -> PdfReader:
    if not pdf_bytes:
        raise DecodeError("PDF data is empty.")
    try:
        reader = PdfReader(BytesIO(pdf_bytes))
        if reader.is_encrypted:
            # documents restricted only by an owner password open with ""
            reader.decrypt("")
            logger.debug("Opened encrypted PDF with empty user password")
        _ = len(reader.pages)
        return reader
    except (PdfReadError, ValueError, OSError, NotImplementedError) as ex:
        raise DecodeError(f"Could not read PDF: {ex}") from ex


def page_sizes(pdf_bytes: bytes) -> List[PageDimensions]:
    """Unrotated media box of each page, in points."""
    reader = open_pdf(pdf_bytes)
    return [PageDimensions(float(p.mediabox.width), float(p.mediabox.height)) for p in reader.pages]


def page_count(pdf_bytes: bytes) -> int:
    return len(open_pdf(pdf_bytes).pages)


def page_sizes_job(pdf_bytes: bytes) -> Callable[[CancelToken], List[PageDimensions]]:
    """Decode job for a RenderSurface; checks for cancellation between pages."""
    def job(token: CancelToken) -> List[PageDimensions]:
        reader = open_pdf(pdf_bytes)
        sizes: List[PageDimensions] = []
        for page in reader.pages:
            token.raise_if_cancelled()
            sizes.append(PageDimensions(float(page.mediabox.width), float(page.mediabox.height)))
        return sizes
    return job
