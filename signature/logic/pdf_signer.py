from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from io import BytesIO
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from pypdf import PdfReader, PdfWriter
from PIL import Image
from reportlab.pdfgen import canvas
from reportlab.lib.utils import ImageReader

from core.config.config_service import SigningConfig
from core.helpers.date_time_helper import utc_now
from documents.exceptions.errors import CompositeError, DecodeError
from fields.models.field_type import FieldType
from fields.models.signature_placement import SignaturePlacement

from ..models.signer_info import SignerInfo
from .attestation import AttestationIdentity, attestation_lines
from .pdf_loader import open_pdf

logger = logging.getLogger(__name__)

_FONT = "Helvetica"


class PdfSigner:
    """
    Burns signing artifacts into existing PDF bytes.

    One reportlab overlay page is drawn per affected page and merged onto it,
    so the original page content stays untouched underneath.
    """

    def __init__(self, config: Optional[SigningConfig] = None, *,
                 clock: Callable[[], datetime] = utc_now) -> None:
        self._cfg = config or SigningConfig()
        self._clock = clock

    # ------------------------------------------------------------ overlay
    @staticmethod
    def _local_box(c: canvas.Canvas, p: SignaturePlacement,
                   ox: float, oy: float) -> Tuple[float, float, float, float]:
        """
        Move the canvas so *p* reads upright on the page as displayed and
        return its box (x, y, width, height) in the moved coordinates.
        """
        if not p.rotation:
            return ox + p.x, oy + p.y, p.width, p.height
        w, h = (p.height, p.width) if p.rotation in (90, 270) else (p.width, p.height)
        c.translate(ox + p.x + p.width / 2, oy + p.y + p.height / 2)
        c.rotate(p.rotation)
        return -w / 2, -h / 2, w, h

    @staticmethod
    def _room_below(p: SignaturePlacement, page_w: float, page_h: float) -> float:
        """Points between the bottom of the box (as displayed) and the page edge."""
        if p.rotation == 90:
            return page_w - (p.x + p.width)
        if p.rotation == 180:
            return page_h - (p.y + p.height)
        if p.rotation == 270:
            return p.x
        return p.y

    def _draw_image(self, c: canvas.Canvas, png: Optional[bytes],
                    x: float, y: float, w: float, h: float) -> bool:
        if not png:
            return False
        img = Image.open(BytesIO(png)).convert("RGBA")
        c.drawImage(ImageReader(img), x, y, width=w, height=h, mask="auto")
        return True

    def _draw_attestation(self, c: canvas.Canvas, x: float, y: float, h: float,
                          lines: List[str], room_below: float) -> None:
        size = max(4, int(self._cfg.attestation_font_size))
        step = size + 1
        c.setFillColorRGB(0.2, 0.2, 0.2)
        c.setFont(_FONT, size)
        if len(lines) * step <= room_below:
            first = y - step
        else:
            # stacked above the box when it sits too close to the bottom edge
            first = y + h + 1 + (len(lines) - 1) * step
        for i, line in enumerate(lines):
            c.drawString(x, first - i * step, line)
        c.setFillColorRGB(0, 0, 0)

    def _make_overlay(self, page_w: float, page_h: float, ox: float, oy: float,
                      placements: Iterable[SignaturePlacement], signer: SignerInfo,
                      date_text: str, attestation: Optional[List[str]]) -> bytes:
        """
        Overlay page (same size as the target page) with every placement of
        that page; (ox, oy) is the lower-left corner of the target media box.
        """
        buf = BytesIO()
        c = canvas.Canvas(buf, pagesize=(ox + page_w, oy + page_h))
        c.setFillColorRGB(0, 0, 0)

        for p in placements:
            c.saveState()
            x, y, w, h = self._local_box(c, p, ox, oy)
            if p.type == FieldType.SIGNATURE:
                if self._draw_image(c, signer.signature_image, x, y, w, h) and attestation:
                    self._draw_attestation(c, x, y, h, attestation, self._room_below(p, page_w, page_h))
            elif p.type == FieldType.INITIALS:
                self._draw_image(c, signer.initials_image, x, y, w, h)
            elif p.type == FieldType.FULL_NAME:
                c.setFont(_FONT, int(self._cfg.name_font_size))
                c.drawString(x + 5, y + h / 2 - 6, signer.full_name)
            elif p.type == FieldType.DATE:
                c.setFont(_FONT, int(self._cfg.date_font_size))
                c.drawString(x + 5, y + h / 2 - 5, date_text)
            # FILE_UPLOAD fields carry attachments only; nothing is drawn
            c.restoreState()

        c.save()
        return buf.getvalue()

    # ------------------------------------------------------------ public
    def composite(self, pdf_bytes: bytes, placements: Iterable[SignaturePlacement],
                  signer: SignerInfo, *, attestation: Optional[AttestationIdentity] = None) -> bytes:
        """
        Return new PDF bytes with *placements* filled from *signer*.

        Pages outside the document are skipped. Any other failure raises
        CompositeError and no output is produced.
        """
        reader: PdfReader = open_pdf(pdf_bytes)
        try:
            now = self._clock()
            date_text = now.astimezone().strftime(self._cfg.date_format)
            lines = attestation_lines(attestation, now, self._cfg.attestation_reason,
                                      self._cfg.date_format) if attestation else None

            page_total = len(reader.pages)
            by_page: Dict[int, List[SignaturePlacement]] = defaultdict(list)
            for p in placements:
                if not 0 <= p.page_index < page_total:
                    logger.warning(f"Skipping {p.type.value} placement on page index {p.page_index} "
                                   f"(document has {page_total} pages)")
                    continue
                by_page[p.page_index].append(p)

            writer = PdfWriter()
            for i, page in enumerate(reader.pages):
                if i in by_page:
                    box = page.mediabox
                    overlay_pdf = self._make_overlay(
                        float(box.width), float(box.height), float(box.left), float(box.bottom),
                        by_page[i], signer, date_text, lines,
                    )
                    overlay_reader = PdfReader(BytesIO(overlay_pdf))
                    page.merge_page(overlay_reader.pages[0])
                writer.add_page(page)

            out = BytesIO()
            writer.write(out)
            logger.info(f"Composited {sum(len(v) for v in by_page.values())} placement(s) "
                        f"on {len(by_page)} page(s)")
            return out.getvalue()
        except DecodeError:
            raise
        except Exception as ex:
            raise CompositeError(f"Failed to apply signatures to the PDF: {ex}") from ex
