import io
import logging
from pathlib import Path
from typing import Optional, Sequence, Tuple

from PIL import Image
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from ..imaging.text import FONT_CANDIDATES

logger = logging.getLogger(__name__)

FONT_NAME = "DejaVuSans"


def _ensure_font(extra_candidates: Sequence[Path] = ()) -> str:
    try:
        pdfmetrics.getFont(FONT_NAME)
        return FONT_NAME
    except KeyError:
        pass

    for candidate in [*extra_candidates, *FONT_CANDIDATES]:
        if candidate.exists():
            try:
                pdfmetrics.registerFont(TTFont(FONT_NAME, str(candidate)))
                return FONT_NAME
            except Exception as exc:  # a broken font file falls back to the built-in fonts
                logger.warning("Failed to register font %s: %s", candidate, exc)
                continue
    return "Helvetica"


def export_pdf(
    title: str,
    pages: Sequence[Tuple[str, bytes]],
    footer: Optional[str] = None,
) -> bytes:
    """
    Printable booklet, one landscape A4 page per ``(caption, png bytes)`` pair.
    Each sheet is scaled down to fit below its caption, never scaled up.
    """

    buffer = io.BytesIO()

    page_w, page_h = landscape(A4)
    c = canvas.Canvas(buffer, pagesize=(page_w, page_h))
    c.setTitle(title)
    font_name = _ensure_font()

    block_w = page_w - 40 * mm
    block_h = page_h - 50 * mm
    top_y = page_h - 30 * mm
    left_x = 20 * mm

    for caption, png in pages:
        c.setFont(font_name, 16)
        c.drawString(left_x, page_h - 20 * mm, f"{title} - {caption}")

        img = Image.open(io.BytesIO(png))
        img_w, img_h = img.size
        scale = min(block_w / img_w, block_h / img_h, 1.0)
        draw_w = img_w * scale
        draw_h = img_h * scale
        c.drawImage(
            ImageReader(img),
            left_x,
            top_y - draw_h,
            width=draw_w,
            height=draw_h,
            preserveAspectRatio=True,
            anchor="sw",
        )

        if footer:
            c.setFont(font_name, 10)
            c.drawString(left_x, 15 * mm, footer)
        c.showPage()

    c.save()
    return buffer.getvalue()
