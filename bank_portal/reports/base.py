"""
PDF document primitives

A thin wrapper around a reportlab canvas: text and tables at explicit
coordinates with a y cursor that starts a new page when it passes the bottom
margin. Generators build on PDFDocument and return a GeneratedDocument.
"""

import io
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional, Sequence

from reportlab.lib.colors import Color, HexColor
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

logger = logging.getLogger("bank_portal.reports")

PDF_MEDIA_TYPE = "application/pdf"

W, H = A4
MARGIN = 40
CONTENT_W = W - 2 * MARGIN

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

CHARCOAL = HexColor('#2D3748')
SLATE = HexColor('#64748B')
LIGHT_RULE = HexColor('#E2E8F0')
GREEN = HexColor('#22C55E')
DARK = HexColor('#262626')
WARNING_RED = HexColor('#DC2626')
STRIPE = HexColor('#F5F5F5')
WHITE = HexColor('#FFFFFF')


class DocumentGenerationError(Exception):
    """Building a downloadable document failed"""


@dataclass
class GeneratedDocument:
    filename: str
    content: bytes
    media_type: str = PDF_MEDIA_TYPE
    page_count: int = 1


def slugify(text: str) -> str:
    """Lowercase, hyphen-separated form of text for filenames"""
    slug = re.sub(r'[^a-z0-9]+', '-', (text or "").lower()).strip('-')
    return slug or "document"


def iso_day(day: Optional[date] = None) -> str:
    return (day or date.today()).isoformat()


def encodable(text: str) -> str:
    """Replace characters the standard Type 1 fonts cannot show (WinAnsi only)"""
    return text.encode("cp1252", "replace").decode("cp1252")


class PDFDocument:
    """Canvas with a y cursor, page breaks and simple tables"""

    def __init__(self, title: str, author: str = "Bank Portal"):
        self._buffer = io.BytesIO()
        self.c = canvas.Canvas(self._buffer, pagesize=A4)
        self.c.setTitle(title)
        self.c.setAuthor(author)
        self.page_num = 1
        self.y = H - MARGIN

    # ─── PAGE INFRASTRUCTURE ───

    def new_page(self):
        self.c.showPage()
        self.page_num += 1
        self.y = H - MARGIN

    def ensure_space(self, needed: float):
        """Start a new page if fewer than ``needed`` points remain above the bottom margin"""
        if self.y - needed < MARGIN:
            self.new_page()

    def finish(self, filename: str) -> GeneratedDocument:
        self.c.save()
        return GeneratedDocument(
            filename=filename,
            content=self._buffer.getvalue(),
            page_count=self.page_num,
        )

    # ─── DRAWING PRIMITIVES ───

    def draw_text(self, text: str, x: float, y: float, font: str = FONT, size: float = 10,
                  color: Color = CHARCOAL, align: str = 'left'):
        self.c.saveState()
        self.c.setFont(font, size)
        self.c.setFillColor(color)
        text = encodable(text)
        if align == 'center':
            self.c.drawCentredString(x, y, text)
        elif align == 'right':
            self.c.drawRightString(x, y, text)
        else:
            self.c.drawString(x, y, text)
        self.c.restoreState()

    def draw_line(self, x1: float, y1: float, x2: float, y2: float,
                  color: Color = LIGHT_RULE, width: float = 0.5):
        self.c.saveState()
        self.c.setStrokeColor(color)
        self.c.setLineWidth(width)
        self.c.line(x1, y1, x2, y2)
        self.c.restoreState()

    def wrap(self, text: str, max_width: float, font: str = FONT, size: float = 10) -> List[str]:
        """Split text into lines no wider than max_width"""
        lines = []
        current = ""
        for word in (text or "").split():
            candidate = current + (" " if current else "") + word
            if stringWidth(candidate, font, size) <= max_width:
                current = candidate
            else:
                if current:
                    lines.append(current)
                current = word
        if current:
            lines.append(current)
        return lines or [""]

    # ─── FLOWING CONTENT ───

    def title(self, text: str, size: float = 20, align: str = 'left'):
        self.ensure_space(size + 10)
        x = W / 2 if align == 'center' else MARGIN
        self.draw_text(text, x, self.y, FONT_BOLD, size, align=align)
        self.y -= size + 10

    def heading(self, text: str, size: float = 13):
        self.ensure_space(size + 14)
        self.y -= 4
        self.draw_text(text, MARGIN, self.y, FONT_BOLD, size)
        self.y -= size + 6

    def line(self, text: str, indent: float = 0, font: str = FONT, size: float = 10,
             color: Color = CHARCOAL, leading: float = 14, align: str = 'left'):
        self.ensure_space(leading)
        if align == 'center':
            self.draw_text(text, W / 2, self.y, font, size, color, align='center')
        else:
            self.draw_text(text, MARGIN + indent, self.y, font, size, color)
        self.y -= leading

    def paragraph(self, text: str, indent: float = 0, font: str = FONT, size: float = 10,
                  color: Color = CHARCOAL, leading: float = 14):
        for wrapped in self.wrap(text, CONTENT_W - indent, font, size):
            self.line(wrapped, indent, font, size, color, leading)

    def rule(self, color: Color = LIGHT_RULE, width: float = 0.5):
        self.ensure_space(10)
        self.draw_line(MARGIN, self.y, W - MARGIN, self.y, color, width)
        self.y -= 10

    def spacer(self, height: float = 8):
        self.y -= height

    def key_value_table(self, rows: Sequence[Sequence[str]], key_width: float = 140,
                        size: float = 10, leading: float = 16):
        """Two-column table with bold keys"""
        for key, value in rows:
            self.ensure_space(leading)
            self.draw_text(str(key), MARGIN, self.y, FONT_BOLD, size)
            self.draw_text(str(value), MARGIN + key_width, self.y, FONT, size)
            self.y -= leading
        self.y -= 4

    def table(self, head: Sequence[str], body: Sequence[Sequence[str]], widths: Sequence[float],
              header_fill: Color = DARK, size: float = 9, row_height: float = 16,
              align: Optional[Sequence[str]] = None, striped: bool = False,
              foot: Optional[Sequence[str]] = None):
        """
        Grid table with a filled header row; the header repeats after a page break.

        Args:
            head: Column titles
            body: Rows of cell strings
            widths: Column widths in points
            align: Per-column 'left' or 'right'
            foot: Optional bold totals row drawn after the body
        """
        align = align or ['left'] * len(head)

        def draw_row(cells: Sequence[str], font: str, color: Color, fill: Optional[Color]):
            if fill is not None:
                self.c.saveState()
                self.c.setFillColor(fill)
                self.c.rect(MARGIN, self.y - 4, sum(widths), row_height, fill=1, stroke=0)
                self.c.restoreState()
            x = MARGIN
            for cell, width, how in zip(cells, widths, align):
                text = self._fit(str(cell), width - 8, font, size)
                if how == 'right':
                    self.draw_text(text, x + width - 4, self.y, font, size, color, align='right')
                else:
                    self.draw_text(text, x + 4, self.y, font, size, color)
                x += width
            self.y -= row_height

        self.ensure_space(row_height * 2)
        draw_row(head, FONT_BOLD, WHITE, header_fill)
        for index, row in enumerate(body):
            if self.y - row_height < MARGIN:
                self.new_page()
                draw_row(head, FONT_BOLD, WHITE, header_fill)
            fill = STRIPE if striped and index % 2 else None
            draw_row(row, FONT, CHARCOAL, fill)
        if foot is not None:
            self.ensure_space(row_height)
            draw_row(foot, FONT_BOLD, CHARCOAL, LIGHT_RULE)
        self.y -= 6

    @staticmethod
    def _fit(text: str, max_width: float, font: str, size: float) -> str:
        while stringWidth(text, font, size) > max_width and len(text) > 3:
            text = text[:-4] + '...'
        return text


def render(kind: str, build: Callable[[], GeneratedDocument]) -> GeneratedDocument:
    """
    Run a generator body, converting any failure into DocumentGenerationError.
    """
    try:
        document = build()
    except Exception as e:
        logger.exception(f"Error generating {kind}")
        raise DocumentGenerationError(f"Failed to generate {kind}. Please try again.") from e
    logger.info(f"Generated {kind} {document.filename} ({document.page_count} page(s))")
    return document
