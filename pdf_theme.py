"""Shared Each-R branding for reportlab exports (lists, reports).

`build_page_hooks` returns the per-page decoration callback and the canvas class
that stamps "Page N of M" once the total page count is known.
`build_table_defaults` adds the margins and striped table style used by every
tabular export, and `render_table_pdf` puts both together.
"""

import html
import io
from dataclasses import dataclass
from typing import Any, Callable

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle


EACHR_PDF_THEME = {
    "brand": colors.HexColor("#7F1D1D"),
    "light": colors.HexColor("#F8FAFC"),
    "text": colors.HexColor("#0F172A"),
    "muted": colors.HexColor("#475569"),
    "border": colors.HexColor("#E2E8F0"),
}

HEADER_HEIGHT = 56
SIDE_MARGIN = 28
META_TOP = 70
META_LINE_GAP = 12
MAX_META_LINES = 3
FOOTER_RULE_OFFSET = 36
FOOTER_TEXT_OFFSET = 18
BRAND_LABEL = "Each-R"


class NumberedCanvas(canvas.Canvas):
    """Defers page output until save() so the footer can show the total page count."""

    def __init__(self, *args, **kwargs):
        canvas.Canvas.__init__(self, *args, **kwargs)
        self._saved_page_states = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self.draw_page_number(total)
            canvas.Canvas.showPage(self)
        canvas.Canvas.save(self)

    def draw_page_number(self, total):
        width = self._pagesize[0]
        self.saveState()
        self.setFont("Helvetica", 9)
        self.setFillColor(EACHR_PDF_THEME["muted"])
        self.drawRightString(
            width - SIDE_MARGIN,
            FOOTER_TEXT_OFFSET,
            f"Page {self.getPageNumber()} of {total}",
        )
        self.restoreState()


@dataclass(frozen=True)
class PageHooks:
    on_page: Callable[[Any, Any], None]
    canvasmaker: type = NumberedCanvas


def _meta_lines(lines):
    if not isinstance(lines, (list, tuple)):
        return []
    return [str(line) for line in lines if line][:MAX_META_LINES]


def build_page_hooks(title, subtitle=None, left_meta_lines=(), right_meta_lines=()):
    left_lines = _meta_lines(left_meta_lines)
    right_lines = _meta_lines(right_meta_lines)

    def on_page(pdf, doc):
        width, height = doc.pagesize
        pdf.saveState()

        pdf.setFillColor(EACHR_PDF_THEME["brand"])
        pdf.rect(0, height - HEADER_HEIGHT, width, HEADER_HEIGHT, fill=1, stroke=0)

        pdf.setFillColor(colors.white)
        pdf.setFont("Helvetica", 16)
        pdf.drawString(SIDE_MARGIN, height - 30, str(title or "Report"))

        if subtitle:
            pdf.setFont("Helvetica", 10)
            pdf.setFillColor(colors.HexColor("#F5F5F5"))
            pdf.drawString(SIDE_MARGIN, height - 46, str(subtitle))

        pdf.setFont("Helvetica", 9)
        pdf.setFillColor(EACHR_PDF_THEME["muted"])
        for i, line in enumerate(left_lines):
            pdf.drawString(SIDE_MARGIN, height - META_TOP - i * META_LINE_GAP, line)
        for i, line in enumerate(right_lines):
            pdf.drawRightString(width - SIDE_MARGIN, height - META_TOP - i * META_LINE_GAP, line)

        pdf.setStrokeColor(EACHR_PDF_THEME["border"])
        pdf.setLineWidth(1)
        pdf.line(SIDE_MARGIN, FOOTER_RULE_OFFSET, width - SIDE_MARGIN, FOOTER_RULE_OFFSET)
        pdf.drawString(SIDE_MARGIN, FOOTER_TEXT_OFFSET, BRAND_LABEL)

        pdf.restoreState()

    return PageHooks(on_page=on_page)


def build_table_defaults(title, subtitle=None, left_meta_lines=(), right_meta_lines=()):
    hooks = build_page_hooks(
        title,
        subtitle=subtitle,
        left_meta_lines=left_meta_lines,
        right_meta_lines=right_meta_lines,
    )
    # Top margin leaves room for the header bar and meta lines.
    return {
        "margins": {"top": 110, "left": SIDE_MARGIN, "right": SIDE_MARGIN, "bottom": 48},
        "table_style": [
            ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("TEXTCOLOR", (0, 0), (-1, -1), EACHR_PDF_THEME["text"]),
            ("TOPPADDING", (0, 0), (-1, -1), 4),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
            ("LEFTPADDING", (0, 0), (-1, -1), 4),
            ("RIGHTPADDING", (0, 0), (-1, -1), 4),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("INNERGRID", (0, 0), (-1, -1), 0.5, EACHR_PDF_THEME["border"]),
            ("BOX", (0, 0), (-1, -1), 0.5, EACHR_PDF_THEME["border"]),
            ("BACKGROUND", (0, 0), (-1, 0), EACHR_PDF_THEME["brand"]),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, EACHR_PDF_THEME["light"]]),
        ],
        "hooks": hooks,
    }


def render_table_pdf(headers, rows, title, subtitle=None, left_meta_lines=(), right_meta_lines=(), pagesize=A4):
    if not headers:
        raise ValueError("headers must not be empty")

    defaults = build_table_defaults(
        title,
        subtitle=subtitle,
        left_meta_lines=left_meta_lines,
        right_meta_lines=right_meta_lines,
    )
    margins = defaults["margins"]
    hooks = defaults["hooks"]

    output = io.BytesIO()
    doc = SimpleDocTemplate(
        output,
        pagesize=pagesize,
        topMargin=margins["top"],
        leftMargin=margins["left"],
        rightMargin=margins["right"],
        bottomMargin=margins["bottom"],
        title=str(title or "Report"),
        author=BRAND_LABEL,
    )

    cell_style = ParagraphStyle(
        "EachRCell",
        fontName="Helvetica",
        fontSize=8,
        leading=10,
        textColor=EACHR_PDF_THEME["text"],
    )
    head_style = ParagraphStyle(
        "EachRHead",
        parent=cell_style,
        fontName="Helvetica-Bold",
        textColor=colors.white,
    )

    data = [[Paragraph(html.escape(str(h)), head_style) for h in headers]]
    for row in rows:
        cells = list(row)[: len(headers)]
        cells += [""] * (len(headers) - len(cells))
        data.append([Paragraph(html.escape("" if c is None else str(c)), cell_style) for c in cells])

    table = Table(data, colWidths=[doc.width / len(headers)] * len(headers), repeatRows=1)
    table.setStyle(TableStyle(defaults["table_style"]))

    doc.build(
        [table],
        onFirstPage=hooks.on_page,
        onLaterPages=hooks.on_page,
        canvasmaker=hooks.canvasmaker,
    )
    return output.getvalue()
