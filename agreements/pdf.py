"""PDF export for finished agreements (generated or fallback, rich or plain)."""

from __future__ import annotations

import html
import io
import re
from pathlib import Path
from typing import List, Union
from xml.sax.saxutils import escape

from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

BLOCK_END_RE = re.compile(r"</(p|div|h[1-6]|li)>|<br\s*/?>", re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]+>")
MARKDOWN_EMPHASIS_RE = re.compile(r"(\*\*|^#+\s*)", re.MULTILINE)
RULE_RE = re.compile(r"^[=\-]{3,}$")
SECTION_RE = re.compile(r"^\d+\.\s")

DEFAULT_FILENAME = "rental-agreement.pdf"


def document_lines(content: str) -> List[str]:
    """Flatten HTML or plain agreement text into display lines for the PDF story."""
    text = BLOCK_END_RE.sub("\n", content)
    text = TAG_RE.sub("", text)
    text = html.unescape(text)
    text = MARKDOWN_EMPHASIS_RE.sub("", text)
    # The built-in PDF fonts have no rupee glyph.
    text = text.replace("₹", "Rs. ")
    lines: List[str] = []
    for raw in text.splitlines():
        line = " ".join(raw.split())
        if RULE_RE.match(line):
            continue
        lines.append(line)
    return lines


def _build_story(content: str) -> list:
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "AgreementTitle",
        parent=styles["Title"],
        fontName="Helvetica-Bold",
        fontSize=18,
        leading=24,
        spaceAfter=12,
        alignment=TA_CENTER,
    )
    footer_style = ParagraphStyle(
        "AgreementFooter",
        parent=styles["Normal"],
        fontName="Helvetica-Oblique",
        fontSize=9,
        leading=12,
        spaceBefore=18,
        alignment=TA_CENTER,
    )
    section_style = ParagraphStyle(
        "AgreementSection",
        parent=styles["Heading4"],
        fontName="Helvetica-Bold",
        fontSize=12,
        leading=18,
        spaceBefore=12,
        spaceAfter=6,
    )
    body_style = ParagraphStyle(
        "AgreementBody",
        parent=styles["Normal"],
        fontName="Helvetica",
        fontSize=11,
        leading=16,
        spaceAfter=8,
        alignment=TA_JUSTIFY,
    )

    story = []
    seen_text = False
    for line in document_lines(content):
        if not line:
            if seen_text:
                story.append(Spacer(1, 6))
            continue
        if not seen_text and line.upper().endswith("AGREEMENT"):
            style = title_style
        elif line.startswith("Generated by"):
            style = footer_style
        elif SECTION_RE.match(line):
            style = section_style
        else:
            style = body_style
        story.append(Paragraph(escape(line), style))
        seen_text = True
    if not story:
        story.append(Spacer(1, 6))
    return story


def render_pdf_bytes(content: str, title: str = "Rental Agreement") -> bytes:
    """Render agreement text into PDF bytes using ReportLab."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=72,
        rightMargin=72,
        topMargin=72,
        bottomMargin=72,
        title=title,
    )
    doc.build(_build_story(content))
    return buffer.getvalue()


def render_pdf_from_text(content: str, pdf_path: Union[str, Path]) -> str:
    """Write an agreement to ``pdf_path`` and return the path."""
    path = Path(pdf_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(render_pdf_bytes(content, title=path.stem.replace("-", " ").title()))
    return str(path)


def safe_pdf_filename(filename: str) -> str:
    """ASCII-only attachment name ending in .pdf, or the default name when nothing usable is left."""
    cleaned = filename.encode("ascii", errors="ignore").decode("ascii").strip()
    cleaned = re.sub(r'[\\/"\r\n]', "_", cleaned)
    stem = cleaned[:-4] if cleaned.lower().endswith(".pdf") else cleaned
    if not stem.strip(" ._"):
        return DEFAULT_FILENAME
    return f"{stem}.pdf"
