"""
Canvas PDF Renderer (ReportLab)

Second PDF path that does not go through HTML. Each part is laid out
directly with ReportLab: the cover is drawn at explicit canvas coordinates,
every other part is built from platypus flowables inside the A5 content
frame. Per-part PDFs carry no running heads; render_book() concatenates
them and stamps heads and page numbers through the merge stage, so both
PDF paths number pages the same way.
"""

import io
from dataclasses import dataclass
from typing import List, Optional

from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_LEFT
from reportlab.lib.styles import ParagraphStyle, StyleSheet1
from reportlab.lib.units import mm, cm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas as pdf_canvas
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, ListFlowable, ListItem

from config.constants import BODY_TEXT_INDENT_CM
from config.logging_config import get_logger
from config.settings import Settings, get_settings
from core.book.models import Book, BookPart, PartType, sort_parts
from core.book.content import (
    CoverContent,
    CopyrightContent,
    TocContent,
    SectionContent,
    ChapterTitleContent,
    ChapterContent,
    PlainTextContent,
    decode_part,
)
from core.errors import ExportError
from core.rendering.markdown_lite import ListBlock, Span, parse_markdown_lite
from core.rendering.part_renderer import cover_fields, copyright_lines, section_title

logger = get_logger(__name__)


@dataclass
class CanvasLayoutConfig:
    """Typography for the canvas renderer (sizes in points)."""
    font_size: float = 11
    line_height_ratio: float = 1.5
    first_line_indent: float = BODY_TEXT_INDENT_CM * cm
    cover_background: str = "#e8eef7"
    cover_title_color: str = "#001f5c"
    cover_subtitle_color: str = "#2b4b8a"
    cover_author_color: str = "#4a68a5"


def _escape(text: str) -> str:
    return (text or "").replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def spans_markup(spans: List[Span]) -> str:
    """ReportLab paragraph markup for inline spans."""
    return "".join(
        f"<b>{_escape(span.text)}</b>" if span.bold else _escape(span.text)
        for span in spans
    )


class CanvasBookRenderer:
    """
    Renders book parts to PDF with ReportLab.

    Usage:
        renderer = CanvasBookRenderer(settings)
        cover_pdf = renderer.render_part(book, cover_part)
        book_pdf = renderer.render_book(book, parts)
    """

    def __init__(self, settings: Optional[Settings] = None, config: Optional[CanvasLayoutConfig] = None):
        self.settings = settings or get_settings()
        self.config = config or CanvasLayoutConfig()

        self.page_width = self.settings.page_width_mm * mm
        self.page_height = self.settings.page_height_mm * mm
        top, right, bottom, left = self.settings.page_margins_mm
        self.margin_top = top * mm
        self.margin_right = right * mm
        self.margin_bottom = bottom * mm
        self.margin_left = left * mm

        self.body_font = "Times-Roman"
        self.bold_font = "Times-Bold"
        self.heading_font = "Helvetica-Bold"
        self._register_fonts()

        self.styles = self._create_styles()

    @property
    def frame_height(self) -> float:
        return self.page_height - self.margin_top - self.margin_bottom

    def _register_fonts(self) -> None:
        """Register configured TTF fonts; keep the built-in fonts otherwise."""
        if not self.settings.body_font_path:
            return

        bold_path = self.settings.heading_font_path or self.settings.body_font_path
        try:
            pdfmetrics.registerFont(TTFont("BookFont", self.settings.body_font_path))
            pdfmetrics.registerFont(TTFont("BookFont-Bold", bold_path))
            pdfmetrics.registerFontFamily(
                "BookFont",
                normal="BookFont",
                bold="BookFont-Bold",
                italic="BookFont",
                boldItalic="BookFont-Bold",
            )
        except Exception as e:
            logger.warning(f"Font registration failed, using built-in fonts: {e}")
            return

        self.body_font = "BookFont"
        self.bold_font = "BookFont-Bold"
        self.heading_font = "BookFont-Bold"

    def _create_styles(self) -> StyleSheet1:
        """Create paragraph styles for book parts"""
        size = self.config.font_size
        leading = size * self.config.line_height_ratio
        styles = StyleSheet1()

        # Body text - justified with first line indent
        styles.add(ParagraphStyle(
            name='BookBody',
            fontName=self.body_font,
            fontSize=size,
            leading=leading,
            alignment=TA_JUSTIFY,
            firstLineIndent=self.config.first_line_indent,
            spaceBefore=0,
            spaceAfter=size * 1.5,
            textColor=HexColor('#262626'),
        ))

        # First paragraph (no indent after heading or list)
        styles.add(ParagraphStyle(
            name='BookBodyFirst',
            parent=styles['BookBody'],
            firstLineIndent=0,
        ))

        styles.add(ParagraphStyle(
            name='ListText',
            parent=styles['BookBody'],
            alignment=TA_LEFT,
            firstLineIndent=0,
            spaceAfter=size * 0.5,
        ))

        styles.add(ParagraphStyle(
            name='PlainText',
            parent=styles['BookBody'],
            alignment=TA_LEFT,
            firstLineIndent=0,
        ))

        # Section heading (introduction, chapter, conclusion)
        styles.add(ParagraphStyle(
            name='SectionHeading',
            fontName=self.bold_font,
            fontSize=20,
            leading=30,
            alignment=TA_CENTER,
            spaceBefore=24,
            spaceAfter=36,
            textColor=HexColor('#7f7f7f'),
        ))

        # Subchapter heading
        styles.add(ParagraphStyle(
            name='SubsectionHeading',
            fontName=self.heading_font,
            fontSize=13,
            leading=16,
            alignment=TA_LEFT,
            spaceBefore=24,
            spaceAfter=12,
            textColor=HexColor('#404040'),
        ))

        # Standalone chapter divider
        styles.add(ParagraphStyle(
            name='ChapterTitle',
            fontName=self.bold_font,
            fontSize=24,
            leading=30,
            alignment=TA_CENTER,
            textColor=HexColor('#1a1a1a'),
        ))

        styles.add(ParagraphStyle(
            name='CopyrightText',
            fontName=self.body_font,
            fontSize=9,
            leading=12,
            alignment=TA_CENTER,
            spaceAfter=4,
        ))

        # TOC styles
        styles.add(ParagraphStyle(
            name='TOCChapter',
            fontName=self.bold_font,
            fontSize=size,
            leading=leading,
            spaceBefore=10,
        ))

        styles.add(ParagraphStyle(
            name='TOCSubchapter',
            fontName=self.body_font,
            fontSize=size - 1,
            leading=(size - 1) * 1.4,
            leftIndent=1 * cm,
        ))

        return styles

    # ========== Public API ==========

    def render_part(self, book: Book, part: BookPart) -> Optional[bytes]:
        """
        Render one part to a standalone PDF.

        Returns:
            PDF bytes, or None for an unknown part type.

        Raises:
            ExportError: If ReportLab fails to build the document
        """
        kind = part.kind
        if kind is None:
            logger.debug(f"Canvas: skipping part {part.part_index} with unknown type '{part.part_type}'")
            return None

        content = decode_part(part)
        try:
            if isinstance(content, CoverContent):
                return self._draw_cover(book, content)
            return self._build(book, self._story(book, kind, content))
        except Exception as e:
            logger.error(f"Canvas render failed for part {part.part_index} ({part.part_type}): {e}")
            raise ExportError("pdf", f"part {part.part_index}: {e}") from e

    def render_book(self, book: Book, parts: List[BookPart]) -> bytes:
        """Render every part and merge them with running heads stamped."""
        from .pdf_merger import merge_part_pdfs

        documents = []
        for part in sort_parts(parts):
            pdf = self.render_part(book, part)
            if pdf is not None:
                documents.append(pdf)
        if not documents:
            raise ExportError("pdf", f"book {book.id} has no renderable parts")
        return merge_part_pdfs(documents, book.title)

    # ========== Layout ==========

    def _build(self, book: Book, story: list) -> bytes:
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=(self.page_width, self.page_height),
            leftMargin=self.margin_left,
            rightMargin=self.margin_right,
            topMargin=self.margin_top,
            bottomMargin=self.margin_bottom,
            title=book.title,
            author=book.author,
        )
        doc.build(story or [Spacer(1, 1)])
        return buffer.getvalue()

    def _draw_cover(self, book: Book, content: CoverContent) -> bytes:
        """Cover page placed at explicit coordinates."""
        fields = cover_fields(book, content)
        buffer = io.BytesIO()
        c = pdf_canvas.Canvas(buffer, pagesize=(self.page_width, self.page_height))
        c.setTitle(book.title)
        c.setAuthor(book.author)

        c.setFillColor(HexColor(self.config.cover_background))
        c.rect(0, 0, self.page_width, self.page_height, stroke=0, fill=1)

        center_x = self.page_width / 2
        max_width = self.page_width - 40 * mm

        # Title block in the upper third
        title_size = 30
        c.setFillColor(HexColor(self.config.cover_title_color))
        c.setFont(self.heading_font, title_size)
        y = self.page_height - 45 * mm
        for line in simpleSplit(fields.title.upper(), self.heading_font, title_size, max_width):
            c.drawCentredString(center_x, y, line)
            y -= title_size * 1.1

        if fields.subtitle:
            subtitle_size = 13
            y -= 10 * mm
            c.setFillColor(HexColor(self.config.cover_subtitle_color))
            c.setFont(self.body_font, subtitle_size)
            for line in simpleSplit(fields.subtitle, self.body_font, subtitle_size, max_width):
                c.drawCentredString(center_x, y, line)
                y -= subtitle_size * 1.3

        # Author at the foot of the page
        if fields.author:
            c.setFillColor(HexColor(self.config.cover_author_color))
            c.setFont(self.body_font, 10)
            c.drawCentredString(center_x, 30 * mm, fields.author.upper())

        c.showPage()
        c.save()
        return buffer.getvalue()

    def _story(self, book: Book, kind: PartType, content) -> list:
        s = self.styles

        if isinstance(content, PlainTextContent):
            return [Paragraph(_escape(content.text).replace("\n", "<br/>"), s['PlainText'])]

        if isinstance(content, CopyrightContent):
            story = [Spacer(1, self.frame_height * 0.55)]
            for line in copyright_lines(book, content, self.settings):
                story.append(Paragraph(_escape(line), s['CopyrightText']))
            return story

        if isinstance(content, TocContent):
            story = [Paragraph(_escape(content.title or self.settings.toc_default_title), s['SectionHeading'])]
            for entry in content.entries:
                style = s['TOCSubchapter'] if entry.is_subchapter else s['TOCChapter']
                story.append(Paragraph(_escape(entry.text), style))
            return story

        if isinstance(content, SectionContent):
            story = [Paragraph(_escape(section_title(kind, content, self.settings)), s['SectionHeading'])]
            story.extend(self._text_flowables(content.body))
            return story

        if isinstance(content, ChapterTitleContent):
            return [
                Spacer(1, self.frame_height * 0.4),
                Paragraph(_escape(content.title), s['ChapterTitle']),
            ]

        if isinstance(content, ChapterContent):
            story = []
            if content.title:
                story.append(Paragraph(_escape(content.title), s['SectionHeading']))
            story.extend(self._text_flowables(content.introduction))
            for subchapter in content.subchapters:
                story.append(Paragraph(_escape(subchapter.title), s['SubsectionHeading']))
                story.extend(self._text_flowables(subchapter.body))
            return story

        return []

    def _text_flowables(self, text: str) -> list:
        """
        Flowables for one text field.

        A paragraph right after a heading or list gets no first-line indent,
        matching the CSS rule of the HTML path.
        """
        flowables = []
        after_break = True
        for block in parse_markdown_lite(text):
            if isinstance(block, ListBlock):
                items = [ListItem(Paragraph(spans_markup(item), self.styles['ListText'])) for item in block.items]
                flowables.append(ListFlowable(
                    items,
                    bulletType='1' if block.ordered else 'bullet',
                    leftIndent=1 * cm,
                ))
                after_break = True
                continue

            style = self.styles['BookBodyFirst'] if after_break else self.styles['BookBody']
            flowables.append(Paragraph(spans_markup(block.spans), style))
            after_break = False
        return flowables
