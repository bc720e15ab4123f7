"""
Book DOCX Exporter

Word-processor rendition of a book. Walks the same decoded part contents as
the HTML renderer but emits a flat run of styled paragraphs instead of
paginated pages:

    cover            large centered title/subtitle/author + page break
    copyright        centered small paragraphs + page break
    toc              Heading 1 + one line per entry + page break
    introduction     Heading 1 + indented paragraphs + page break
    chapter_title    centered Heading 1 with large spacing, no page break
    chapter_content  Heading 2 + intro + (Heading 3 + paragraphs)* + page break
    conclusion       as introduction

Within a chapter text block only the first paragraph skips the first-line
indent.
"""

import io
import os
import re
from dataclasses import dataclass
from typing import List, Optional

from docx import Document
from docx.shared import Pt, Inches, RGBColor
from docx.enum.text import WD_ALIGN_PARAGRAPH

from config.constants import (
    DOCX_BODY_FONT, DOCX_HEADING_SANS_FONT,
    DOCX_BODY_SIZE_PT, DOCX_BODY_SPACE_AFTER_PT,
    DOCX_H1_SIZE_PT, DOCX_H2_SIZE_PT, DOCX_H3_SIZE_PT,
    DOCX_FIRST_LINE_INDENT_TWIPS, DOCX_TOC_INDENT_TWIPS,
    DOCX_CHAPTER_TITLE_SPACING_PT,
    DOCX_COVER_TITLE_PT, DOCX_COVER_SUBTITLE_PT, DOCX_COVER_AUTHOR_PT,
    DOCX_COPYRIGHT_PT,
)
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

CHAPTER_LINE_PATTERN = re.compile(r"^(chapter|cap[ií]tulo) \d+:", re.IGNORECASE)


@dataclass
class BookDocxConfig:
    """
    Typography for the DOCX rendition.

    Indentation values are in twips (1440 twips = 1 inch).
    """
    body_font: str = DOCX_BODY_FONT
    heading_font: str = DOCX_BODY_FONT
    subheading_font: str = DOCX_HEADING_SANS_FONT

    body_size: float = DOCX_BODY_SIZE_PT
    body_space_after: int = DOCX_BODY_SPACE_AFTER_PT
    h1_size: int = DOCX_H1_SIZE_PT
    h2_size: int = DOCX_H2_SIZE_PT
    h3_size: int = DOCX_H3_SIZE_PT

    first_line_indent: int = DOCX_FIRST_LINE_INDENT_TWIPS
    toc_indent: int = DOCX_TOC_INDENT_TWIPS
    chapter_title_spacing: int = DOCX_CHAPTER_TITLE_SPACING_PT

    cover_title_size: int = DOCX_COVER_TITLE_PT
    cover_subtitle_size: int = DOCX_COVER_SUBTITLE_PT
    cover_author_size: int = DOCX_COVER_AUTHOR_PT
    copyright_size: int = DOCX_COPYRIGHT_PT

    heading_color: RGBColor = RGBColor(0x26, 0x26, 0x26)


def export_book_docx(
    book: Book,
    parts: List[BookPart],
    output_path: Optional[str] = None,
    settings: Optional[Settings] = None,
    config: Optional[BookDocxConfig] = None
) -> bytes:
    """
    Build the DOCX rendition of a book.

    Args:
        book: Book metadata
        parts: Book parts in any order (sorted by part_index here)
        output_path: Optional path to also write the document to
        settings: Locale strings for default titles and copyright lines
        config: Typography (uses defaults if None)

    Returns:
        The DOCX file content.

    Raises:
        ExportError: If python-docx fails to build or save the document
    """
    settings = settings or get_settings()
    config = config or BookDocxConfig()

    try:
        doc = Document()
        _configure_styles(doc, config)

        for part in sort_parts(parts):
            _add_part(doc, book, part, settings, config)

        buffer = io.BytesIO()
        doc.save(buffer)
        data = buffer.getvalue()
    except Exception as e:
        logger.error(f"DOCX export failed for book {book.id}: {e}")
        raise ExportError("docx", str(e)) from e

    if output_path:
        try:
            with open(output_path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise ExportError("docx", f"cannot write {output_path}: {e}") from e
        logger.info(f"DOCX written: {os.path.abspath(output_path)}")

    return data


def _configure_styles(doc: Document, config: BookDocxConfig) -> None:
    normal = doc.styles["Normal"]
    normal.font.name = config.body_font
    normal.font.size = Pt(config.body_size)
    normal.paragraph_format.alignment = WD_ALIGN_PARAGRAPH.JUSTIFY
    normal.paragraph_format.space_after = Pt(config.body_space_after)

    for style_name, font_name, size in (
        ("Heading 1", config.heading_font, config.h1_size),
        ("Heading 2", config.heading_font, config.h2_size),
        ("Heading 3", config.subheading_font, config.h3_size),
    ):
        style = doc.styles[style_name]
        style.font.name = font_name
        style.font.size = Pt(size)
        style.font.bold = True
        style.font.color.rgb = config.heading_color


def _add_part(doc: Document, book: Book, part: BookPart, settings: Settings, config: BookDocxConfig) -> None:
    kind = part.kind
    if kind is None:
        logger.debug(f"DOCX: skipping part {part.part_index} with unknown type '{part.part_type}'")
        return

    content = decode_part(part)

    if isinstance(content, PlainTextContent):
        for line in content.text.split("\n"):
            if line.strip():
                doc.add_paragraph(line.strip())
        doc.add_page_break()
    elif isinstance(content, CoverContent):
        _add_cover(doc, book, content, config)
    elif isinstance(content, CopyrightContent):
        _add_copyright(doc, book, content, settings, config)
    elif isinstance(content, TocContent):
        _add_toc(doc, content, settings, config)
    elif isinstance(content, SectionContent):
        doc.add_heading(section_title(kind, content, settings), level=1)
        _add_text_block(doc, content.body, config, indent_first=True)
        doc.add_page_break()
    elif isinstance(content, ChapterTitleContent):
        _add_chapter_title(doc, content, config)
    elif isinstance(content, ChapterContent):
        _add_chapter(doc, content, config)


def _add_centered(doc: Document, text: str, size: float, bold: bool = False, italic: bool = False):
    para = doc.add_paragraph()
    para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = para.add_run(text)
    run.font.size = Pt(size)
    run.font.bold = bold
    run.font.italic = italic
    return para


def _add_cover(doc: Document, book: Book, content: CoverContent, config: BookDocxConfig) -> None:
    fields = cover_fields(book, content)

    title = _add_centered(doc, fields.title, config.cover_title_size, bold=True)
    title.paragraph_format.space_after = Pt(20)

    if fields.subtitle:
        subtitle = _add_centered(doc, fields.subtitle, config.cover_subtitle_size, italic=True)
        subtitle.paragraph_format.space_after = Pt(40)

    if fields.author:
        _add_centered(doc, fields.author, config.cover_author_size)

    doc.add_page_break()


def _add_copyright(
    doc: Document,
    book: Book,
    content: CopyrightContent,
    settings: Settings,
    config: BookDocxConfig
) -> None:
    for line in copyright_lines(book, content, settings):
        para = _add_centered(doc, line, config.copyright_size)
        if line == settings.legal_notice_text:
            para.paragraph_format.space_before = Pt(10)
    doc.add_page_break()


def _add_toc(doc: Document, content: TocContent, settings: Settings, config: BookDocxConfig) -> None:
    doc.add_heading(content.title or settings.toc_default_title, level=1)
    for entry in content.entries:
        para = doc.add_paragraph()
        para.alignment = WD_ALIGN_PARAGRAPH.LEFT
        run = para.add_run(entry.text)
        if CHAPTER_LINE_PATTERN.match(entry.text):
            run.font.bold = True
        else:
            para.paragraph_format.left_indent = Inches(config.toc_indent / 1440)
    doc.add_page_break()


def _add_chapter_title(doc: Document, content: ChapterTitleContent, config: BookDocxConfig) -> None:
    heading = doc.add_heading(content.title, level=1)
    heading.alignment = WD_ALIGN_PARAGRAPH.CENTER
    heading.paragraph_format.space_before = Pt(config.chapter_title_spacing)
    heading.paragraph_format.space_after = Pt(config.chapter_title_spacing)


def _add_chapter(doc: Document, content: ChapterContent, config: BookDocxConfig) -> None:
    if content.title:
        doc.add_heading(content.title, level=2)
    _add_text_block(doc, content.introduction, config, indent_first=False)

    for subchapter in content.subchapters:
        doc.add_heading(subchapter.title, level=3)
        _add_text_block(doc, subchapter.body, config, indent_first=False)

    doc.add_page_break()


def _add_runs(para, spans: List[Span]) -> None:
    for span in spans:
        run = para.add_run(span.text)
        if span.bold:
            run.font.bold = True


def _add_text_block(doc: Document, text: str, config: BookDocxConfig, indent_first: bool) -> None:
    """
    Add one text field as paragraphs.

    Args:
        doc: python-docx Document object
        text: Markdown-lite text
        config: Layout configuration
        indent_first: Whether the first paragraph also gets the first-line
                      indent (introduction/conclusion) or not (chapters)
    """
    emitted = 0
    for block in parse_markdown_lite(text):
        if isinstance(block, ListBlock):
            style = "List Number" if block.ordered else "List Bullet"
            for item in block.items:
                para = doc.add_paragraph(style=style)
                para.alignment = WD_ALIGN_PARAGRAPH.LEFT
                _add_runs(para, item)
                emitted += 1
            continue

        para = doc.add_paragraph()
        _add_runs(para, block.spans)
        if emitted > 0 or indent_first:
            para.paragraph_format.first_line_indent = Inches(config.first_line_indent / 1440)
        emitted += 1
