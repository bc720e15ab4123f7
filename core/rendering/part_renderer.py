"""
Part Renderer - one book part to one HTML page fragment.

Rendering is a pure function of the part type and its decoded payload. It
never raises: a malformed payload is shown as plain text and an unknown
part type produces an empty fragment.

Front-matter text helpers (cover fields, copyright lines, section titles)
live here and are shared by the DOCX and canvas adapters.
"""

import html
from datetime import datetime
from typing import Callable, Dict, List, Optional

from config.logging_config import get_logger
from config.settings import Settings, get_settings
from core.book.models import Book, BookPart, PartType
from core.book.content import (
    CoverContent,
    CopyrightContent,
    TocContent,
    SectionContent,
    ChapterTitleContent,
    ChapterContent,
    PlainTextContent,
    PartContent,
    decode_part,
)
from .markdown_lite import render_markdown_html

logger = get_logger(__name__)


def _e(text: str) -> str:
    return html.escape(text or "", quote=False)


# ============================================================================
# Shared text helpers
# ============================================================================

def cover_fields(book: Book, content: CoverContent) -> CoverContent:
    """Cover title/subtitle/author with book metadata as fallback."""
    return CoverContent(
        title=content.title or book.title or "",
        subtitle=content.subtitle or book.subtitle or "",
        author=content.author or book.author or "",
    )


def copyright_notice(book: Book, year: Optional[int] = None) -> str:
    year = year or datetime.now().year
    return f"Copyright © {year} {book.author or ''}".strip()


def copyright_lines(book: Book, content: CopyrightContent, settings: Settings) -> List[str]:
    """
    Lines of the copyright page.

    The explicit text (or the generated notice when none is stored) comes
    first, followed by the rights-reserved line, the legal notice and the
    optional imprint notice.
    """
    text = content.text.strip() if content.text else ""
    lines = [line.strip() for line in text.split("\n") if line.strip()] if text else [copyright_notice(book)]
    lines.append(settings.rights_reserved_text)
    lines.append(settings.legal_notice_text)
    if settings.imprint_notice_text:
        lines.append(settings.imprint_notice_text)
    return lines


def section_title(kind: PartType, content: SectionContent, settings: Settings) -> str:
    if content.title:
        return content.title
    if kind == PartType.CONCLUSION:
        return settings.conclusion_default_title
    return settings.introduction_default_title


# ============================================================================
# Per-type fragments
# ============================================================================

def _page(classes: str, inner: str, style: str = "") -> str:
    style_attr = f' style="{style}"' if style else ""
    return f'<div class="page-container {classes}"{style_attr}>\n{inner}\n</div>'


def _render_cover(book: Book, content: CoverContent, settings: Settings) -> str:
    fields = cover_fields(book, content)
    style = ""
    if settings.cover_background_url:
        url = html.escape(settings.cover_background_url, quote=True)
        style = f"background-image: url('{url}');"
    subtitle = f'<p class="cover-subtitle">{_e(fields.subtitle)}</p>' if fields.subtitle else ""
    inner = (
        '<div class="cover-layout">'
        f'<div><h1 class="cover-title">{_e(fields.title)}</h1>{subtitle}</div>'
        f'<div><p class="cover-author">{_e(fields.author)}</p></div>'
        '</div>'
    )
    return _page("cover-page", inner, style)


def _render_copyright(book: Book, content: CopyrightContent, settings: Settings) -> str:
    lines = copyright_lines(book, content, settings)
    paragraphs = []
    for line in lines:
        css_class = ""
        if line == settings.legal_notice_text:
            css_class = ' class="legal-notice"'
        elif settings.imprint_notice_text and line == settings.imprint_notice_text:
            css_class = ' class="imprint-notice"'
        paragraphs.append(f"<p{css_class}>{_e(line)}</p>")
    inner = '<div class="copyright-content">' + "".join(paragraphs) + "</div>"
    return _page("content-page front-matter copyright-page", inner)


def _render_toc(book: Book, content: TocContent, settings: Settings) -> str:
    title = content.title or settings.toc_default_title
    lines = [f'<h2 class="font-merriweather">{_e(title)}</h2>']
    for entry in content.entries:
        css_class = "toc-subchapter" if entry.is_subchapter else "toc-chapter"
        lines.append(f'<p class="{css_class}">{_e(entry.text)}</p>')
    return _page("content-page front-matter toc-page", "\n".join(lines))


def _render_section(kind: PartType) -> Callable[[Book, SectionContent, Settings], str]:
    def render(book: Book, content: SectionContent, settings: Settings) -> str:
        title = section_title(kind, content, settings)
        inner = f'<h2 class="font-merriweather">{_e(title)}</h2>\n{render_markdown_html(content.body)}'
        return _page(f"content-page {kind.value}-page", inner)
    return render


def _render_chapter_title(book: Book, content: ChapterTitleContent, settings: Settings) -> str:
    inner = f'<h1 class="chapter-title-standalone">{_e(content.title)}</h1>'
    return _page("content-page front-matter chapter-title-page", inner)


def _render_chapter_content(book: Book, content: ChapterContent, settings: Settings) -> str:
    blocks = []
    if content.title:
        blocks.append(f'<h2 class="font-merriweather">{_e(content.title)}</h2>')
    if content.introduction:
        blocks.append(render_markdown_html(content.introduction))
    for subchapter in content.subchapters:
        blocks.append(f'<h3 class="font-merriweather-sans">{_e(subchapter.title)}</h3>')
        blocks.append(render_markdown_html(subchapter.body))
    return _page("content-page chapter-page", "\n".join(block for block in blocks if block))


def _render_plain_text(content: PlainTextContent) -> str:
    return _page("content-page plain-text-page", f'<p class="plain-text">{_e(content.text)}</p>')


RENDERERS: Dict[PartType, Callable] = {
    PartType.COVER: _render_cover,
    PartType.COPYRIGHT: _render_copyright,
    PartType.TOC: _render_toc,
    PartType.INTRODUCTION: _render_section(PartType.INTRODUCTION),
    PartType.CONCLUSION: _render_section(PartType.CONCLUSION),
    PartType.CHAPTER_TITLE: _render_chapter_title,
    PartType.CHAPTER_CONTENT: _render_chapter_content,
}


def render_content_html(book: Book, kind: PartType, content: PartContent, settings: Settings) -> str:
    """Render already-decoded content for a known part type."""
    if isinstance(content, PlainTextContent):
        return _render_plain_text(content)
    return RENDERERS[kind](book, content, settings)


def render_part_html(book: Book, part: BookPart, settings: Optional[Settings] = None) -> str:
    """
    Render one part as a page-container fragment.

    Args:
        book: Owning book (title/author fallbacks)
        part: Part to render
        settings: Layout and locale settings (defaults to get_settings())

    Returns:
        HTML fragment, or '' for an unknown part type.
    """
    settings = settings or get_settings()
    kind = part.kind
    if kind is None:
        logger.debug(f"Skipping part {part.part_index} with unknown type '{part.part_type}'")
        return ""

    content = decode_part(part)
    try:
        return render_content_html(book, kind, content, settings)
    except Exception as e:
        logger.error(f"Failed to render part {part.part_index} ({part.part_type}): {e}")
        return _render_plain_text(PlainTextContent(text=part.content or ""))
