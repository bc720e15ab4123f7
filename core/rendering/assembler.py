"""
Document Assembler - ordered parts to standalone HTML documents.

assemble_full_html() builds the preview document for a whole book with
CSS-drawn running heads. assemble_part_html() builds one document per part
for independent pagination; its running heads are left blank and stamped
later by the PDF merger.
"""

from typing import List, Optional

from config.logging_config import get_logger
from config.settings import Settings, get_settings
from core.book.models import Book, BookPart, sort_parts
from .html_styles import render_head
from .part_renderer import render_part_html

logger = get_logger(__name__)


def _document(book: Book, body: str, settings: Settings, running_heads: bool) -> str:
    head = render_head(book.title, settings, running_heads=running_heads)
    return f'<!DOCTYPE html>\n<html lang="{settings.html_lang}">\n{head}\n<body>\n{body}\n</body>\n</html>'


def assemble_full_html(
    book: Book,
    parts: Optional[List[BookPart]],
    settings: Optional[Settings] = None
) -> str:
    """
    Assemble every part of a book into one HTML document.

    Parts are ordered by part_index (stable); the input list is left
    untouched. Unknown part types contribute nothing. An empty or missing
    list yields a valid document with an empty body.
    """
    settings = settings or get_settings()
    fragments = []
    for part in sort_parts(parts or []):
        fragment = render_part_html(book, part, settings)
        if fragment:
            fragments.append(fragment)

    logger.debug(f"Assembled {len(fragments)} fragments for book {book.id}")
    return _document(book, "\n".join(fragments), settings, running_heads=True)


def assemble_part_html(book: Book, part: BookPart, settings: Optional[Settings] = None) -> str:
    """Assemble a single part into a standalone HTML document."""
    settings = settings or get_settings()
    return _document(book, render_part_html(book, part, settings), settings, running_heads=False)
