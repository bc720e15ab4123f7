#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
PDF Merge Stage

Concatenates independently paginated per-part PDFs in reading order and
stamps running heads onto the result:

    page index 0 (cover)   untouched
    page index i > 0       header: book title uppercased, centered
                           footer: str(i + 1), centered

The footer is the page's absolute position in the merged file, so the
first stamped page reads "2".
"""

import io
from typing import List, Optional

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError
from reportlab.lib.units import cm
from reportlab.pdfgen import canvas

from config.constants import (
    STAMP_HEADER_FONT, STAMP_HEADER_SIZE, STAMP_HEADER_COLOR, STAMP_HEADER_OFFSET_CM,
    STAMP_FOOTER_FONT, STAMP_FOOTER_SIZE, STAMP_FOOTER_OPACITY, STAMP_FOOTER_OFFSET_CM,
)
from config.logging_config import get_logger
from core.book.models import Book, BookPart, sort_parts
from core.errors import ExportError, MissingPartArtifactError

logger = get_logger(__name__)


def check_part_artifacts(book_id: Optional[str], parts: List[BookPart]) -> List[BookPart]:
    """
    Parts to merge, in reading order.

    Unknown part types are ignored. Every remaining part must carry a
    rendered PDF locator.

    Raises:
        MissingPartArtifactError: If there is nothing to merge or any part
                                  lacks pdf_url
    """
    ordered = [part for part in sort_parts(parts) if part.kind is not None]
    missing = [part.part_index for part in ordered if not part.pdf_url]
    if not ordered or missing:
        raise MissingPartArtifactError(book_id, missing)
    return ordered


def _stamp_overlay(width: float, height: float, title: str, page_number: int):
    """One-page PDF holding the header and footer for a page of this size."""
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=(width, height))

    c.setFont(STAMP_HEADER_FONT, STAMP_HEADER_SIZE)
    c.setFillColorRGB(*STAMP_HEADER_COLOR)
    c.drawCentredString(width / 2, height - STAMP_HEADER_OFFSET_CM * cm, title)

    c.setFont(STAMP_FOOTER_FONT, STAMP_FOOTER_SIZE)
    c.setFillColorRGB(0, 0, 0)
    c.setFillAlpha(STAMP_FOOTER_OPACITY)
    c.drawCentredString(width / 2, STAMP_FOOTER_OFFSET_CM * cm, str(page_number))

    c.showPage()
    c.save()
    buffer.seek(0)
    return PdfReader(buffer).pages[0]


def stamp_running_heads(writer: PdfWriter, title: str) -> int:
    """
    Stamp header and page number on every page except the first.

    Returns:
        Number of stamped pages.
    """
    header = (title or "").upper()
    stamped = 0
    for index, page in enumerate(writer.pages):
        if index == 0:
            continue
        box = page.mediabox
        overlay = _stamp_overlay(float(box.width), float(box.height), header, index + 1)
        page.merge_translated_page(overlay, tx=float(box.left), ty=float(box.bottom))
        stamped += 1
    return stamped


def merge_part_pdfs(documents: List[bytes], title: str) -> bytes:
    """
    Merge per-part PDFs and stamp running heads.

    Args:
        documents: PDF bytes, already in reading order
        title: Book title for the running header

    Returns:
        The merged PDF.

    Raises:
        ValueError: If documents is empty
        ExportError: If a document cannot be read or the result written
    """
    if not documents:
        raise ValueError("No PDF documents to merge")

    writer = PdfWriter()
    for position, data in enumerate(documents):
        try:
            writer.append(PdfReader(io.BytesIO(data)))
        except (PdfReadError, ValueError, TypeError) as e:
            logger.error(f"Cannot read part PDF #{position}: {e}")
            raise ExportError("pdf", f"part PDF #{position} is unreadable: {e}") from e

    stamped = stamp_running_heads(writer, title)
    page_count = len(writer.pages)

    output = io.BytesIO()
    try:
        writer.write(output)
    except Exception as e:
        raise ExportError("pdf", f"cannot write merged PDF: {e}") from e

    logger.info(f"Merged {len(documents)} part PDFs into {page_count} pages ({stamped} stamped)")
    return output.getvalue()


def merge_book_pdf(book: Book, parts: List[BookPart], storage) -> bytes:
    """
    Download every part's rendered PDF and merge them.

    The artifact check runs before any download, so a book with a missing
    part fails without fetching anything.

    Args:
        book: Book being merged (id and title)
        parts: The book's parts in any order
        storage: Object storage with download(path) -> bytes

    Raises:
        MissingPartArtifactError: If any part lacks pdf_url
        StorageError: If a part PDF cannot be downloaded
        ExportError: If merging fails
    """
    ordered = check_part_artifacts(book.id, parts)

    documents = []
    for part in ordered:
        logger.debug(f"Fetching part {part.part_index} PDF: {part.pdf_url}")
        documents.append(storage.download(part.pdf_url))

    return merge_part_pdfs(documents, book.title)
