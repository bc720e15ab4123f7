"""
Book content model: records, part types and typed payloads.
"""

from .models import Book, BookPart, BookStatus, PartType, sort_parts
from .content import (
    CoverContent,
    CopyrightContent,
    TocEntry,
    TocContent,
    SectionContent,
    ChapterTitleContent,
    Subchapter,
    ChapterContent,
    PlainTextContent,
    PartContent,
    decode_content,
    decode_part,
    parse_toc_entries,
)

__all__ = [
    'Book',
    'BookPart',
    'BookStatus',
    'PartType',
    'sort_parts',
    'CoverContent',
    'CopyrightContent',
    'TocEntry',
    'TocContent',
    'SectionContent',
    'ChapterTitleContent',
    'Subchapter',
    'ChapterContent',
    'PlainTextContent',
    'PartContent',
    'decode_content',
    'decode_part',
    'parse_toc_entries',
]
