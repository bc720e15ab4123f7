"""
Generation Module - AI outline and full-book content generation.
"""

from .book_generator import (
    BookRequest,
    BookGenerator,
    build_book_prompt,
    build_book_parts,
    clean_and_parse_json,
)
from .book_architect import (
    BookStructure,
    ChapterOutline,
    MODE_IDEA,
    MODE_SURPRISE,
    generate_book_structure,
    format_structure,
    parse_structure,
)

__all__ = [
    'BookRequest',
    'BookGenerator',
    'build_book_prompt',
    'build_book_parts',
    'clean_and_parse_json',
    'BookStructure',
    'ChapterOutline',
    'MODE_IDEA',
    'MODE_SURPRISE',
    'generate_book_structure',
    'format_structure',
    'parse_structure',
]
