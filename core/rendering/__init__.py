"""
Rendering Module

Markdown-lite parsing of generated text, the HTML part renderer and the
document assembler that produces full-book and per-part HTML.
"""

from .markdown_lite import (
    Span,
    ParagraphBlock,
    ListBlock,
    ListKind,
    parse_inline,
    parse_markdown_lite,
    render_markdown_html,
)
from .part_renderer import render_part_html
from .assembler import assemble_full_html, assemble_part_html

__all__ = [
    'Span',
    'ParagraphBlock',
    'ListBlock',
    'ListKind',
    'parse_inline',
    'parse_markdown_lite',
    'render_markdown_html',
    'render_part_html',
    'assemble_full_html',
    'assemble_part_html',
]
