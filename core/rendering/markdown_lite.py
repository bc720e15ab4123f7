"""
Markdown-lite parsing for generated book text.

Recognized syntax, per line:
    **bold**        inline emphasis (non-greedy, not nested)
    - item / * item unordered list item
    1. item         ordered list item
    anything else   paragraph

Blank lines only separate paragraphs. Consecutive list lines of the same
kind form one list; a line of the other kind or a plain line closes it.

The parser is applied to one text field at a time (a chapter introduction,
a subchapter body), never to a whole part payload.
"""

import html
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Union


BOLD_PATTERN = re.compile(r"\*\*(.+?)\*\*")
UNORDERED_ITEM_PATTERN = re.compile(r"^[-*]\s+(.*)$")
ORDERED_ITEM_PATTERN = re.compile(r"^\d+\.\s+(.*)$")


class ListKind(Enum):
    UNORDERED = "ul"
    ORDERED = "ol"


@dataclass
class Span:
    """A run of inline text."""
    text: str
    bold: bool = False


@dataclass
class ParagraphBlock:
    spans: List[Span] = field(default_factory=list)

    @property
    def text(self) -> str:
        return spans_text(self.spans)


@dataclass
class ListBlock:
    kind: ListKind
    items: List[List[Span]] = field(default_factory=list)

    @property
    def ordered(self) -> bool:
        return self.kind == ListKind.ORDERED


Block = Union[ParagraphBlock, ListBlock]


def spans_text(spans: List[Span]) -> str:
    """Concatenated text of spans, markers removed."""
    return "".join(span.text for span in spans)


def parse_inline(line: str) -> List[Span]:
    """
    Split one line into plain and bold spans.

    Example:
        >>> parse_inline("**x** and **y**")
        [Span('x', True), Span(' and ', False), Span('y', True)]
    """
    spans = []
    position = 0
    for match in BOLD_PATTERN.finditer(line):
        if match.start() > position:
            spans.append(Span(line[position:match.start()]))
        spans.append(Span(match.group(1), bold=True))
        position = match.end()
    if position < len(line):
        spans.append(Span(line[position:]))
    return spans


def _list_item(line: str) -> Optional[tuple]:
    match = UNORDERED_ITEM_PATTERN.match(line)
    if match:
        return ListKind.UNORDERED, match.group(1)
    match = ORDERED_ITEM_PATTERN.match(line)
    if match:
        return ListKind.ORDERED, match.group(1)
    return None


def parse_markdown_lite(text: Any) -> List[Block]:
    """
    Parse a text field into paragraph and list blocks.

    Args:
        text: Generated text; anything other than a non-empty string
              yields no blocks.

    Returns:
        Blocks in source order.
    """
    if not isinstance(text, str) or not text:
        return []

    blocks: List[Block] = []
    open_list: Optional[ListBlock] = None

    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        item = _list_item(line)
        if item is None:
            open_list = None
            blocks.append(ParagraphBlock(spans=parse_inline(line)))
            continue

        kind, item_text = item
        if open_list is None or open_list.kind != kind:
            open_list = ListBlock(kind=kind)
            blocks.append(open_list)
        open_list.items.append(parse_inline(item_text))

    return blocks


def render_spans_html(spans: List[Span]) -> str:
    parts = []
    for span in spans:
        escaped = html.escape(span.text, quote=False)
        parts.append(f"<strong>{escaped}</strong>" if span.bold else escaped)
    return "".join(parts)


def render_blocks_html(blocks: List[Block]) -> str:
    out = []
    for block in blocks:
        if isinstance(block, ListBlock):
            tag = block.kind.value
            items = "".join(f"<li>{render_spans_html(item)}</li>" for item in block.items)
            out.append(f'<{tag} class="book-list">{items}</{tag}>')
        else:
            out.append(f"<p>{render_spans_html(block.spans)}</p>")
    return "\n".join(out)


def render_markdown_html(text: Any) -> str:
    """Parse and render a text field to HTML. Non-string input gives ''."""
    return render_blocks_html(parse_markdown_lite(text))
