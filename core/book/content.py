"""
Typed part payloads.

Each part_type decodes its JSON payload into one content class. Decoding
never raises: a payload that is not valid JSON, or whose JSON value cannot
carry the declared shape, becomes PlainTextContent holding the raw text.
Missing or null fields decode to empty strings.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from config.logging_config import get_logger
from .models import BookPart, PartType

logger = get_logger(__name__)


@dataclass
class CoverContent:
    title: str = ""
    subtitle: str = ""
    author: str = ""


@dataclass
class CopyrightContent:
    text: str = ""  # empty means "use the generated notice"


@dataclass
class TocEntry:
    text: str
    is_subchapter: bool = False


@dataclass
class TocContent:
    title: str = ""
    entries: List[TocEntry] = field(default_factory=list)


@dataclass
class SectionContent:
    """Introduction or conclusion."""
    title: str = ""
    body: str = ""


@dataclass
class ChapterTitleContent:
    title: str = ""


@dataclass
class Subchapter:
    title: str = ""
    body: str = ""


@dataclass
class ChapterContent:
    title: str = ""
    introduction: str = ""
    subchapters: List[Subchapter] = field(default_factory=list)


@dataclass
class PlainTextContent:
    """Fallback for payloads that do not match their part type."""
    text: str = ""


PartContent = Union[
    CoverContent,
    CopyrightContent,
    TocContent,
    SectionContent,
    ChapterTitleContent,
    ChapterContent,
    PlainTextContent,
]


def _text(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, (str, int, float)):
        return str(value)
    if isinstance(value, list):
        return "\n".join(str(item) for item in value if item is not None)
    return ""


def parse_toc_entries(text: str) -> List[TocEntry]:
    """
    Split a table-of-contents block into entries.

    Lines starting with '-' are subchapters (marker stripped); blank lines
    are dropped.
    """
    entries = []
    for line in (text or "").split("\n"):
        line = line.strip()
        if not line:
            continue
        if line.startswith("-"):
            entries.append(TocEntry(text=line[1:].strip(), is_subchapter=True))
        else:
            entries.append(TocEntry(text=line))
    return entries


def _decode_subchapters(value: Any) -> List[Subchapter]:
    if not isinstance(value, list):
        return []
    subchapters = []
    for item in value:
        if isinstance(item, dict):
            subchapters.append(Subchapter(title=_text(item, "title"), body=_text(item, "content")))
        elif isinstance(item, str):
            subchapters.append(Subchapter(body=item))
    return subchapters


def _decode_mapping(kind: PartType, data: Dict[str, Any]) -> PartContent:
    if kind == PartType.COVER:
        return CoverContent(
            title=_text(data, "title"),
            subtitle=_text(data, "subtitle"),
            author=_text(data, "author"),
        )
    if kind == PartType.COPYRIGHT:
        return CopyrightContent(text=_text(data, "content"))
    if kind == PartType.TOC:
        return TocContent(title=_text(data, "title"), entries=parse_toc_entries(_text(data, "content")))
    if kind in (PartType.INTRODUCTION, PartType.CONCLUSION):
        return SectionContent(title=_text(data, "title"), body=_text(data, "content"))
    if kind == PartType.CHAPTER_TITLE:
        return ChapterTitleContent(title=_text(data, "title"))
    return ChapterContent(
        title=_text(data, "title"),
        introduction=_text(data, "introduction"),
        subchapters=_decode_subchapters(data.get("subchapters")),
    )


def decode_content(part_type: str, raw: Optional[str]) -> Optional[PartContent]:
    """
    Decode a serialized payload for the given part type.

    Args:
        part_type: The part's type tag
        raw: Serialized JSON payload (may be None or empty)

    Returns:
        The typed content, PlainTextContent on a malformed payload, or None
        when part_type is not a known type.
    """
    kind = PartType.from_value(part_type)
    if kind is None:
        return None

    raw = raw or ""
    if not raw.strip():
        return _decode_mapping(kind, {})

    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        if kind == PartType.COPYRIGHT:
            return CopyrightContent(text=raw)
        logger.warning(f"Part payload for '{part_type}' is not JSON, rendering as plain text")
        return PlainTextContent(text=raw)

    if value is None:
        return _decode_mapping(kind, {})
    if isinstance(value, dict):
        return _decode_mapping(kind, value)
    if isinstance(value, str):
        if kind == PartType.COPYRIGHT:
            return CopyrightContent(text=value)
        return PlainTextContent(text=value)

    logger.warning(f"Part payload for '{part_type}' has unexpected shape {type(value).__name__}")
    return PlainTextContent(text=raw)


def decode_part(part: BookPart) -> Optional[PartContent]:
    """Decode the payload of a stored part."""
    return decode_content(part.part_type, part.content)
