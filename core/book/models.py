"""
Book and BookPart records.

A book is an ordered list of parts. Each part carries a part_type tag and a
serialized JSON payload whose shape depends on that tag (see content.py).
"""

import hashlib
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, List


class BookStatus(Enum):
    """Lifecycle of a book through generation and assembly."""
    GENERATING_CONTENT = "generating_content"
    CONTENT_READY = "content_ready"
    PROCESSING_PARTS = "processing_parts"
    GENERATING_PDF = "generating_pdf"
    READY = "ready"
    ERROR = "error"


class PartType(Enum):
    """Known part types. Unknown strings are tolerated on BookPart."""
    COVER = "cover"
    COPYRIGHT = "copyright"
    TOC = "toc"
    INTRODUCTION = "introduction"
    CHAPTER_TITLE = "chapter_title"
    CHAPTER_CONTENT = "chapter_content"
    CONCLUSION = "conclusion"

    @classmethod
    def from_value(cls, value: str) -> Optional["PartType"]:
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class Book:
    """A book and its metadata."""
    id: str
    title: str
    subtitle: str = ""
    author: str = ""
    language: str = ""
    tone: str = ""
    niche: str = ""
    summary: str = ""
    status: BookStatus = BookStatus.GENERATING_CONTENT
    user_id: Optional[str] = None
    pdf_final_url: Optional[str] = None
    created_at: str = field(default_factory=lambda: datetime.utcnow().isoformat())
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class BookPart:
    """One ordered structural unit of a book."""
    book_id: str
    part_index: int
    part_type: str
    content: str = ""
    pdf_url: Optional[str] = None
    id: Optional[int] = None

    @property
    def kind(self) -> Optional[PartType]:
        """The part type as an enum, or None for unrecognized tags."""
        return PartType.from_value(self.part_type)

    @property
    def content_hash(self) -> str:
        """SHA-256 of type and payload, used to key rendered artifacts."""
        digest = hashlib.sha256()
        digest.update(self.part_type.encode("utf-8"))
        digest.update(b"\x00")
        digest.update((self.content or "").encode("utf-8"))
        return digest.hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def sort_parts(parts: List[BookPart]) -> List[BookPart]:
    """
    Parts in reading order.

    Stable ascending sort by part_index; ties keep their input order.
    The input list is not modified.
    """
    return sorted(parts or [], key=lambda part: part.part_index)
