#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Book Generator - one-shot AI generation of a complete book.

A single prompt asks the model for the whole manuscript as one JSON object.
The answer is split into ordered parts:

    1 cover, 2 copyright, 3 toc, 4 introduction,
    (chapter_title, chapter_content) per chapter,
    conclusion

and stored with the book, which then moves to content_ready.
"""

import asyncio
import json
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from ai_providers.base import AIMessage, BaseAIProvider
from config.constants import GENERATION_CHAPTER_COUNT, GENERATION_SUBCHAPTER_COUNT
from config.logging_config import get_logger
from core.book.models import Book, BookPart, BookStatus, PartType
from core.errors import GenerationError, StorageError
from core.storage.book_repository import BookRepository

logger = get_logger(__name__)


@dataclass
class BookRequest:
    """What the user asked for."""
    title: str
    subtitle: str = ""
    author: str = ""
    niche: str = ""
    tone: str = ""
    summary: str = ""
    language: str = "English"
    user_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


SYSTEM_PROMPT = (
    "You are a professional non-fiction author and editor. "
    "You always answer with a single valid JSON object and nothing else."
)


def build_book_prompt(request: BookRequest) -> str:
    """Prompt asking for the complete book as one JSON object."""
    return f"""
Write a COMPLETE book now.

Book details:
- Title: "{request.title}"
- Subtitle: "{request.subtitle}"
- Niche: "{request.niche}"
- Author: "{request.author}"
- Summary: "{request.summary}"
- Tone: "{request.tone}"
- Language: {request.language}

STRUCTURE RULES:
1. Create an optimized title and subtitle.
2. Write a complete introduction.
3. Write EXACTLY {GENERATION_CHAPTER_COUNT} chapters.
4. Every chapter has an introduction and {GENERATION_SUBCHAPTER_COUNT} subchapters.
5. Write a complete conclusion.

CONTENT RULES:
- Write everything in {request.language}, in a {request.tone or "clear"} tone.
- Flowing prose, paragraphs separated with \\n.
- At least 600 words per subchapter.
- **Bold** and lines starting with "- " or "1. " are allowed for emphasis and lists.
- In the table of contents, put each chapter on its own line and each
  subchapter on its own line starting with "- ".

RESPONSE FORMAT (JSON ONLY):
Answer ONLY with this exact JSON, nothing before or after:
{{
  "optimized_title": "...",
  "optimized_subtitle": "...",
  "introduction": {{ "title": "...", "content": "..." }},
  "table_of_contents": {{ "title": "...", "content": "..." }},
  "chapters": [
    {{
      "title": "...",
      "introduction": "...",
      "subchapters": [
        {{ "title": "...", "content": "..." }}
      ]
    }}
  ],
  "conclusion": {{ "title": "...", "content": "..." }}
}}
""".strip()


def clean_and_parse_json(text: str) -> Dict[str, Any]:
    """
    Parse a model answer that should be a JSON object.

    Markdown code fences are removed and the text is cut from the first '{'
    to the last '}' before parsing.

    Raises:
        GenerationError: If no JSON object can be parsed
    """
    if not text or not text.strip():
        raise GenerationError("Empty response from AI provider")

    clean = text.replace("```json", "").replace("```JSON", "").replace("```", "").strip()
    first = clean.find("{")
    last = clean.rfind("}")
    if first != -1 and last != -1:
        clean = clean[first:last + 1]

    try:
        data = json.loads(clean)
    except ValueError as e:
        logger.error(f"Invalid JSON from AI provider: {text[:200]!r}")
        raise GenerationError("AI provider returned text that is not valid JSON") from e

    if not isinstance(data, dict):
        raise GenerationError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def build_book_parts(book: Book, generated: Dict[str, Any], year: Optional[int] = None) -> List[BookPart]:
    """
    Split a generated manuscript into ordered parts, indexed from 1.

    Args:
        book: The stored book (title/subtitle already optimized)
        generated: Parsed model answer
        year: Copyright year (default: current year)
    """
    year = year or datetime.now().year
    parts: List[BookPart] = []

    def add(kind: PartType, payload: Any) -> None:
        parts.append(BookPart(
            book_id=book.id,
            part_index=len(parts) + 1,
            part_type=kind.value,
            content=_dump(payload),
        ))

    add(PartType.COVER, {"title": book.title, "subtitle": book.subtitle, "author": book.author})
    add(PartType.COPYRIGHT, f"Copyright © {year} {book.author}")
    add(PartType.TOC, generated.get("table_of_contents") or {})
    add(PartType.INTRODUCTION, generated.get("introduction") or {})

    chapters = generated.get("chapters")
    if isinstance(chapters, list):
        for chapter in chapters:
            if not isinstance(chapter, dict):
                continue
            add(PartType.CHAPTER_TITLE, {"title": chapter.get("title", "")})
            add(PartType.CHAPTER_CONTENT, chapter)

    add(PartType.CONCLUSION, generated.get("conclusion") or {})
    return parts


class BookGenerator:
    """
    Generates and stores a complete book.

    Usage:
        generator = BookGenerator(provider, repository)
        book = await generator.generate(BookRequest(title="..."))
    """

    def __init__(self, provider: BaseAIProvider, repository: BookRepository):
        self.provider = provider
        self.repository = repository

    async def generate(self, request: BookRequest) -> Book:
        """
        Create the book record, generate its content and store its parts.

        Raises:
            GenerationError: Provider failure or unusable answer (book -> error)
            StorageError: Parts could not be stored (book -> error)
        """
        book = await asyncio.to_thread(self.repository.create_book, Book(
            id="",
            title=request.title,
            subtitle=request.subtitle,
            author=request.author,
            language=request.language,
            tone=request.tone,
            niche=request.niche,
            summary=request.summary,
            status=BookStatus.GENERATING_CONTENT,
            user_id=request.user_id,
        ))
        logger.info(f"Generating book {book.id}: {book.title}")

        try:
            response = await self.provider.complete(
                [AIMessage(role="user", content=build_book_prompt(request))],
                system_prompt=SYSTEM_PROMPT,
                json_mode=True,
            )
        except Exception as e:
            logger.error(f"AI provider failed for book {book.id}: {e}")
            await asyncio.to_thread(self.repository.update_status, book.id, BookStatus.ERROR)
            raise GenerationError(f"AI provider failed: {e}") from e

        try:
            generated = clean_and_parse_json(response.content)
        except GenerationError:
            await asyncio.to_thread(self.repository.update_status, book.id, BookStatus.ERROR)
            raise

        book.title = generated.get("optimized_title") or book.title
        book.subtitle = generated.get("optimized_subtitle") or book.subtitle

        parts = build_book_parts(book, generated)
        try:
            await asyncio.to_thread(self.repository.update_metadata, book.id, book.title, book.subtitle)
            await asyncio.to_thread(self.repository.save_parts, parts)
        except StorageError:
            await asyncio.to_thread(self.repository.update_status, book.id, BookStatus.ERROR)
            raise

        await asyncio.to_thread(self.repository.update_status, book.id, BookStatus.CONTENT_READY)
        book.status = BookStatus.CONTENT_READY
        logger.info(f"Book {book.id} content ready: {len(parts)} parts")
        return book
