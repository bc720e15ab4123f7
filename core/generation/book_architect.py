"""
Book Architect - AI outline for a new book.

Given a topic ("idea" mode) or nothing at all ("surprise" mode), asks the
model for a commercial title, positioning and a chapter outline, and formats
the outline as text the user can edit before generating the book.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from ai_providers.base import AIMessage, BaseAIProvider
from config.constants import GENERATION_CHAPTER_COUNT, GENERATION_SUBCHAPTER_COUNT
from config.logging_config import get_logger
from core.errors import GenerationError
from core.generation.book_generator import clean_and_parse_json

logger = get_logger(__name__)

MODE_IDEA = "idea"
MODE_SURPRISE = "surprise"


@dataclass
class ChapterOutline:
    title: str
    subchapters: List[str] = field(default_factory=list)


@dataclass
class BookStructure:
    """Outline proposed for a book."""
    title: str
    subtitle: str
    niche: str
    summary: str
    target_audience: str
    chapters: List[ChapterOutline] = field(default_factory=list)
    conclusion_title: str = ""
    conclusion_message: str = ""
    structure_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_structure_prompt(mode: str, topic: Optional[str], language: str) -> str:
    if mode == MODE_IDEA:
        instruction = f'The user wants to write about: "{topic}".'
    else:
        instruction = "The user has no idea yet. Pick a high-demand niche and design a best-seller."

    return f"""
Act as the editor-in-chief of a best-selling publisher.
{instruction}

Create the COMPLETE STRATEGIC OUTLINE for this book.

RULES:
1. Language: {language}.
2. Structure: exactly {GENERATION_CHAPTER_COUNT} chapters plus a conclusion.
3. Every chapter has exactly {GENERATION_SUBCHAPTER_COUNT} subchapters.
4. The conclusion gets a creative, inspiring title (not just "Conclusion").

Answer ONLY with this JSON:
{{
  "title": "catchy commercial title",
  "subtitle": "the book's promise",
  "niche": "market niche",
  "summary": "synopsis",
  "target_audience": "detailed target audience",
  "chapters_structure": [
    {{ "chapter_title": "...", "subchapters": ["...", "...", "..."] }}
  ],
  "conclusion_structure": {{ "title": "...", "key_message": "final call to action" }}
}}
""".strip()


def format_structure(structure: BookStructure) -> str:
    """Human-readable outline text."""
    lines = [
        "SYNOPSIS:",
        structure.summary,
        "",
        "TARGET AUDIENCE:",
        structure.target_audience,
        "",
        "=== BOOK STRUCTURE ===",
    ]
    for number, chapter in enumerate(structure.chapters, start=1):
        lines.append("")
        lines.append(f"Chapter {number}: {chapter.title}")
        for subchapter in chapter.subchapters:
            lines.append(f"   - {subchapter}")

    lines.append("")
    lines.append("=== CLOSING ===")
    lines.append(f"Conclusion title: {structure.conclusion_title}")
    lines.append(f"Final message: {structure.conclusion_message}")
    return "\n".join(lines) + "\n"


def parse_structure(data: Dict[str, Any]) -> BookStructure:
    """Build a BookStructure from the model's JSON answer."""
    chapters = []
    for item in data.get("chapters_structure") or []:
        if not isinstance(item, dict):
            continue
        subchapters = item.get("subchapters")
        chapters.append(ChapterOutline(
            title=str(item.get("chapter_title", "")),
            subchapters=[str(s) for s in subchapters] if isinstance(subchapters, list) else [],
        ))

    conclusion = data.get("conclusion_structure")
    if not isinstance(conclusion, dict):
        conclusion = {}

    structure = BookStructure(
        title=str(data.get("title", "")),
        subtitle=str(data.get("subtitle", "")),
        niche=str(data.get("niche", "")),
        summary=str(data.get("summary", "")),
        target_audience=str(data.get("target_audience", "")),
        chapters=chapters,
        conclusion_title=str(conclusion.get("title", "")),
        conclusion_message=str(conclusion.get("key_message", "")),
    )
    structure.structure_text = format_structure(structure)
    return structure


async def generate_book_structure(
    provider: BaseAIProvider,
    mode: str = MODE_SURPRISE,
    topic: Optional[str] = None,
    language: str = "English",
) -> BookStructure:
    """
    Ask the model for a book outline.

    Args:
        provider: AI provider
        mode: "idea" (develop topic) or "surprise" (invent one)
        topic: Required in idea mode
        language: Language of the outline

    Raises:
        ValueError: Unknown mode, or idea mode without a topic
        GenerationError: Provider failure or unusable answer
    """
    if mode not in (MODE_IDEA, MODE_SURPRISE):
        raise ValueError(f"Unknown mode: {mode}")
    if mode == MODE_IDEA and not (topic or "").strip():
        raise ValueError("A topic is required in idea mode")

    try:
        response = await provider.complete(
            [AIMessage(role="user", content=build_structure_prompt(mode, topic, language))],
            json_mode=True,
        )
    except Exception as e:
        logger.error(f"Outline generation failed: {e}")
        raise GenerationError(f"AI provider failed: {e}") from e

    structure = parse_structure(clean_and_parse_json(response.content))
    logger.info(f"Outline ready: {structure.title} ({len(structure.chapters)} chapters)")
    return structure
