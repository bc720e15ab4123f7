"""
Pytest configuration and shared fixtures for AI Bookmaker tests.
"""
import io
import json
import sys
import pytest
from pathlib import Path
from typing import List

from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.settings import Settings
from core.book.models import Book, BookPart
from core.storage.book_repository import BookRepository
from core.storage.object_storage import LocalObjectStorage


# ============================================================================
# Fixtures: Configuration & Settings
# ============================================================================

@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with every directory under a temp dir and a fake API key."""
    return Settings(
        gemini_api_key="test_gemini_key",
        ai_provider="gemini",
        data_dir=tmp_path / "data",
        storage_dir=tmp_path / "storage",
        logs_dir=tmp_path / "logs",
        database_path=tmp_path / "data" / "books.db",
        cover_background_url=None,
        imprint_notice_text="",
        render_concurrency=1,
        render_retries=1,
    )


# ============================================================================
# Fixtures: Sample Data
# ============================================================================

@pytest.fixture
def sample_book() -> Book:
    return Book(
        id="book-1",
        title="The Quiet Engine",
        subtitle="Notes on Focus",
        author="Ana Souza",
        language="English",
    )


def _payload(value) -> str:
    return json.dumps(value, ensure_ascii=False)


@pytest.fixture
def sample_parts(sample_book: Book) -> List[BookPart]:
    """One part of every known type, indexed from 1."""
    payloads = [
        ("cover", _payload({"title": "The Quiet Engine", "subtitle": "Notes on Focus", "author": "Ana Souza"})),
        ("copyright", _payload("Copyright © 2025 Ana Souza")),
        ("toc", _payload({
            "title": "Contents",
            "content": "Chapter 1: Starting Small\n- The First Step\n- Keeping Going",
        })),
        ("introduction", _payload({
            "title": "Introduction",
            "content": "First paragraph.\nSecond paragraph with **bold** text.",
        })),
        ("chapter_title", _payload({"title": "Chapter 1: Starting Small"})),
        ("chapter_content", _payload({
            "title": "Chapter 1: Starting Small",
            "introduction": "Intro one.\nIntro two.\nIntro three.",
            "subchapters": [
                {"title": "The First Step", "content": "Body one.\n- item a\n- item b"},
                {"title": "Keeping Going", "content": "Body two.\nBody three."},
            ],
        })),
        ("conclusion", _payload({"title": "Onward", "content": "Final words."})),
    ]
    return [
        BookPart(book_id=sample_book.id, part_index=index, part_type=part_type, content=content)
        for index, (part_type, content) in enumerate(payloads, start=1)
    ]


# ============================================================================
# Fixtures: Storage
# ============================================================================

@pytest.fixture
def repository(settings: Settings) -> BookRepository:
    return BookRepository(str(settings.database_path))


@pytest.fixture
def storage(settings: Settings) -> LocalObjectStorage:
    return LocalObjectStorage(str(settings.storage_dir))


@pytest.fixture
def stored_book(repository: BookRepository, sample_book: Book, sample_parts: List[BookPart]) -> Book:
    """sample_book and sample_parts saved in the repository."""
    book = repository.create_book(sample_book)
    repository.save_parts(sample_parts)
    return book


# ============================================================================
# Helpers
# ============================================================================

def make_pdf(text: str = "", pages: int = 1) -> bytes:
    """A5 PDF with the given text drawn on every page."""
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=(148 * mm, 210 * mm))
    for _ in range(pages):
        if text:
            c.setFont("Helvetica", 12)
            c.drawString(20 * mm, 105 * mm, text)
        c.showPage()
    c.save()
    return buffer.getvalue()


@pytest.fixture
def pdf_factory():
    """Build small PDFs with reportlab."""
    return make_pdf


class FakeEngine:
    """Pagination engine returning a one-page PDF per call."""

    name = "fake"

    def __init__(self, fail_times: int = 0):
        self.calls: List[str] = []
        self.fail_times = fail_times

    def render(self, html: str) -> bytes:
        from core.errors import PaginationEngineError

        self.calls.append(html)
        if self.fail_times > 0:
            self.fail_times -= 1
            raise PaginationEngineError("engine unavailable")
        return make_pdf("part")


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def engine_factory():
    """Build FakeEngine instances (e.g. failing the first calls)."""
    return FakeEngine


# ============================================================================
# Session-level Setup
# ============================================================================

def pytest_collection_modifyitems(config, items):
    """Add markers based on test location."""
    for item in items:
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
