#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pytest fixtures for integration tests.

Provides:
- pipeline: BookPipeline over temp storage with a fake pagination engine
- fake_provider: AI provider double returning a canned manuscript
"""

import json
import pytest

from ai_providers.base import AIProviderType, AIResponse
from core.pipeline import BookPipeline


def _chapter(number: int) -> dict:
    return {
        "title": f"Chapter {number}: Part {number}",
        "introduction": f"Intro {number}.\nMore intro.",
        "subchapters": [
            {"title": f"Section {number}.{i}", "content": "Body text.\n- point\n- point"}
            for i in range(1, 4)
        ],
    }


GENERATED_BOOK = {
    "optimized_title": "Deep Focus",
    "optimized_subtitle": "Working Without Noise",
    "introduction": {"title": "Introduction", "content": "Hello reader."},
    "table_of_contents": {
        "title": "Contents",
        "content": "Chapter 1: Part 1\n- Section 1.1\nChapter 2: Part 2\n- Section 2.1",
    },
    "chapters": [_chapter(1), _chapter(2)],
    "conclusion": {"title": "Onward", "content": "Thank you."},
}

OUTLINE = {
    "title": "Calm Money",
    "subtitle": "Finance Without Fear",
    "niche": "Personal finance",
    "summary": "A gentle guide.",
    "target_audience": "Young professionals",
    "chapters_structure": [{"chapter_title": "Start Here", "subchapters": ["Why", "How", "When"]}],
    "conclusion_structure": {"title": "Your Next Step", "key_message": "Begin today."},
}


class FakeProvider:
    """Provider double returning a canned answer (or raising)."""

    def __init__(self, content: str = "", error: Exception = None):
        self.content = content
        self.error = error
        self.calls = 0

    async def complete(self, messages, system_prompt=None, **kwargs):
        self.calls += 1
        if self.error:
            raise self.error
        return AIResponse(content=self.content, model="fake", provider=AIProviderType.GEMINI)


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider(json.dumps(GENERATED_BOOK))


@pytest.fixture
def provider_factory():
    return FakeProvider


@pytest.fixture
def outline_json() -> str:
    return json.dumps(OUTLINE)


@pytest.fixture
def pipeline(settings, repository, storage, fake_engine) -> BookPipeline:
    return BookPipeline(settings, repository, storage, engine=fake_engine)
