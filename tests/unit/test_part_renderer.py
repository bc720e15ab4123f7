"""
Unit tests for core/rendering (part fragments and document assembly)
"""
import json
import random

import pytest

from core.book.models import BookPart
from core.rendering.assembler import assemble_full_html, assemble_part_html
from core.rendering.html_styles import render_head, running_title
from core.rendering.part_renderer import copyright_lines, render_part_html
from core.book.content import CopyrightContent

FRAGMENT_MARKER = 'class="page-container '


class TestRenderPart:

    def test_cover_uses_payload_fields(self, sample_book, sample_parts, settings):
        html = render_part_html(sample_book, sample_parts[0], settings)
        assert "cover-page" in html
        assert '<h1 class="cover-title">The Quiet Engine</h1>' in html
        assert '<p class="cover-subtitle">Notes on Focus</p>' in html
        assert '<p class="cover-author">Ana Souza</p>' in html

    def test_cover_falls_back_to_book_fields(self, sample_book, settings):
        part = BookPart(sample_book.id, 1, "cover", content="{}")
        html = render_part_html(sample_book, part, settings)
        assert "The Quiet Engine" in html
        assert "Ana Souza" in html

    def test_cover_background_from_settings(self, sample_book, sample_parts, settings):
        settings.cover_background_url = "https://example.com/cover.png"
        html = render_part_html(sample_book, sample_parts[0], settings)
        assert "background-image: url('https://example.com/cover.png');" in html

    def test_copyright_lines(self, sample_book, sample_parts, settings):
        html = render_part_html(sample_book, sample_parts[1], settings)
        assert "<p>Copyright © 2025 Ana Souza</p>" in html
        assert f"<p>{settings.rights_reserved_text}</p>" in html
        assert 'class="legal-notice"' in html
        assert "front-matter" in html

    def test_copyright_generated_notice_when_empty(self, sample_book, settings):
        lines = copyright_lines(sample_book, CopyrightContent(text=""), settings)
        assert lines[0].startswith("Copyright ©")
        assert lines[0].endswith("Ana Souza")
        assert lines[-1] == settings.legal_notice_text

    def test_imprint_notice_is_appended(self, sample_book, settings):
        settings.imprint_notice_text = "Printed by Example Press"
        lines = copyright_lines(sample_book, CopyrightContent(text="Copyright X"), settings)
        assert lines == [
            "Copyright X",
            settings.rights_reserved_text,
            settings.legal_notice_text,
            "Printed by Example Press",
        ]

    def test_toc_entries(self, sample_book, sample_parts, settings):
        html = render_part_html(sample_book, sample_parts[2], settings)
        assert '<p class="toc-chapter">Chapter 1: Starting Small</p>' in html
        assert '<p class="toc-subchapter">The First Step</p>' in html

    def test_toc_default_title(self, sample_book, settings):
        part = BookPart(sample_book.id, 3, "toc", content=json.dumps({"content": "Chapter 1: A"}))
        html = render_part_html(sample_book, part, settings)
        assert f">{settings.toc_default_title}</h2>" in html

    def test_introduction_renders_markdown(self, sample_book, sample_parts, settings):
        html = render_part_html(sample_book, sample_parts[3], settings)
        assert "introduction-page" in html
        assert "<p>First paragraph.</p>" in html
        assert "<strong>bold</strong>" in html

    def test_conclusion_default_title(self, sample_book, settings):
        part = BookPart(sample_book.id, 9, "conclusion", content=json.dumps({"content": "Bye."}))
        html = render_part_html(sample_book, part, settings)
        assert f">{settings.conclusion_default_title}</h2>" in html
        assert "conclusion-page" in html

    def test_chapter_content(self, sample_book, sample_parts, settings):
        html = render_part_html(sample_book, sample_parts[5], settings)
        assert "chapter-page" in html
        assert '<h2 class="font-merriweather">Chapter 1: Starting Small</h2>' in html
        assert '<h3 class="font-merriweather-sans">The First Step</h3>' in html
        assert '<ul class="book-list"><li>item a</li><li>item b</li></ul>' in html
        assert html.index("Intro three.") < html.index("The First Step") < html.index("Keeping Going")

    def test_malformed_payload_renders_raw_text(self, sample_book, settings):
        raw = "Generated text that was never JSON"
        part = BookPart(sample_book.id, 4, "introduction", content=raw)
        html = render_part_html(sample_book, part, settings)
        assert f'<p class="plain-text">{raw}</p>' in html

    def test_unknown_type_renders_nothing(self, sample_book, settings):
        part = BookPart(sample_book.id, 4, "appendix", content=json.dumps({"title": "x"}))
        assert render_part_html(sample_book, part, settings) == ""

    def test_html_is_escaped(self, sample_book, settings):
        part = BookPart(sample_book.id, 5, "chapter_title", content=json.dumps({"title": "<script>x</script>"}))
        html = render_part_html(sample_book, part, settings)
        assert "<script>" not in html
        assert "&lt;script&gt;" in html


class TestAssembler:

    def test_one_fragment_per_part(self, sample_book, sample_parts, settings):
        document = assemble_full_html(sample_book, sample_parts, settings)
        assert document.startswith("<!DOCTYPE html>")
        assert document.count(FRAGMENT_MARKER) == len(sample_parts)

    def test_shuffled_input_gives_identical_document(self, sample_book, sample_parts, settings):
        expected = assemble_full_html(sample_book, sample_parts, settings)
        shuffled = list(sample_parts)
        random.Random(7).shuffle(shuffled)

        assert assemble_full_html(sample_book, shuffled, settings) == expected
        assert [part.part_index for part in sample_parts] == list(range(1, 8))

    def test_fragments_follow_part_index(self, sample_book, sample_parts, settings):
        document = assemble_full_html(sample_book, list(reversed(sample_parts)), settings)
        body = document.split("<body>", 1)[1]
        positions = [
            body.index("cover-page"),
            body.index("copyright-page"),
            body.index("toc-page"),
            body.index("introduction-page"),
            body.index("chapter-title-page"),
            body.index("chapter-page"),
            body.index("conclusion-page"),
        ]
        assert positions == sorted(positions)

    def test_unknown_parts_are_skipped(self, sample_book, sample_parts, settings):
        parts = sample_parts + [BookPart(sample_book.id, 99, "appendix", content="{}")]
        document = assemble_full_html(sample_book, parts, settings)
        assert document.count(FRAGMENT_MARKER) == len(sample_parts)

    @pytest.mark.parametrize("parts", [[], None])
    def test_empty_book_is_a_valid_document(self, sample_book, settings, parts):
        document = assemble_full_html(sample_book, parts, settings)
        assert "<body>" in document and "</html>" in document
        assert FRAGMENT_MARKER not in document

    def test_full_document_has_running_heads(self, sample_book, sample_parts, settings):
        document = assemble_full_html(sample_book, sample_parts, settings)
        assert 'content: "THE QUIET ENGINE";' in document
        assert "counter(page)" in document

    def test_part_document_has_no_running_heads(self, sample_book, sample_parts, settings):
        document = assemble_part_html(sample_book, sample_parts[3], settings)
        assert "counter(page)" not in document
        assert document.count(FRAGMENT_MARKER) == 1

    def test_page_geometry_from_settings(self, sample_book, settings):
        head = render_head(sample_book.title, settings)
        assert "size: 148mm 210mm;" in head
        assert "margin: 25mm 20mm 17mm 20mm;" in head


def test_running_title_is_uppercased_and_quote_safe():
    assert running_title('The "Best" Book') == "THE 'BEST' BOOK"
