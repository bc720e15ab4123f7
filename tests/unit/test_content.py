"""
Unit tests for core/book (records and payload decoding)
"""
import json

from core.book.content import (
    ChapterContent,
    CopyrightContent,
    CoverContent,
    PlainTextContent,
    SectionContent,
    Subchapter,
    TocContent,
    TocEntry,
    decode_content,
    parse_toc_entries,
)
from core.book.models import BookPart, PartType, sort_parts


class TestDecodeContent:

    def test_cover(self):
        raw = json.dumps({"title": "T", "subtitle": "S", "author": "A"})
        assert decode_content("cover", raw) == CoverContent(title="T", subtitle="S", author="A")

    def test_chapter_with_subchapters(self):
        raw = json.dumps({
            "title": "Chapter 1: Start",
            "introduction": "Intro",
            "subchapters": [{"title": "One", "content": "Body"}],
        })
        content = decode_content("chapter_content", raw)
        assert content == ChapterContent(
            title="Chapter 1: Start",
            introduction="Intro",
            subchapters=[Subchapter(title="One", body="Body")],
        )

    def test_null_fields_become_empty(self):
        raw = json.dumps({"title": None, "content": None})
        assert decode_content("introduction", raw) == SectionContent(title="", body="")

    def test_missing_payload_gives_empty_content(self):
        assert decode_content("toc", "") == TocContent(title="", entries=[])
        assert decode_content("conclusion", None) == SectionContent()
        assert decode_content("cover", "null") == CoverContent()

    def test_malformed_json_falls_back_to_plain_text(self):
        raw = "this is {not json"
        assert decode_content("introduction", raw) == PlainTextContent(text=raw)

    def test_wrong_shape_falls_back_to_plain_text(self):
        raw = json.dumps(["a", "b"])
        assert decode_content("chapter_content", raw) == PlainTextContent(text=raw)

    def test_string_payload_for_section_is_plain_text(self):
        raw = json.dumps("just words")
        assert decode_content("introduction", raw) == PlainTextContent(text="just words")

    def test_copyright_accepts_string_and_raw_text(self):
        assert decode_content("copyright", json.dumps("Copyright © 2025 X")) == CopyrightContent(text="Copyright © 2025 X")
        assert decode_content("copyright", "Copyright X") == CopyrightContent(text="Copyright X")

    def test_unknown_type_gives_none(self):
        assert decode_content("appendix", json.dumps({"title": "x"})) is None


class TestTocEntries:

    def test_dash_marks_subchapter(self):
        entries = parse_toc_entries("Chapter 1: Start\n- First\n\n  -Second  ")
        assert entries == [
            TocEntry("Chapter 1: Start", is_subchapter=False),
            TocEntry("First", is_subchapter=True),
            TocEntry("Second", is_subchapter=True),
        ]

    def test_toc_payload(self):
        raw = json.dumps({"title": "Contents", "content": "Chapter 1: A\n- a1"})
        content = decode_content("toc", raw)
        assert content.title == "Contents"
        assert [entry.is_subchapter for entry in content.entries] == [False, True]


class TestBookPart:

    def test_kind(self):
        assert BookPart("b", 1, "cover").kind == PartType.COVER
        assert BookPart("b", 1, "appendix").kind is None

    def test_content_hash_tracks_type_and_payload(self):
        part = BookPart("b", 1, "introduction", content='{"title": "A"}')
        same = BookPart("b", 9, "introduction", content='{"title": "A"}')
        edited = BookPart("b", 1, "introduction", content='{"title": "B"}')
        retyped = BookPart("b", 1, "conclusion", content='{"title": "A"}')

        assert part.content_hash == same.content_hash
        assert part.content_hash != edited.content_hash
        assert part.content_hash != retyped.content_hash

    def test_sort_parts_is_stable_and_copies(self):
        a = BookPart("b", 2, "toc", content="a")
        b = BookPart("b", 1, "cover")
        c = BookPart("b", 2, "toc", content="c")
        parts = [a, b, c]

        ordered = sort_parts(parts)

        assert ordered == [b, a, c]
        assert parts == [a, b, c]
