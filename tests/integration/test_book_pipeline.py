"""
Integration tests for core/pipeline/book_pipeline.py

Rendering uses a fake pagination engine (one reportlab page per part) or
the real ReportLab canvas renderer; storage and the repository are real.
"""
import io
import re

import pytest
from pypdf import PdfReader

from core.book.models import BookPart, BookStatus
from core.errors import (
    BookNotFoundError,
    MissingPartArtifactError,
    PaginationEngineError,
    PartNotFoundError,
    StorageError,
)
from core.pipeline import BookPipeline, RENDERER_CANVAS


class TestRenderParts:

    def test_every_part_gets_an_artifact(self, pipeline, stored_book, storage, fake_engine):
        parts = pipeline.render_parts(stored_book.id)

        assert len(fake_engine.calls) == 7
        assert [part.part_index for part in parts] == list(range(1, 8))
        for part in parts:
            assert re.match(rf"^book-1/parts/{part.part_index:04d}-html-[0-9a-f]{{12}}\.pdf$", part.pdf_url)
            assert storage.exists(part.pdf_url)

    def test_status_is_processing_parts(self, pipeline, stored_book, repository):
        pipeline.render_parts(stored_book.id)
        assert repository.get_book(stored_book.id).status == BookStatus.PROCESSING_PARTS

    def test_part_documents_have_no_running_heads(self, pipeline, stored_book, fake_engine):
        pipeline.render_parts(stored_book.id)
        assert all("counter(page)" not in html for html in fake_engine.calls)

    def test_rendering_is_idempotent(self, pipeline, stored_book, fake_engine):
        first = pipeline.render_parts(stored_book.id)
        second = pipeline.render_parts(stored_book.id)

        assert len(fake_engine.calls) == 7
        assert [part.pdf_url for part in first] == [part.pdf_url for part in second]

    def test_only_edited_part_is_rerendered(self, pipeline, stored_book, repository, fake_engine):
        pipeline.render_parts(stored_book.id)
        repository.save_parts([
            BookPart(stored_book.id, 7, "conclusion", content='{"title": "New End", "content": "Changed."}')
        ])

        parts = pipeline.render_parts(stored_book.id)

        assert len(fake_engine.calls) == 8
        assert "New End" in fake_engine.calls[-1]
        assert all(part.pdf_url for part in parts)

    def test_force_rerenders_everything(self, pipeline, stored_book, fake_engine):
        pipeline.render_parts(stored_book.id)
        pipeline.render_parts(stored_book.id, force=True)
        assert len(fake_engine.calls) == 14

    def test_title_change_changes_artifact_paths(self, pipeline, stored_book, repository):
        before = pipeline.render_parts(stored_book.id)
        repository.update_metadata(stored_book.id, "Another Title", stored_book.subtitle)
        after = pipeline.render_parts(stored_book.id)

        assert before[0].pdf_url != after[0].pdf_url

    def test_unknown_parts_are_not_rendered(self, pipeline, stored_book, repository, fake_engine):
        repository.save_parts([BookPart(stored_book.id, 8, "appendix", content="{}")])
        parts = pipeline.render_parts(stored_book.id)

        assert len(fake_engine.calls) == 7
        assert parts[-1].part_type == "appendix"
        assert parts[-1].pdf_url is None

    def test_failed_attempt_is_retried(self, settings, repository, storage, stored_book, engine_factory):
        engine = engine_factory(fail_times=1)
        pipeline = BookPipeline(settings, repository, storage, engine=engine)

        parts = pipeline.render_parts(stored_book.id)

        assert all(part.pdf_url for part in parts)
        assert len(engine.calls) == 8

    def test_exhausted_retries_raise(self, settings, repository, storage, stored_book, engine_factory):
        engine = engine_factory(fail_times=100)
        pipeline = BookPipeline(settings, repository, storage, engine=engine)

        with pytest.raises(PaginationEngineError):
            pipeline.render_parts(stored_book.id)
        assert len(engine.calls) == settings.render_retries + 1

    def test_thread_pool_keeps_part_order(self, settings, repository, storage, stored_book, fake_engine):
        settings.render_concurrency = 3
        pipeline = BookPipeline(settings, repository, storage, engine=fake_engine)

        parts = pipeline.render_parts(stored_book.id)

        assert len(fake_engine.calls) == 7
        assert [int(part.pdf_url.split("/")[-1][:4]) for part in parts] == list(range(1, 8))

    def test_canvas_renderer(self, pipeline, stored_book, fake_engine):
        parts = pipeline.render_parts(stored_book.id, renderer=RENDERER_CANVAS)

        assert fake_engine.calls == []
        assert all("-canvas-" in part.pdf_url for part in parts)

    def test_unknown_renderer(self, pipeline, stored_book):
        with pytest.raises(ValueError):
            pipeline.render_parts(stored_book.id, renderer="svg")


class TestMerge:

    def test_publish_produces_stamped_final_pdf(self, pipeline, stored_book, repository, storage):
        final_path = pipeline.publish(stored_book.id)

        assert final_path == "book-1/final/final.pdf"
        book = repository.get_book(stored_book.id)
        assert book.status == BookStatus.READY
        assert book.pdf_final_url == final_path

        reader = PdfReader(io.BytesIO(storage.download(final_path)))
        assert len(reader.pages) == 7
        page_two = reader.pages[1].extract_text()
        assert "THE QUIET ENGINE" in page_two
        assert "2" in page_two
        assert "THE QUIET ENGINE" not in reader.pages[0].extract_text()

    def test_merge_without_artifacts_leaves_status(self, pipeline, stored_book, repository, storage):
        status_before = repository.get_book(stored_book.id).status

        with pytest.raises(MissingPartArtifactError) as exc_info:
            pipeline.merge(stored_book.id)

        assert exc_info.value.part_indices == list(range(1, 8))
        assert repository.get_book(stored_book.id).status == status_before
        assert not storage.exists("book-1/final/final.pdf")

    def test_merge_with_one_missing_artifact(self, pipeline, stored_book, repository):
        pipeline.render_parts(stored_book.id)
        repository.set_part_pdf_url(stored_book.id, 3, None)

        with pytest.raises(MissingPartArtifactError) as exc_info:
            pipeline.merge(stored_book.id)
        assert exc_info.value.part_indices == [3]
        assert repository.get_book(stored_book.id).status == BookStatus.PROCESSING_PARTS

    def test_failed_download_restores_status(self, pipeline, stored_book, repository, storage):
        parts = pipeline.render_parts(stored_book.id)
        storage.local_path(parts[2].pdf_url).unlink()

        with pytest.raises(StorageError):
            pipeline.merge(stored_book.id)

        book = repository.get_book(stored_book.id)
        assert book.status == BookStatus.PROCESSING_PARTS
        assert book.pdf_final_url is None
        assert not storage.exists("book-1/final/final.pdf")


class TestPreviewAndExports:

    def test_preview_html(self, pipeline, stored_book):
        html = pipeline.preview_html(stored_book.id)
        assert html.count('class="page-container ') == 7

    def test_part_html(self, pipeline, stored_book):
        html = pipeline.part_html(stored_book.id, 4)
        assert "introduction-page" in html
        assert html.count('class="page-container ') == 1

    def test_missing_part(self, pipeline, stored_book):
        with pytest.raises(PartNotFoundError):
            pipeline.part_html(stored_book.id, 42)

    def test_missing_book(self, pipeline):
        with pytest.raises(BookNotFoundError):
            pipeline.preview_html("missing")

    def test_full_pdf_is_one_engine_call(self, pipeline, stored_book, storage, fake_engine):
        path = pipeline.render_full_pdf(stored_book.id)

        assert path == "book-1/book.pdf"
        assert len(fake_engine.calls) == 1
        assert "counter(page)" in fake_engine.calls[0]
        assert storage.download(path).startswith(b"%PDF")

    def test_docx_export_is_stored(self, pipeline, stored_book, storage):
        path = pipeline.export_docx(stored_book.id)
        assert path == "book-1/book.docx"
        assert storage.download(path)[:2] == b"PK"

    def test_canvas_pdf(self, pipeline, stored_book):
        pdf = pipeline.render_canvas_pdf(stored_book.id)
        assert len(PdfReader(io.BytesIO(pdf)).pages) >= 7
