#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Book Publishing Pipeline

Drives a generated book from stored parts to published artifacts:

    content_ready
        -> render_parts()   processing_parts: one PDF per part in storage
        -> merge()          generating_pdf: merged, stamped final PDF
        -> ready            pdf_final_url set

Per-part rendering is idempotent: an artifact path embeds a hash of the
renderer, the book fields the part shows and the part payload, and a stored
artifact with the same path is reused. Parts may be rendered in a thread
pool; locators are written back in part_index order.
"""

import hashlib
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from config.constants import (
    PART_ARTIFACT_TEMPLATE, FINAL_ARTIFACT_TEMPLATE,
    FULL_PDF_TEMPLATE, DOCX_TEMPLATE, CONTENT_HASH_LENGTH,
)
from config.logging_config import get_logger
from config.settings import Settings
from core.book.models import Book, BookPart, BookStatus, sort_parts
from core.errors import ExportError, PaginationEngineError, PartNotFoundError, StorageError
from core.export.docx_book_exporter import export_book_docx
from core.export.pagination_engine import PaginationEngine, create_pagination_engine
from core.export.pdf_canvas_renderer import CanvasBookRenderer
from core.export.pdf_merger import check_part_artifacts, merge_book_pdf
from core.rendering.assembler import assemble_full_html, assemble_part_html
from core.storage.book_repository import BookRepository
from core.storage.object_storage import LocalObjectStorage

logger = get_logger(__name__)

RENDERER_HTML = "html"
RENDERER_CANVAS = "canvas"
RENDERERS = (RENDERER_HTML, RENDERER_CANVAS)


class BookPipeline:
    """
    Assembly, rendering and export operations for stored books.

    Usage:
        pipeline = BookPipeline(settings, repository, storage)
        final_path = pipeline.publish(book_id)
    """

    def __init__(
        self,
        settings: Settings,
        repository: BookRepository,
        storage: LocalObjectStorage,
        engine: Optional[PaginationEngine] = None,
        canvas_renderer: Optional[CanvasBookRenderer] = None,
    ):
        self.settings = settings
        self.repository = repository
        self.storage = storage
        self._engine = engine
        self._canvas_renderer = canvas_renderer

    @property
    def engine(self) -> PaginationEngine:
        if self._engine is None:
            self._engine = create_pagination_engine(self.settings)
        return self._engine

    @property
    def canvas_renderer(self) -> CanvasBookRenderer:
        if self._canvas_renderer is None:
            self._canvas_renderer = CanvasBookRenderer(self.settings)
        return self._canvas_renderer

    def _load(self, book_id: str):
        book = self.repository.require_book(book_id)
        return book, self.repository.list_parts(book_id)

    # ========== HTML ==========

    def preview_html(self, book_id: str) -> str:
        """Full-book HTML preview."""
        book, parts = self._load(book_id)
        return assemble_full_html(book, parts, self.settings)

    def part_html(self, book_id: str, part_index: int) -> str:
        """Standalone HTML document for one part."""
        book, parts = self._load(book_id)
        part = self._find_part(book_id, parts, part_index)
        return assemble_part_html(book, part, self.settings)

    @staticmethod
    def _find_part(book_id: str, parts: List[BookPart], part_index: int) -> BookPart:
        for part in parts:
            if part.part_index == part_index:
                return part
        raise PartNotFoundError(book_id, part_index)

    # ========== Per-part rendering ==========

    def artifact_path(self, book: Book, part: BookPart, renderer: str) -> str:
        """Storage path of a part's PDF for this renderer and content."""
        digest = hashlib.sha256()
        for value in (renderer, book.title, book.subtitle, book.author, part.content_hash):
            digest.update((value or "").encode("utf-8"))
            digest.update(b"\x00")
        return PART_ARTIFACT_TEMPLATE.format(
            book_id=book.id,
            part_index=part.part_index,
            renderer=renderer,
            artifact_key=digest.hexdigest()[:CONTENT_HASH_LENGTH],
        )

    def render_part_pdf(self, book: Book, part: BookPart, renderer: str = RENDERER_HTML) -> bytes:
        """
        Render one part to PDF, retrying engine failures.

        Raises:
            PaginationEngineError / ExportError: after the last attempt
        """
        attempts = max(1, self.settings.render_retries + 1)
        last_error = None
        for attempt in range(1, attempts + 1):
            try:
                if renderer == RENDERER_CANVAS:
                    return self.canvas_renderer.render_part(book, part)
                return self.engine.render(assemble_part_html(book, part, self.settings))
            except (PaginationEngineError, ExportError) as e:
                last_error = e
                logger.warning(
                    f"Part {part.part_index} render attempt {attempt}/{attempts} failed: {e}"
                )
        raise last_error

    def render_parts(self, book_id: str, renderer: str = RENDERER_HTML, force: bool = False) -> List[BookPart]:
        """
        Render every known part to its own PDF and record the locators.

        Args:
            book_id: Book to render
            renderer: "html" (pagination engine) or "canvas" (ReportLab)
            force: Re-render even when a matching artifact exists

        Returns:
            The book's parts with updated pdf_url values.
        """
        if renderer not in RENDERERS:
            raise ValueError(f"Unknown renderer: {renderer}")

        book, parts = self._load(book_id)
        self.repository.update_status(book_id, BookStatus.PROCESSING_PARTS)

        pending = []
        for part in sort_parts(parts):
            if part.kind is None:
                continue
            path = self.artifact_path(book, part, renderer)
            if not force and part.pdf_url == path and self.storage.exists(path):
                logger.debug(f"Part {part.part_index} unchanged, reusing {path}")
                continue
            pending.append((part, path))

        logger.info(f"Rendering {len(pending)} of {len(parts)} parts for book {book_id} ({renderer})")

        def render(item):
            part, _ = item
            return self.render_part_pdf(book, part, renderer)

        if self.settings.render_concurrency > 1 and len(pending) > 1:
            with ThreadPoolExecutor(max_workers=self.settings.render_concurrency) as pool:
                self._store_parts(book_id, pending, pool.map(render, pending))
        else:
            self._store_parts(book_id, pending, map(render, pending))

        return self.repository.list_parts(book_id)

    def _store_parts(self, book_id: str, pending, results) -> None:
        for (part, path), pdf in zip(pending, results):
            self.storage.upload(path, pdf, overwrite=True)
            self.repository.set_part_pdf_url(book_id, part.part_index, path)
            part.pdf_url = path

    # ========== Merge ==========

    def merge(self, book_id: str) -> str:
        """
        Merge per-part PDFs into the final book and mark it ready.

        Raises:
            MissingPartArtifactError: before any status change or download
                                      when a part has no rendered PDF
            StorageError / ExportError: a part PDF cannot be read or the result
                                       stored; the previous status is restored
        """
        book, parts = self._load(book_id)
        check_part_artifacts(book_id, parts)

        self.repository.update_status(book_id, BookStatus.GENERATING_PDF)
        final_path = FINAL_ARTIFACT_TEMPLATE.format(book_id=book_id)
        try:
            merged = merge_book_pdf(book, parts, self.storage)
            self.storage.upload(final_path, merged, overwrite=True)
        except (StorageError, ExportError) as e:
            logger.error(f"Merge failed for book {book_id}: {e}")
            self.repository.update_status(book_id, book.status)
            raise

        self.repository.update_status(book_id, BookStatus.READY, pdf_final_url=final_path)
        logger.info(f"Book {book_id} published: {final_path}")
        return final_path

    def publish(self, book_id: str, renderer: str = RENDERER_HTML, force: bool = False) -> str:
        """Render all parts, then merge them."""
        self.render_parts(book_id, renderer=renderer, force=force)
        return self.merge(book_id)

    # ========== Single-shot exports ==========

    def render_full_pdf(self, book_id: str) -> str:
        """Paginate the full preview document in one engine call."""
        html = self.preview_html(book_id)
        pdf = self.engine.render(html)
        path = FULL_PDF_TEMPLATE.format(book_id=book_id)
        self.storage.upload(path, pdf, overwrite=True)
        return path

    def render_canvas_pdf(self, book_id: str) -> bytes:
        """Whole book through the ReportLab renderer, stamped."""
        book, parts = self._load(book_id)
        return self.canvas_renderer.render_book(book, parts)

    def export_docx(self, book_id: str) -> str:
        """Build and store the DOCX rendition."""
        book, parts = self._load(book_id)
        data = export_book_docx(book, parts, settings=self.settings)
        path = DOCX_TEMPLATE.format(book_id=book_id)
        self.storage.upload(path, data, overwrite=True)
        return path
