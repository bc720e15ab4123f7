"""
Typed failures raised by the book pipeline.

Malformed part payloads never raise; they degrade to plain-text rendering
inside core.book.content. Everything here is an I/O, external-service or
precondition failure that propagates to the caller.
"""

from typing import List, Optional


class BookPipelineError(Exception):
    """Base error for the book assembly pipeline"""
    pass


class BookNotFoundError(BookPipelineError):
    """Raised when a book id has no record"""
    def __init__(self, book_id: str):
        self.book_id = book_id
        super().__init__(f"Book not found: {book_id}")


class MissingPartArtifactError(BookPipelineError):
    """Raised before merging when parts lack a rendered artifact locator"""
    def __init__(self, book_id: Optional[str], part_indices: List[int]):
        self.book_id = book_id
        self.part_indices = list(part_indices)
        if self.part_indices:
            detail = f"parts without rendered PDF: {self.part_indices}"
        else:
            detail = "book has no parts"
        super().__init__(f"Cannot merge book {book_id}: {detail}")


class PaginationEngineError(BookPipelineError):
    """Raised when the HTML pagination engine fails to produce a PDF"""
    pass


class GenerationError(BookPipelineError):
    """Raised when the AI generation service fails or returns unusable output"""
    pass


class StorageError(BookPipelineError):
    """Raised on object storage or persistent store failures"""
    pass


class ExportError(BookPipelineError):
    """Raised when a format-specific exporter (DOCX, PDF) fails"""
    def __init__(self, export_format: str, message: str):
        self.export_format = export_format
        super().__init__(f"{export_format.upper()} export failed: {message}")


class PartNotFoundError(BookPipelineError):
    """Raised when a book has no part at the requested index"""
    def __init__(self, book_id: str, part_index: int):
        self.book_id = book_id
        self.part_index = part_index
        super().__init__(f"Book {book_id} has no part {part_index}")
