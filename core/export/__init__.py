"""
Export Module

Output adapters over the book content model:
- DOCX rendition (python-docx)
- PDF through an HTML pagination engine (WeasyPrint or a print server)
- PDF laid out directly with ReportLab
- Merge stage that joins per-part PDFs and stamps running heads (pypdf)
"""

from .docx_book_exporter import BookDocxConfig, export_book_docx
from .pagination_engine import (
    PaginationEngine,
    WeasyPrintEngine,
    RemotePrintEngine,
    create_pagination_engine,
)
from .pdf_canvas_renderer import CanvasBookRenderer, CanvasLayoutConfig
from .pdf_merger import (
    check_part_artifacts,
    merge_book_pdf,
    merge_part_pdfs,
    stamp_running_heads,
)

__all__ = [
    'BookDocxConfig',
    'export_book_docx',
    'PaginationEngine',
    'WeasyPrintEngine',
    'RemotePrintEngine',
    'create_pagination_engine',
    'CanvasBookRenderer',
    'CanvasLayoutConfig',
    'check_part_artifacts',
    'merge_book_pdf',
    'merge_part_pdfs',
    'stamp_running_heads',
]
