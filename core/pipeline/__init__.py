"""
Pipeline Module - rendering, merge and export orchestration for stored books.
"""

from .book_pipeline import BookPipeline, RENDERER_HTML, RENDERER_CANVAS

__all__ = [
    'BookPipeline',
    'RENDERER_HTML',
    'RENDERER_CANVAS',
]
