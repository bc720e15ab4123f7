"""
Storage Module

SQLite persistence for books and parts, and object storage for rendered
artifacts.
"""

from .book_repository import BookRepository
from .object_storage import LocalObjectStorage

__all__ = [
    'BookRepository',
    'LocalObjectStorage',
]
