"""
Book Repository - SQLite persistence for books and their parts.

Parts are read back ordered by part_index. Rows written by older or
interrupted runs may hold NULL fields; they are returned as empty values so
the renderers can still show them.
"""

import sqlite3
import uuid
from pathlib import Path
from typing import Optional, List
from datetime import datetime
from contextlib import contextmanager

from config.logging_config import get_logger
from core.book.models import Book, BookPart, BookStatus
from core.errors import BookNotFoundError, StorageError

logger = get_logger(__name__)


class BookRepository:
    """
    SQLite repository for books and book parts.
    """

    def __init__(self, db_path: str = "data/books.db"):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()
        logger.info(f"BookRepository initialized: {self.db_path}")

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(f"Database error: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self):
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS books (
                    id TEXT PRIMARY KEY,
                    user_id TEXT,
                    title TEXT NOT NULL,
                    subtitle TEXT,
                    author TEXT,
                    language TEXT,
                    tone TEXT,
                    niche TEXT,
                    summary TEXT,
                    status TEXT NOT NULL DEFAULT 'generating_content',
                    pdf_final_url TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS book_parts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    book_id TEXT NOT NULL,
                    part_index INTEGER NOT NULL,
                    part_type TEXT NOT NULL,
                    content TEXT,
                    pdf_url TEXT,
                    UNIQUE (book_id, part_index)
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_books_user
                ON books(user_id)
            """)

    # ========== Books ==========

    def create_book(self, book: Book) -> Book:
        """Insert a new book, assigning an id if it has none."""
        if not book.id:
            book.id = str(uuid.uuid4())
        book.updated_at = datetime.now().isoformat()

        with self._get_connection() as conn:
            conn.execute("""
                INSERT INTO books (
                    id, user_id, title, subtitle, author, language, tone,
                    niche, summary, status, pdf_final_url, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                book.id,
                book.user_id,
                book.title,
                book.subtitle,
                book.author,
                book.language,
                book.tone,
                book.niche,
                book.summary,
                book.status.value,
                book.pdf_final_url,
                book.created_at,
                book.updated_at,
            ))

        logger.debug(f"Created book {book.id}: {book.title}")
        return book

    def get_book(self, book_id: str) -> Optional[Book]:
        """Get a book by ID."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM books WHERE id = ?",
                (book_id,)
            ).fetchone()

            if not row:
                return None

            return self._row_to_book(row)

    def require_book(self, book_id: str) -> Book:
        """Get a book by ID or raise BookNotFoundError."""
        book = self.get_book(book_id)
        if book is None:
            raise BookNotFoundError(book_id)
        return book

    def list_books(self, user_id: Optional[str] = None, limit: int = 50) -> List[Book]:
        """Books, most recent first, optionally for one owner."""
        with self._get_connection() as conn:
            if user_id:
                rows = conn.execute("""
                    SELECT * FROM books WHERE user_id = ?
                    ORDER BY created_at DESC LIMIT ?
                """, (user_id, limit)).fetchall()
            else:
                rows = conn.execute("""
                    SELECT * FROM books
                    ORDER BY created_at DESC LIMIT ?
                """, (limit,)).fetchall()

            return [self._row_to_book(row) for row in rows]

    def update_metadata(self, book_id: str, title: str, subtitle: str) -> None:
        """Replace title and subtitle (e.g. with generated, optimized ones)."""
        with self._get_connection() as conn:
            conn.execute("""
                UPDATE books SET title = ?, subtitle = ?, updated_at = ?
                WHERE id = ?
            """, (title, subtitle, datetime.now().isoformat(), book_id))

    def update_status(
        self,
        book_id: str,
        status: BookStatus,
        pdf_final_url: Optional[str] = None
    ) -> None:
        """Set a book's status, and its final PDF locator when given."""
        with self._get_connection() as conn:
            if pdf_final_url is not None:
                conn.execute("""
                    UPDATE books SET status = ?, pdf_final_url = ?, updated_at = ?
                    WHERE id = ?
                """, (status.value, pdf_final_url, datetime.now().isoformat(), book_id))
            else:
                conn.execute("""
                    UPDATE books SET status = ?, updated_at = ?
                    WHERE id = ?
                """, (status.value, datetime.now().isoformat(), book_id))

        logger.info(f"Book {book_id} -> {status.value}")

    # ========== Parts ==========

    def save_parts(self, parts: List[BookPart]) -> None:
        """
        Insert or replace parts by (book_id, part_index).

        Replacing a part clears its rendered PDF locator.
        """
        with self._get_connection() as conn:
            conn.executemany("""
                INSERT INTO book_parts (book_id, part_index, part_type, content, pdf_url)
                VALUES (?, ?, ?, ?, NULL)
                ON CONFLICT(book_id, part_index) DO UPDATE SET
                    part_type = excluded.part_type,
                    content = excluded.content,
                    pdf_url = NULL
            """, [
                (part.book_id, part.part_index, part.part_type, part.content)
                for part in parts
            ])

    def list_parts(self, book_id: str) -> List[BookPart]:
        """All parts of a book ordered by part_index ascending."""
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT * FROM book_parts
                WHERE book_id = ?
                ORDER BY part_index ASC
            """, (book_id,)).fetchall()

            return [self._row_to_part(row) for row in rows]

    def set_part_pdf_url(self, book_id: str, part_index: int, pdf_url: Optional[str]) -> None:
        """Record (or clear) the rendered PDF locator of one part."""
        with self._get_connection() as conn:
            conn.execute("""
                UPDATE book_parts SET pdf_url = ?
                WHERE book_id = ? AND part_index = ?
            """, (pdf_url, book_id, part_index))

    # ========== Row mapping ==========

    def _row_to_book(self, row: sqlite3.Row) -> Book:
        try:
            status = BookStatus(row["status"])
        except ValueError:
            logger.warning(f"Book {row['id']} has unknown status '{row['status']}'")
            status = BookStatus.ERROR

        return Book(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"] or "",
            subtitle=row["subtitle"] or "",
            author=row["author"] or "",
            language=row["language"] or "",
            tone=row["tone"] or "",
            niche=row["niche"] or "",
            summary=row["summary"] or "",
            status=status,
            pdf_final_url=row["pdf_final_url"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _row_to_part(self, row: sqlite3.Row) -> BookPart:
        return BookPart(
            id=row["id"],
            book_id=row["book_id"],
            part_index=row["part_index"],
            part_type=row["part_type"] or "",
            content=row["content"] or "",
            pdf_url=row["pdf_url"],
        )
