#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Book Rendering CLI - render a book JSON file offline

The input file holds the book record and its parts:

    {
      "book": {"title": "...", "subtitle": "...", "author": "..."},
      "parts": [
        {"part_index": 1, "part_type": "cover", "content": {...}},
        ...
      ]
    }

Part content may be an object or an already-serialized JSON string.

Usage:
    python bookmaker_cli.py book.json --format html
    python bookmaker_cli.py book.json --format pdf --output book.pdf
    python bookmaker_cli.py book.json --format canvas-pdf
    python bookmaker_cli.py book.json --format docx
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Tuple

# Add project to path
sys.path.insert(0, str(Path(__file__).parent))

from dotenv import load_dotenv

from config.logging_config import get_logger
from config.settings import get_settings
from core.book.models import Book, BookPart
from core.errors import BookPipelineError
from core.export.docx_book_exporter import export_book_docx
from core.export.pagination_engine import create_pagination_engine
from core.export.pdf_canvas_renderer import CanvasBookRenderer
from core.rendering.assembler import assemble_full_html

logger = get_logger(__name__)

FORMATS = {
    "html": ".html",
    "pdf": ".pdf",
    "canvas-pdf": ".pdf",
    "docx": ".docx",
}


def load_book_file(path: Path) -> Tuple[Book, List[BookPart]]:
    """Read a book JSON file into a Book and its parts."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not isinstance(data.get("book"), dict):
        raise ValueError("Book file must be an object with a 'book' object")

    record = data["book"]
    book = Book(
        id=str(record.get("id") or path.stem),
        title=record.get("title", ""),
        subtitle=record.get("subtitle", ""),
        author=record.get("author", ""),
        language=record.get("language", ""),
    )

    parts = []
    for position, item in enumerate(data.get("parts") or [], start=1):
        content = item.get("content", "")
        if not isinstance(content, str):
            content = json.dumps(content, ensure_ascii=False)
        parts.append(BookPart(
            book_id=book.id,
            part_index=int(item.get("part_index", position)),
            part_type=item.get("part_type", ""),
            content=content,
        ))
    return book, parts


def get_default_output(input_path: Path, fmt: str) -> Path:
    """Output file next to the input, named after the format."""
    suffix = FORMATS[fmt]
    if fmt == "canvas-pdf":
        return input_path.with_name(f"{input_path.stem}_canvas{suffix}")
    return input_path.with_suffix(suffix)


def render(book: Book, parts: List[BookPart], fmt: str) -> bytes:
    """Render the book in the requested format."""
    settings = get_settings()
    if fmt == "html":
        return assemble_full_html(book, parts, settings).encode("utf-8")
    if fmt == "pdf":
        engine = create_pagination_engine(settings)
        return engine.render(assemble_full_html(book, parts, settings))
    if fmt == "canvas-pdf":
        return CanvasBookRenderer(settings).render_book(book, parts)
    return export_book_docx(book, parts, settings=settings)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Render a book JSON file to HTML, PDF or DOCX",
        epilog="""
Examples:
  python bookmaker_cli.py book.json
  python bookmaker_cli.py book.json --format docx --output out/book.docx
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        'input',
        help='Book JSON file'
    )

    parser.add_argument(
        '--format', '-f',
        choices=sorted(FORMATS),
        default='html',
        help='Output format (default: html)'
    )

    parser.add_argument(
        '--output', '-o',
        help='Output file (default: next to the input)'
    )

    args = parser.parse_args(argv)

    load_dotenv()

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"❌ Input file not found: {input_path}")
        return 1

    try:
        book, parts = load_book_file(input_path)
    except ValueError as e:
        print(f"❌ Invalid book file: {e}")
        return 1

    output_path = Path(args.output) if args.output else get_default_output(input_path, args.format)

    print(f"📖 {book.title or book.id}: {len(parts)} parts -> {args.format}")

    try:
        data = render(book, parts, args.format)
    except BookPipelineError as e:
        logger.error(f"Rendering failed: {e}")
        print(f"❌ Rendering failed: {e}")
        return 1

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)
    print(f"✅ Written {len(data):,} bytes to {output_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
