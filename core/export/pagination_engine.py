"""
Pagination engines - styled HTML to paginated PDF.

The engine is a black box: it receives one standalone HTML document (from
assemble_full_html / assemble_part_html) and returns PDF bytes. Page size
and margins travel inside the document's CSS.

Engines:
    WeasyPrintEngine   in-process WeasyPrint
    RemotePrintEngine  print server over HTTP: POST {"html": ...} and
                       receive {"pdfBase64": ...} or {"error": ...}
"""

import base64
from abc import ABC, abstractmethod
from typing import Optional

import requests

from config.logging_config import get_logger
from config.settings import Settings
from core.errors import PaginationEngineError

logger = get_logger(__name__)


class PaginationEngine(ABC):
    """Turns one standalone HTML document into PDF bytes."""

    name = "engine"

    @abstractmethod
    def render(self, html: str) -> bytes:
        """
        Paginate a document.

        Raises:
            PaginationEngineError: If the engine cannot produce a PDF
        """
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


class WeasyPrintEngine(PaginationEngine):
    """CSS paged-media rendering with WeasyPrint."""

    name = "weasyprint"

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = base_url

    def render(self, html: str) -> bytes:
        if not html or not isinstance(html, str):
            raise PaginationEngineError("Missing or invalid HTML document")

        # WeasyPrint needs system Pango libraries; import on first use
        from weasyprint import HTML

        try:
            pdf = HTML(string=html, base_url=self.base_url, encoding="utf-8").write_pdf()
        except Exception as e:
            logger.error(f"WeasyPrint failed: {e}")
            raise PaginationEngineError(f"WeasyPrint failed: {e}") from e

        logger.debug(f"WeasyPrint produced {len(pdf):,} bytes")
        return pdf


class RemotePrintEngine(PaginationEngine):
    """Delegates pagination to a print server."""

    name = "remote"

    def __init__(self, url: str, timeout: int = 120, session: Optional[requests.Session] = None):
        if not url:
            raise ValueError("print server URL is required for the remote engine")
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def render(self, html: str) -> bytes:
        if not html or not isinstance(html, str):
            raise PaginationEngineError("Missing or invalid HTML document")

        try:
            response = self.session.post(self.url, json={"html": html}, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Print server request failed: {e}")
            raise PaginationEngineError(f"Print server request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.status_code != 200 or "pdfBase64" not in payload:
            message = payload.get("error") or f"HTTP {response.status_code}"
            logger.error(f"Print server error: {message}")
            raise PaginationEngineError(f"Print server error: {message}")

        try:
            return base64.b64decode(payload["pdfBase64"])
        except (TypeError, ValueError) as e:
            raise PaginationEngineError(f"Print server returned invalid PDF payload: {e}") from e


def create_pagination_engine(settings: Settings) -> PaginationEngine:
    """Engine selected by settings.pdf_engine."""
    if settings.pdf_engine == "remote":
        return RemotePrintEngine(settings.print_server_url, timeout=settings.print_server_timeout)
    if settings.pdf_engine == "weasyprint":
        return WeasyPrintEngine()
    raise ValueError(f"Unsupported PDF engine: {settings.pdf_engine}")
