#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
FastAPI Web Server - REST API for AI Bookmaker.

This module provides the REST API for book generation and publishing:
- Outline and full-book generation (rate limited)
- Book and part listing
- HTML preview (full book or one part)
- Per-part PDF rendering, merge and publish
- Downloads (final PDF, DOCX, canvas PDF)
- Raw HTML-to-PDF rendering

Usage:
    # Start server
    uvicorn api.main:app --host 0.0.0.0 --port 8000

    # Or run directly
    python -m api.main

API Documentation:
    - OpenAPI docs: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc

Key Endpoints:
    GET /api/providers - Generation providers and their models
    POST /api/books/outline - Propose a book outline
    POST /api/books - Generate a complete book
    GET /api/books/{book_id}/preview - Full-book HTML preview
    POST /api/books/{book_id}/publish - Render parts and merge final PDF
    GET /api/books/{book_id}/download/{fmt} - Download pdf, docx or canvas-pdf
    POST /api/render/html-to-pdf - Paginate an HTML document

Configuration:
    Environment variables (see config/settings.py):
    - AI_PROVIDER: gemini | openai
    - GEMINI_API_KEY / OPENAI_API_KEY
    - PDF_ENGINE: weasyprint | remote (with PRINT_SERVER_URL)
    - GENERATION_RATE_LIMIT: limit for generation endpoints (default: "10/minute")
"""

import base64
import time
from functools import lru_cache
from pathlib import Path
from typing import Optional, List, Dict, Any

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, FileResponse, JSONResponse, Response
from pydantic import BaseModel, Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

from ai_providers import (
    AIProviderType, BaseAIProvider, create_provider, list_providers, resolve_provider_type,
)
from config.logging_config import get_logger
from config.settings import Settings, get_settings
from core.book.models import BookStatus
from core.errors import (
    BookPipelineError, BookNotFoundError, PartNotFoundError,
    MissingPartArtifactError, PaginationEngineError, GenerationError,
)
from core.generation import BookGenerator, BookRequest, generate_book_structure
from core.pipeline import BookPipeline, RENDERER_HTML
from core.storage import BookRepository, LocalObjectStorage

logger = get_logger(__name__)

VERSION = "1.0.0"


# =============================================================================
# Pydantic Models for API
# =============================================================================

class OutlineRequest(BaseModel):
    """Request model for an outline proposal"""
    mode: str = Field(default="surprise", description="'idea' (develop topic) or 'surprise' (invent one)")
    topic: Optional[str] = Field(default=None, description="Topic to develop in idea mode")
    language: str = Field(default="English", description="Language of the outline")


class BookCreate(BaseModel):
    """Request model for generating a book"""
    title: str = Field(..., min_length=1, description="Working title")
    subtitle: str = Field(default="", description="Working subtitle")
    author: str = Field(default="", description="Author name for cover and copyright")
    niche: str = Field(default="", description="Market niche")
    tone: str = Field(default="", description="Writing tone")
    summary: str = Field(default="", description="What the book is about")
    language: str = Field(default="English", description="Language of the book")
    user_id: Optional[str] = Field(default=None, description="Owner id")


class RenderRequest(BaseModel):
    """Request model for per-part rendering"""
    renderer: str = Field(default=RENDERER_HTML, description="'html' (pagination engine) or 'canvas' (ReportLab)")
    force: bool = Field(default=False, description="Re-render parts whose artifact is current")


class HtmlToPdfRequest(BaseModel):
    """Request model for raw HTML pagination"""
    html: str = Field(..., min_length=1, description="Standalone HTML document")


# =============================================================================
# Dependencies
# =============================================================================

def get_app_settings() -> Settings:
    return get_settings()


@lru_cache()
def _repository_for(database_path: str) -> BookRepository:
    return BookRepository(database_path)


def get_repository(settings: Settings = Depends(get_app_settings)) -> BookRepository:
    return _repository_for(str(settings.database_path))


def get_storage(settings: Settings = Depends(get_app_settings)) -> LocalObjectStorage:
    return LocalObjectStorage(str(settings.storage_dir))


def get_pipeline(
    settings: Settings = Depends(get_app_settings),
    repository: BookRepository = Depends(get_repository),
    storage: LocalObjectStorage = Depends(get_storage),
) -> BookPipeline:
    return BookPipeline(settings, repository, storage)


def get_provider(settings: Settings = Depends(get_app_settings)) -> BaseAIProvider:
    try:
        return create_provider(settings)
    except ValueError as e:
        raise HTTPException(status_code=503, detail=str(e))


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="AI Bookmaker API",
    description="REST API for AI book generation and print-ready publishing",
    version=VERSION
)

# Rate limiting for generation endpoints (GENERATION_RATE_LIMIT)
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def generation_rate_limit() -> str:
    return get_settings().generation_rate_limit


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# =============================================================================
# Error Mapping
# =============================================================================

def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(BookNotFoundError)
@app.exception_handler(PartNotFoundError)
def not_found_handler(request: Request, exc: BookPipelineError):
    return _error_response(404, exc)


@app.exception_handler(MissingPartArtifactError)
def missing_artifact_handler(request: Request, exc: MissingPartArtifactError):
    return _error_response(409, exc)


@app.exception_handler(PaginationEngineError)
@app.exception_handler(GenerationError)
def external_service_handler(request: Request, exc: BookPipelineError):
    logger.error(f"External service failure on {request.url.path}: {exc}")
    return _error_response(502, exc)


@app.exception_handler(BookPipelineError)
def pipeline_error_handler(request: Request, exc: BookPipelineError):
    logger.error(f"Pipeline error on {request.url.path}: {exc}")
    return _error_response(500, exc)


# =============================================================================
# Generation
# =============================================================================

@app.post("/api/books/outline")
@limiter.limit(generation_rate_limit)
async def propose_outline(
    request: Request,
    outline: OutlineRequest,
    provider: BaseAIProvider = Depends(get_provider),
):
    """Propose a title, positioning and chapter outline."""
    try:
        structure = await generate_book_structure(
            provider, mode=outline.mode, topic=outline.topic, language=outline.language
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return structure.to_dict()


@app.post("/api/books", status_code=201)
@limiter.limit(generation_rate_limit)
async def create_book(
    request: Request,
    book_data: BookCreate,
    provider: BaseAIProvider = Depends(get_provider),
    repository: BookRepository = Depends(get_repository),
):
    """
    Generate a complete book

    Creates the book record, asks the AI provider for the whole manuscript
    and stores the parts. The book ends in content_ready.
    """
    generator = BookGenerator(provider, repository)
    book = await generator.generate(BookRequest(**book_data.model_dump()))
    return book.to_dict()


# =============================================================================
# Books
# =============================================================================

@app.get("/api/books")
def list_books(
    user_id: Optional[str] = None,
    limit: int = 50,
    repository: BookRepository = Depends(get_repository),
) -> List[Dict[str, Any]]:
    """List books, most recent first"""
    return [book.to_dict() for book in repository.list_books(user_id=user_id, limit=limit)]


@app.get("/api/books/{book_id}")
def get_book(book_id: str, repository: BookRepository = Depends(get_repository)):
    """Get book details"""
    return repository.require_book(book_id).to_dict()


@app.get("/api/books/{book_id}/parts")
def list_parts(book_id: str, repository: BookRepository = Depends(get_repository)):
    """Parts of a book in reading order"""
    repository.require_book(book_id)
    return [part.to_dict() for part in repository.list_parts(book_id)]


# =============================================================================
# Preview
# =============================================================================

@app.get("/api/books/{book_id}/preview", response_class=HTMLResponse)
def preview_book(book_id: str, pipeline: BookPipeline = Depends(get_pipeline)):
    """Full-book HTML preview with running heads"""
    return HTMLResponse(pipeline.preview_html(book_id))


@app.get("/api/books/{book_id}/parts/{part_index}/html", response_class=HTMLResponse)
def preview_part(book_id: str, part_index: int, pipeline: BookPipeline = Depends(get_pipeline)):
    """Standalone HTML document for one part"""
    return HTMLResponse(pipeline.part_html(book_id, part_index))


# =============================================================================
# Rendering & Publishing
# =============================================================================

def _check_renderer(renderer: str) -> None:
    if renderer not in ("html", "canvas"):
        raise HTTPException(status_code=400, detail=f"Unknown renderer: {renderer}")


@app.post("/api/books/{book_id}/parts/render")
def render_parts(
    book_id: str,
    render: Optional[RenderRequest] = None,
    pipeline: BookPipeline = Depends(get_pipeline),
):
    """Render every part to its own PDF"""
    render = render or RenderRequest()
    _check_renderer(render.renderer)
    parts = pipeline.render_parts(book_id, renderer=render.renderer, force=render.force)
    return {
        "book_id": book_id,
        "renderer": render.renderer,
        "parts": [part.to_dict() for part in parts],
    }


@app.post("/api/books/{book_id}/merge")
def merge_book(book_id: str, pipeline: BookPipeline = Depends(get_pipeline)):
    """Merge rendered parts into the final, stamped PDF"""
    final_path = pipeline.merge(book_id)
    return {"book_id": book_id, "status": BookStatus.READY.value, "pdf_final_url": final_path}


@app.post("/api/books/{book_id}/publish")
def publish_book(
    book_id: str,
    render: Optional[RenderRequest] = None,
    pipeline: BookPipeline = Depends(get_pipeline),
):
    """Render all parts and merge them"""
    render = render or RenderRequest()
    _check_renderer(render.renderer)
    final_path = pipeline.publish(book_id, renderer=render.renderer, force=render.force)
    return {"book_id": book_id, "status": BookStatus.READY.value, "pdf_final_url": final_path}


@app.get("/api/books/{book_id}/download/{fmt}")
def download_book(book_id: str, fmt: str, pipeline: BookPipeline = Depends(get_pipeline)):
    """
    Download a rendition of the book

    Args:
        book_id: Book ID
        fmt: pdf (published final PDF), docx or canvas-pdf

    Returns:
        File or PDF bytes
    """
    book = pipeline.repository.require_book(book_id)
    filename = book.title or book_id

    if fmt == "pdf":
        if not book.pdf_final_url or not pipeline.storage.exists(book.pdf_final_url):
            raise HTTPException(
                status_code=409,
                detail=f"Book '{book_id}' has no final PDF yet (status: {book.status.value}). Publish it first."
            )
        return FileResponse(
            pipeline.storage.local_path(book.pdf_final_url),
            media_type="application/pdf",
            filename=f"{filename}.pdf",
        )

    if fmt == "docx":
        path = pipeline.export_docx(book_id)
        return FileResponse(
            pipeline.storage.local_path(path),
            media_type="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            filename=f"{filename}.docx",
        )

    if fmt == "canvas-pdf":
        pdf = pipeline.render_canvas_pdf(book_id)
        return Response(
            content=pdf,
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{book_id}.pdf"'},
        )

    raise HTTPException(status_code=400, detail=f"Unsupported format: {fmt}. Use pdf, docx or canvas-pdf")


@app.post("/api/render/html-to-pdf")
def html_to_pdf(payload: HtmlToPdfRequest, pipeline: BookPipeline = Depends(get_pipeline)):
    """Paginate a standalone HTML document with the configured engine"""
    pdf = pipeline.engine.render(payload.html)
    return {"pdfBase64": base64.b64encode(pdf).decode("ascii")}


# =============================================================================
# Providers
# =============================================================================

@app.get("/api/providers")
def get_providers(settings: Settings = Depends(get_app_settings)):
    """
    List the generation providers.

    Each entry carries its models, the default one, the environment variable
    holding its key and whether that key is configured.
    """
    current = resolve_provider_type(settings.ai_provider)
    keys = {
        AIProviderType.GEMINI: settings.gemini_api_key,
        AIProviderType.OPENAI: settings.openai_api_key,
    }
    return {
        "current": current.value,
        "providers": [
            {
                "id": info.type.value,
                "name": info.name,
                "description": info.description,
                "models": [
                    {"id": mid, "name": mname, "recommended": mid == info.default_model}
                    for mid, mname in info.models.items()
                ],
                "env_key": info.env_key,
                "configured": bool(keys.get(info.type)),
            }
            for info in list_providers()
        ],
    }


# =============================================================================
# Health Check
# =============================================================================

@app.get("/health")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "version": VERSION,
        "timestamp": time.time()
    }


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info("Starting AI Bookmaker API Server...")
    logger.info(f"API Documentation: http://localhost:{settings.api_port}/docs")

    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level="info")
