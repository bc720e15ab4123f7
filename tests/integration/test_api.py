"""
Integration tests for API endpoints (api/main.py)
"""
import base64

import pytest
from fastapi.testclient import TestClient

from api.main import app, get_app_settings, get_pipeline, get_provider, get_repository
from core.pipeline import BookPipeline


@pytest.fixture
def client(settings, repository, pipeline, fake_provider):
    """Test client with temp storage, a fake engine and a fake provider."""
    app.dependency_overrides[get_app_settings] = lambda: settings
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_provider] = lambda: fake_provider
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestAPIBasics:

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestProviderEndpoints:

    def test_list_providers(self, client, settings):
        settings.openai_api_key = ""

        response = client.get("/api/providers")

        assert response.status_code == 200
        data = response.json()
        assert data["current"] == "gemini"
        providers = {p["id"]: p for p in data["providers"]}
        assert set(providers) == {"gemini", "openai"}
        assert providers["gemini"]["configured"] is True
        assert providers["openai"]["configured"] is False
        assert providers["openai"]["env_key"] == "OPENAI_API_KEY"
        recommended = [m["id"] for m in providers["gemini"]["models"] if m["recommended"]]
        assert recommended == ["gemini-2.5-flash"]


class TestGenerationEndpoints:

    def test_create_book(self, client, fake_provider):
        response = client.post("/api/books", json={"title": "Focus", "author": "Ana Souza"})

        assert response.status_code == 201
        book = response.json()
        assert book["status"] == "content_ready"
        assert book["title"] == "Deep Focus"
        assert fake_provider.calls == 1

        parts = client.get(f"/api/books/{book['id']}/parts").json()
        assert [part["part_index"] for part in parts] == list(range(1, 10))
        assert parts[0]["part_type"] == "cover"

    def test_create_book_requires_title(self, client):
        response = client.post("/api/books", json={"author": "Ana"})
        assert response.status_code == 422

    def test_provider_failure_is_502(self, client, provider_factory):
        app.dependency_overrides[get_provider] = lambda: provider_factory(error=RuntimeError("quota exceeded"))

        response = client.post("/api/books", json={"title": "Focus"})

        assert response.status_code == 502
        assert "quota exceeded" in response.json()["detail"]

    def test_outline(self, client, provider_factory, outline_json):
        app.dependency_overrides[get_provider] = lambda: provider_factory(outline_json)

        response = client.post("/api/books/outline", json={"mode": "idea", "topic": "money"})

        assert response.status_code == 200
        outline = response.json()
        assert outline["title"] == "Calm Money"
        assert "Chapter 1: Start Here" in outline["structure_text"]

    def test_outline_idea_without_topic(self, client):
        response = client.post("/api/books/outline", json={"mode": "idea"})
        assert response.status_code == 400


class TestBookEndpoints:

    def test_get_book(self, client, stored_book):
        response = client.get(f"/api/books/{stored_book.id}")
        assert response.status_code == 200
        assert response.json()["title"] == "The Quiet Engine"

    def test_list_books(self, client, stored_book):
        response = client.get("/api/books")
        assert response.status_code == 200
        assert [book["id"] for book in response.json()] == [stored_book.id]

    def test_unknown_book_is_404(self, client):
        assert client.get("/api/books/missing").status_code == 404
        assert client.get("/api/books/missing/preview").status_code == 404

    def test_preview(self, client, stored_book):
        response = client.get(f"/api/books/{stored_book.id}/preview")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert response.text.count('class="page-container ') == 7

    def test_part_preview(self, client, stored_book):
        assert client.get(f"/api/books/{stored_book.id}/parts/1/html").status_code == 200
        assert client.get(f"/api/books/{stored_book.id}/parts/99/html").status_code == 404


class TestPublishingEndpoints:

    def test_render_parts(self, client, stored_book):
        response = client.post(f"/api/books/{stored_book.id}/parts/render")
        assert response.status_code == 200
        assert all(part["pdf_url"] for part in response.json()["parts"])

    def test_unknown_renderer_is_400(self, client, stored_book):
        response = client.post(f"/api/books/{stored_book.id}/parts/render", json={"renderer": "svg"})
        assert response.status_code == 400

    def test_merge_before_render_is_409(self, client, stored_book):
        response = client.post(f"/api/books/{stored_book.id}/merge")
        assert response.status_code == 409

    def test_publish_then_download(self, client, stored_book):
        response = client.post(f"/api/books/{stored_book.id}/publish")
        assert response.status_code == 200
        assert response.json() == {
            "book_id": stored_book.id,
            "status": "ready",
            "pdf_final_url": "book-1/final/final.pdf",
        }

        download = client.get(f"/api/books/{stored_book.id}/download/pdf")
        assert download.status_code == 200
        assert download.headers["content-type"] == "application/pdf"
        assert download.content.startswith(b"%PDF")

    def test_download_pdf_before_publish_is_409(self, client, stored_book):
        response = client.get(f"/api/books/{stored_book.id}/download/pdf")
        assert response.status_code == 409

    def test_download_docx(self, client, stored_book):
        response = client.get(f"/api/books/{stored_book.id}/download/docx")
        assert response.status_code == 200
        assert response.content[:2] == b"PK"

    def test_download_canvas_pdf(self, client, stored_book):
        response = client.get(f"/api/books/{stored_book.id}/download/canvas-pdf")
        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")

    def test_download_unknown_format(self, client, stored_book):
        assert client.get(f"/api/books/{stored_book.id}/download/epub").status_code == 400


class TestHtmlToPdf:

    def test_returns_base64_pdf(self, client):
        response = client.post("/api/render/html-to-pdf", json={"html": "<html><body>x</body></html>"})
        assert response.status_code == 200
        assert base64.b64decode(response.json()["pdfBase64"]).startswith(b"%PDF")

    def test_engine_failure_is_502(self, client, settings, repository, storage, engine_factory):
        failing = BookPipeline(settings, repository, storage, engine=engine_factory(fail_times=1))
        app.dependency_overrides[get_pipeline] = lambda: failing

        response = client.post("/api/render/html-to-pdf", json={"html": "<html></html>"})

        assert response.status_code == 502

    def test_missing_html_is_422(self, client):
        assert client.post("/api/render/html-to-pdf", json={}).status_code == 422
