"""Pytest configuration and shared fixtures."""

import os

# Must be set before app.config is imported anywhere
os.environ["ENVIRONMENT"] = "test"

from pathlib import Path

import httpx
import pytest

from app.scrapers.adapters.ollama import OllamaLibraryAdapter
from app.scrapers.base import ModelEntry, ModelVersion
from app.services.cache_service import CacheService, reset_cache_service

FIXTURES_DIR = Path(__file__).parent / "fixtures"
BASE_URL = "https://ollama.test"


def load_fixture(name: str) -> str:
    """Read an HTML fixture from tests/fixtures."""
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture(autouse=True)
def fresh_global_cache():
    """Give every test its own global cache instance."""
    reset_cache_service()
    yield
    reset_cache_service()


@pytest.fixture
def cache() -> CacheService:
    return CacheService(log_buffer_size=50)


@pytest.fixture
def search_html() -> str:
    return load_fixture("search.html")


@pytest.fixture
def detail_html() -> str:
    return load_fixture("model_detail.html")


@pytest.fixture
def site_handler(search_html, detail_html):
    """Mock ollama.com: the listing page, one detail page, 404 for the rest."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/search":
            return httpx.Response(200, text=search_html)
        if request.url.path == "/library/llama3.2":
            return httpx.Response(200, text=detail_html)
        return httpx.Response(404, text="not found")

    return handler


@pytest.fixture
def make_adapter():
    """Build an OllamaLibraryAdapter that talks to a mock transport."""

    def _make(handler) -> OllamaLibraryAdapter:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return OllamaLibraryAdapter(base_url=BASE_URL, client=client)

    return _make


@pytest.fixture
def sample_models():
    """A small catalog covering sizes, contexts and capabilities."""
    return [
        ModelEntry(
            name="llama3.2",
            url=f"{BASE_URL}/library/llama3.2",
            description="Meta's Llama 3.2 goes small with 1B and 3B models.",
            capabilities=["tools"],
            pulls="20.1M",
            tags="63",
            updated="10 months ago",
            versions=[
                ModelVersion(name="llama3.2:latest", size="2.0GB", context="128K", input="Text", is_latest=True),
                ModelVersion(name="llama3.2:1b", size="1.3GB", context="128K", input="Text"),
            ],
        ),
        ModelEntry(
            name="llava",
            url=f"{BASE_URL}/library/llava",
            description="LLaVA is a novel end-to-end trained large multimodal model.",
            capabilities=["vision"],
            versions=[
                ModelVersion(name="llava:7b", size="4.7GB", context="32K", input="Text, Image"),
                ModelVersion(name="llava:34b", size="20GB", context="4K", input="Text, Image"),
            ],
        ),
        ModelEntry(
            name="nomic-embed-text",
            url=f"{BASE_URL}/library/nomic-embed-text",
            description="A high-performing open embedding model.",
            capabilities=["embedding"],
            versions=[
                ModelVersion(name="nomic-embed-text:v1.5", size="274MB", context="2K", input="Text"),
            ],
        ),
        ModelEntry(
            name="Alfred",
            url=f"{BASE_URL}/library/alfred",
            description="A robust conversational model.",
        ),
    ]
