import asyncio
from typing import Dict, List, Optional

import pytest
import structlog

from article_batch.core.models import ArticleResult, ExtractionOptions
from article_batch.shared.config import Settings, get_settings


class StubExtractor:
    """In-memory content extractor recording calls and concurrency."""

    def __init__(
        self,
        results: Optional[Dict[str, ArticleResult]] = None,
        failures: Optional[Dict[str, Exception]] = None,
        delays: Optional[Dict[str, float]] = None
    ):
        self.results = results or {}
        self.failures = failures or {}
        self.delays = delays or {}
        self.calls: List[str] = []
        self.completed: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def extract(self, url: str, options: ExtractionOptions) -> ArticleResult:
        self.calls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(url, 0.001))
            if url in self.failures:
                raise self.failures[url]
            if url in self.results:
                return self.results[url]
            return ArticleResult(title=f"Article {len(self.calls)}", url=url, content=f"Content of {url}")
        finally:
            self.in_flight -= 1
            self.completed.append(url)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep settings independent of the developer's environment."""
    monkeypatch.setenv("SHOW_PROGRESS", "false")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    structlog.reset_defaults()


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings without retry delays."""
    return Settings(
        LOG_LEVEL="DEBUG",
        EXTRACTION_TIMEOUT=5,
        EXTRACTION_MAX_RETRIES=2,
        EXTRACTION_RETRY_BASE_DELAY=0.0,
        EXTRACTION_RETRY_MULTIPLIER=1.0,
        SHOW_PROGRESS=False
    )


@pytest.fixture
def stub_extractor_class():
    return StubExtractor


@pytest.fixture
def sample_urls() -> List[str]:
    return [
        "https://example.com/news/first",
        "https://example.com/news/second",
        "https://example.com/news/third",
    ]


@pytest.fixture
def sample_result() -> ArticleResult:
    """Sample extracted article for testing."""
    return ArticleResult(
        title="Test Article Title",
        url="https://example.com/test-article",
        content="This is test article content.",
        excerpt="This is test article content.",
        fields={
            "author": "Test Author",
            "date_published": "2024-03-01T10:00:00",
            "lead_image_url": None,
            "word_count": 5,
            "domain": "example.com",
            "direction": "ltr",
        }
    )
