"""Article extraction module using newspaper4k.

This module provides the ArticleExtractor class that wraps newspaper4k with
timeout handling, retry logic, structured logging and the per-call options of
the command line: content format, request headers, ``extend`` selectors and
runtime-registered custom extractors.

Key Features:
- Asynchronous extraction; newspaper4k runs in a worker thread
- Exponential backoff retry for timeouts and network failures
- Content rendered as HTML, Markdown (html2text) or plain text
- Extra fields pulled from the page with CSS selectors (BeautifulSoup)
- Site-specific selectors from the custom extractor registry

Example:
    ```python
    import asyncio
    from article_batch.shared.config import get_settings
    from article_batch.core.extractor import ArticleExtractor
    from article_batch.core.models import ContentType, ExtractionOptions

    async def extract_article_example():
        extractor = ArticleExtractor(settings=get_settings())
        options = ExtractionOptions(
            content_type=ContentType.MARKDOWN,
            extend={"comment_count": ".comments .count"},
        )
        result = await extractor.extract("https://example.com/news/article", options)
        print(result.title)
        print(result.fields["comment_count"])
        print(result.content[:100])

    asyncio.run(extract_article_example())
    ```

Error Handling:
- ExtractionTimeoutError: the download/parse exceeded EXTRACTION_TIMEOUT (retried)
- ExtractionNetworkError: the page could not be downloaded (retried)
- ExtractionHTTPError: the server answered 4xx other than 408/429 (not retried)
- ExtractionParsingError: the page has no usable article content (not retried)

Retry Logic:
- Max retries: EXTRACTION_MAX_RETRIES (default 2)
- Delay before retry n: EXTRACTION_RETRY_BASE_DELAY * EXTRACTION_RETRY_MULTIPLIER ** n
"""

import asyncio
import copy
import re
import textwrap
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse
from uuid import uuid4

import html2text
import structlog
from bs4 import BeautifulSoup
from dateutil.parser import parse as parse_date
from newspaper import Article, Config
from newspaper.article import ArticleDownloadState

from article_batch.core.extractor.registry import CustomExtractor, ExtractorRegistry
from article_batch.core.models import ArticleResult, ContentType, ExtractionOptions
from article_batch.shared.async_utils import run_in_executor_with_timeout
from article_batch.shared.config import Settings
from article_batch.shared.exceptions import (
    ExtractionError,
    ExtractionHTTPError,
    ExtractionNetworkError,
    ExtractionParsingError,
    ExtractionTimeoutError,
)

EXCERPT_LENGTH = 200

_NETWORK_ERROR_HINTS = ("network", "connection", "download", "timed out", "resolve", "ssl")

# Client errors that may succeed on a later attempt
RETRYABLE_CLIENT_STATUS_CODES = frozenset({408, 429})

_STATUS_CODE_PATTERN = re.compile(r"status code:?\s*(\d{3})", re.IGNORECASE)


class ArticleExtractor:
    """Wrapper for newspaper4k with retry logic and command-line options."""

    def __init__(
        self,
        settings: Settings,
        registry: Optional[ExtractorRegistry] = None,
        logger=None
    ):
        """Initialize the ArticleExtractor.

        Args:
            settings: Application settings instance
            registry: Custom extractors consulted before the generic extraction
            logger: structlog logger; defaults to this module's logger
        """
        self.settings = settings
        self.registry = registry or ExtractorRegistry()
        self.logger = logger or structlog.get_logger(__name__)

    def _build_newspaper_config(self, options: ExtractionOptions) -> Config:
        """Configure newspaper4k for one extraction call."""
        config = Config()
        config.keep_article_html = True
        config.language = self.settings.NEWSPAPER_LANGUAGE
        config.memoize_articles = False  # Disable caching for fresh data
        config.fetch_images = False
        config.http_success_only = True
        config.request_timeout = self.settings.EXTRACTION_TIMEOUT
        config.number_threads = 1
        config.headers = {"User-Agent": self.settings.USER_AGENT, **options.headers}
        return config

    async def extract(self, url: str, options: ExtractionOptions) -> ArticleResult:
        """Extract an article from ``url``.

        Args:
            url: Article URL to extract
            options: Per-call extraction options

        Returns:
            The extracted article

        Raises:
            ExtractionError: When extraction fails after all retries
        """
        correlation_id = str(uuid4())
        self.logger.debug("Starting article extraction", correlation_id=correlation_id, url=url)
        return await self._extract_with_retry(url, options, correlation_id)

    async def _extract_with_retry(
        self,
        url: str,
        options: ExtractionOptions,
        correlation_id: str
    ) -> ArticleResult:
        """Execute extraction with exponential backoff retry logic."""
        max_retries = self.settings.EXTRACTION_MAX_RETRIES
        base_delay = self.settings.EXTRACTION_RETRY_BASE_DELAY
        multiplier = self.settings.EXTRACTION_RETRY_MULTIPLIER

        for attempt in range(max_retries + 1):
            try:
                return await self._extract_single_article(url, options, correlation_id)

            except ExtractionError as e:
                if not e.retryable:
                    self.logger.debug(
                        "Non-retryable extraction error, not retrying",
                        correlation_id=correlation_id,
                        url=url,
                        error_code=e.code.value,
                        error=e.message
                    )
                    raise
                if attempt >= max_retries:
                    raise
                delay = base_delay * (multiplier ** attempt)
                self.logger.warning(
                    "Retryable extraction error, retrying",
                    correlation_id=correlation_id,
                    url=url,
                    attempt=attempt + 1,
                    max_retries=max_retries,
                    delay=delay,
                    error=e.message
                )
                await asyncio.sleep(delay)

    async def _extract_single_article(
        self,
        url: str,
        options: ExtractionOptions,
        correlation_id: str
    ) -> ArticleResult:
        """Download, parse and build the result for a single URL."""
        timeout = self.settings.EXTRACTION_TIMEOUT
        try:
            result = await run_in_executor_with_timeout(
                self._extract_sync, url, options, timeout=timeout
            )
        except asyncio.TimeoutError:
            raise ExtractionTimeoutError(url=url, timeout=timeout)

        self.logger.info(
            "Article extraction successful",
            correlation_id=correlation_id,
            url=url,
            title_length=len(result.title or ""),
            content_length=len(result.content)
        )
        return result

    def _extract_sync(self, url: str, options: ExtractionOptions) -> ArticleResult:
        article = Article(url, config=self._build_newspaper_config(options))
        self._download_and_parse(article, url)
        custom = self.registry.match(url)
        return self._build_result(article, url, options, custom)

    def _download_and_parse(self, article: Article, url: str) -> None:
        """Run newspaper4k's download and parse steps, classifying failures.

        newspaper4k does not raise from ``download()``; a failed request is
        recorded on ``download_state`` and ``download_exception_msg``.

        Raises:
            ExtractionHTTPError: When the server answers with a permanent 4xx status
            ExtractionNetworkError: When the download fails otherwise
            ExtractionParsingError: When parsing fails
        """
        article.download()
        if article.download_state == ArticleDownloadState.FAILED_RESPONSE:
            reason = article.download_exception_msg or "download failed"
            status_code = parse_status_code(reason)
            if status_code is not None and is_permanent_client_error(status_code):
                raise ExtractionHTTPError(url=url, status_code=status_code, reason=reason)
            raise ExtractionNetworkError(url=url, reason=reason)

        try:
            article.parse()
        except Exception as e:
            if any(hint in str(e).lower() for hint in _NETWORK_ERROR_HINTS):
                raise ExtractionNetworkError(url=url, reason=str(e))
            raise ExtractionParsingError(url=url, reason=str(e))

    def _build_result(
        self,
        article: Article,
        url: str,
        options: ExtractionOptions,
        custom: Optional[CustomExtractor]
    ) -> ArticleResult:
        """Assemble an ArticleResult from a parsed newspaper4k Article.

        Raises:
            ExtractionParsingError: If no article content was found
        """
        soup = BeautifulSoup(article.html or "", "html.parser")

        content_html, text = self._extract_body(article, soup, custom)
        content = self._render_content(content_html, text, options.content_type, url)
        if not content:
            raise ExtractionParsingError(url=url)

        title = self._first_text(soup, custom.title if custom else []) or self._extract_title(article)
        excerpt = (
            self._first_text(soup, custom.excerpt if custom else [])
            or (article.meta_description or "").strip()
            or self._make_excerpt(text)
        )

        fields: Dict[str, Any] = {
            "author": self._extract_author(article, soup, custom),
            "date_published": self._extract_publish_date(article, soup, custom),
            "lead_image_url": self._extract_image_url(article, soup, custom),
            "word_count": len(text.split()),
            "domain": urlparse(url).hostname,
            "direction": self._extract_direction(soup),
        }

        extend = dict(custom.extend) if custom else {}
        extend.update(options.extend)
        for name, selector in extend.items():
            fields[name] = select_value(soup, selector)
        for name, selector in options.extend_list.items():
            fields[name] = select_values(soup, selector)

        return ArticleResult(
            title=title,
            url=url,
            content=content,
            excerpt=excerpt or None,
            fields=fields
        )

    def _extract_body(
        self,
        article: Article,
        soup: BeautifulSoup,
        custom: Optional[CustomExtractor]
    ) -> Tuple[str, str]:
        """Return (content html, content text) for the article body."""
        node = None
        if custom:
            for selector in custom.content:
                node = soup.select_one(selector)
                if node is not None:
                    break

        if node is None:
            if not (custom and custom.clean):
                return article.article_html or "", (article.text or "").strip()
            node = BeautifulSoup(article.article_html or "", "html.parser")
        else:
            # Cleaning must not remove elements that extend selectors read later
            node = copy.copy(node)

        if custom:
            for selector in custom.clean:
                for element in node.select(selector):
                    element.decompose()

        return str(node), node.get_text("\n", strip=True)

    def _render_content(self, content_html: str, text: str, content_type: ContentType, url: str) -> str:
        if content_type == ContentType.HTML:
            return content_html.strip()
        if content_type == ContentType.MARKDOWN:
            if not content_html.strip():
                return text
            converter = html2text.HTML2Text(baseurl=url)
            converter.ignore_links = False
            converter.ignore_images = False
            converter.body_width = 0
            converter.unicode_snob = True
            return converter.handle(content_html).strip()
        return text

    def _first_text(self, soup: BeautifulSoup, selectors: List[str]) -> Optional[str]:
        for selector in selectors:
            value = select_value(soup, selector)
            if value:
                return value
        return None

    def _extract_title(self, article: Article) -> Optional[str]:
        """Extract title with fallback to the meta title."""
        if article.title and article.title.strip():
            return article.title.strip()

        meta_data = getattr(article, 'meta_data', None) or {}
        meta_title = str(meta_data.get('title', '') or '').strip()
        return meta_title or None

    def _make_excerpt(self, text: str) -> Optional[str]:
        text = " ".join(text.split())
        if not text:
            return None
        return textwrap.shorten(text, width=EXCERPT_LENGTH, placeholder="...")

    def _extract_author(
        self,
        article: Article,
        soup: BeautifulSoup,
        custom: Optional[CustomExtractor]
    ) -> Optional[str]:
        """Extract author name(s), comma-separated."""
        if custom:
            author = self._first_text(soup, custom.author)
            if author:
                return author

        authors = article.authors
        if isinstance(authors, str):
            return authors.strip() or None
        names = [author.strip() for author in authors or [] if author and author.strip()]
        return ", ".join(names) if names else None

    def _extract_publish_date(
        self,
        article: Article,
        soup: BeautifulSoup,
        custom: Optional[CustomExtractor]
    ) -> Optional[str]:
        """Extract the publication date as an ISO 8601 string."""
        raw: Any = None
        if custom:
            for selector in custom.date_published:
                element = soup.select_one(selector)
                if element is not None:
                    raw = element.get("datetime") or element.get("content") or element.get_text(strip=True)
                    if raw:
                        break
        if not raw:
            raw = article.publish_date
        return normalize_date(raw)

    def _extract_image_url(
        self,
        article: Article,
        soup: BeautifulSoup,
        custom: Optional[CustomExtractor]
    ) -> Optional[str]:
        """Extract the lead image URL."""
        if custom:
            for selector in custom.lead_image_url:
                element = soup.select_one(selector)
                if element is not None:
                    value = element.get("src") or element.get("content")
                    if value:
                        return str(value).strip()

        image_url = str(article.top_image or "").strip()
        if image_url.startswith(("http://", "https://")):
            return image_url
        return None

    def _extract_direction(self, soup: BeautifulSoup) -> str:
        html_tag = soup.find("html")
        direction = html_tag.get("dir") if html_tag is not None else None
        return str(direction).lower() if direction else "ltr"


def normalize_date(value: Any) -> Optional[str]:
    """Normalize a datetime or date string to ISO 8601, or None."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    try:
        return parse_date(str(value)).isoformat()
    except (ValueError, OverflowError):
        return None


def _split_selector(selector: str) -> Tuple[str, Optional[str]]:
    """Split 'css selector|attr' into its selector and attribute parts."""
    css, sep, attr = selector.rpartition("|")
    if sep and css.strip() and attr.strip() and "]" not in attr:
        return css.strip(), attr.strip()
    return selector.strip(), None


def _element_value(element, attr: Optional[str]) -> Optional[str]:
    if attr:
        value = element.get(attr)
        if isinstance(value, list):
            value = " ".join(value)
        return str(value).strip() if value else None
    return element.get_text(" ", strip=True) or None


def select_value(soup: BeautifulSoup, selector: str) -> Optional[str]:
    """Return the text (or attribute) of the first element matching ``selector``."""
    css, attr = _split_selector(selector)
    element = soup.select_one(css)
    if element is None:
        return None
    return _element_value(element, attr)


def select_values(soup: BeautifulSoup, selector: str) -> List[str]:
    """Return the text (or attribute) of every element matching ``selector``."""
    css, attr = _split_selector(selector)
    values = (_element_value(element, attr) for element in soup.select(css))
    return [value for value in values if value]


def parse_status_code(message: str) -> Optional[int]:
    """Pull the HTTP status code out of a newspaper4k download error message."""
    match = _STATUS_CODE_PATTERN.search(message or "")
    return int(match.group(1)) if match else None


def is_permanent_client_error(status_code: int) -> bool:
    return 400 <= status_code < 500 and status_code not in RETRYABLE_CLIENT_STATUS_CODES
