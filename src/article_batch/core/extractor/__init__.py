"""Extractor package: newspaper4k-backed article extraction.

This package provides the ArticleExtractor used by the batch scheduler and the
registry of custom, site-specific extractors that can be added at runtime.

Configuration:
    The extractor uses the following settings from Settings:

    - EXTRACTION_TIMEOUT: Maximum time for one extraction (default: 30 seconds)
    - EXTRACTION_MAX_RETRIES: Retry attempts for timeouts/network errors (default: 2)
    - EXTRACTION_RETRY_BASE_DELAY: Base delay for exponential backoff (default: 1.0s)
    - EXTRACTION_RETRY_MULTIPLIER: Backoff multiplier (default: 2.0)
    - NEWSPAPER_LANGUAGE: Language setting for newspaper4k (default: "en")
    - USER_AGENT: User-Agent header unless overridden per call
"""

from .article import ArticleExtractor
from .registry import CustomExtractor, ExtractorRegistry, load_custom_extractors

__all__ = ["ArticleExtractor", "CustomExtractor", "ExtractorRegistry", "load_custom_extractors"]
