"""Turning URL arguments and URL-list files into work items."""

import re
from pathlib import Path
from typing import Iterable, List, Optional

import structlog

from article_batch.core.models import BatchConfig, ExtractionOptions, WorkItem
from article_batch.shared.exceptions import ValidationError

logger = structlog.get_logger(__name__)

DEFAULT_URL_SEPARATOR = r"[\r\n]+"
RECOGNIZED_SCHEMES = ("http://", "https://")


def has_recognized_scheme(url: str) -> bool:
    return url.lower().startswith(RECOGNIZED_SCHEMES)


def split_urls(text: str, separator: str = DEFAULT_URL_SEPARATOR) -> List[str]:
    """Split a URL-list document into URLs.

    Records are separated by ``separator`` (a regular expression). Blank
    records and records that do not start with http:// or https:// are
    discarded; the remaining URLs keep their input order.

    Raises:
        ValidationError: If ``separator`` is not a valid regular expression
    """
    try:
        pattern = re.compile(separator)
    except re.error as e:
        raise ValidationError(
            f"Invalid URL separator {separator!r}: {e}",
            details={"separator": separator}
        )

    urls = []
    for record in pattern.split(text):
        candidate = record.strip()
        if not candidate:
            continue
        if not has_recognized_scheme(candidate):
            logger.debug("Skipping record without http(s) scheme", record=candidate)
            continue
        urls.append(candidate)
    return urls


def read_url_file(path: Path, separator: str = DEFAULT_URL_SEPARATOR) -> List[str]:
    """Read and split a URL-list file.

    Raises:
        ValidationError: If the file cannot be read
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ValidationError(
            f"Cannot read URL file {path}: {e}",
            details={"url_file": str(path)}
        )

    urls = split_urls(text, separator)
    logger.info("Loaded URL file", url_file=str(path), urls_count=len(urls))
    return urls


def collect_urls(
    url: Optional[str],
    url_file: Optional[Path],
    separator: str = DEFAULT_URL_SEPARATOR
) -> List[str]:
    """Gather URLs from the positional argument and/or the URL file.

    The positional URL comes first, followed by the file's URLs in file order.

    Raises:
        ValidationError: If neither source is given, or the positional URL
            has no http(s) scheme
    """
    if not url and url_file is None:
        raise ValidationError("You need to provide a URL or a --url-file to parse")

    urls: List[str] = []
    if url:
        url = url.strip()
        if not has_recognized_scheme(url):
            raise ValidationError(
                f"URL must start with http:// or https://: {url}",
                details={"url": url}
            )
        urls.append(url)

    if url_file is not None:
        urls.extend(read_url_file(url_file, separator))

    return urls


def build_work_items(urls: Iterable[str], options: ExtractionOptions) -> List[WorkItem]:
    return [WorkItem(url=url, options=options) for url in urls]


def work_items_for(config: BatchConfig) -> List[WorkItem]:
    """Resolve the URL sources of ``config`` into work items."""
    urls = collect_urls(config.url, config.url_file, config.separator)
    return build_work_items(urls, config.options)
