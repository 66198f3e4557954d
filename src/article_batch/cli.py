#!/usr/bin/env python3
"""Command-line front end for batch article extraction.

Usage:
    article-batch https://example.com/article
    article-batch https://example.com/article --format text -H "Cookie=a=b"
    article-batch --url-file urls.txt --concurrency 4 --output
    article-batch --url-file urls.txt --output combined.md
    article-batch https://example.com/a -e "comment_count=.comments .count" -E "tags=.tags a|href"
    article-batch https://example.com/a --add-extractor extractors/example.py

Output:
    Without --output the content is printed to stdout. ``--output`` alone
    names files after each article's title; ``--output PATH`` writes
    everything to PATH. Put the URL before a bare ``--output``, otherwise
    the URL is taken as the output path.

Exit codes:
    0  the batch ran; per-URL extraction failures are reported inline
    1  invalid invocation, custom extractor failure, or output write failure
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from article_batch.core.batch.scheduler import ContentExtractor
from article_batch.core.extractor import ArticleExtractor, ExtractorRegistry, load_custom_extractors
from article_batch.core.models import (
    AutoOutput,
    BatchConfig,
    ContentType,
    ExplicitPath,
    ExtractionOptions,
    OutputDisabled,
    OutputTarget,
)
from article_batch.core.pipeline import process_batch
from article_batch.shared.config import Settings, get_settings
from article_batch.shared.exceptions import BaseAppException, InternalError, ValidationError
from article_batch.shared.logging import configure_logging

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="article-batch",
        description="Extract article content from one or more URLs"
    )
    parser.add_argument("url", nargs="?", help="URL of the article to parse")
    parser.add_argument(
        "--url-file", type=Path, metavar="PATH",
        help="File with URLs to parse, one per line"
    )
    parser.add_argument(
        "--separator", metavar="REGEX",
        help="Regular expression separating URLs in --url-file (default: newlines)"
    )
    parser.add_argument(
        "-f", "--format", choices=[t.value for t in ContentType],
        help="Set content type (default: markdown)"
    )
    parser.add_argument(
        "-H", "--header", action="append", default=[], metavar="NAME=VALUE",
        help="Include a custom header in the request (repeatable)"
    )
    parser.add_argument(
        "-e", "--extend", action="append", default=[], metavar="NAME=SELECTOR",
        help="Add a custom field from the first match of a CSS selector (repeatable)"
    )
    parser.add_argument(
        "-E", "--extend-list", action="append", default=[], metavar="NAME=SELECTOR",
        help="Add a custom field with every match of a CSS selector (repeatable)"
    )
    parser.add_argument(
        "-a", "--add-extractor", metavar="EXTRACTOR",
        help="Register a custom extractor (.py or .json file, or module name)"
    )
    parser.add_argument(
        "-o", "--output", nargs="?", const=True, default=None, metavar="PATH",
        help="Write to files named after article titles, or to PATH if given"
    )
    parser.add_argument(
        "--output-dir", type=Path, metavar="DIR",
        help="Directory for title-named output files (default: current directory)"
    )
    parser.add_argument(
        "-c", "--concurrency", metavar="N",
        help="Number of URLs extracted at the same time (default: 1)"
    )
    parser.add_argument(
        "--no-progress", action="store_true",
        help="Do not render the progress bar"
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Logging level for stderr (default: from LOG_LEVEL)"
    )
    return parser


def parse_pairs(values: Sequence[str], option: str) -> Dict[str, str]:
    """Parse NAME=VALUE arguments; the value may itself contain '='.

    Raises:
        ValidationError: If an argument has no '=' or an empty name
    """
    pairs: Dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ValidationError(
                f"{option} expects NAME=VALUE, got {raw!r}",
                details={"option": option, "value": raw}
            )
        pairs[name] = value.strip()
    return pairs


def parse_concurrency(value: Optional[str], default: int) -> int:
    """Parse the --concurrency value.

    Raises:
        ValidationError: If the value is not an integer of at least 1
    """
    if value is None:
        return default
    try:
        concurrency = int(value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"--concurrency must be a positive integer, got {value!r}",
            details={"concurrency": value}
        )
    if concurrency < 1:
        raise ValidationError(
            f"--concurrency must be a positive integer, got {value!r}",
            details={"concurrency": value}
        )
    return concurrency


def parse_output_target(value: Union[None, bool, str, Path]) -> OutputTarget:
    """Map the --output value onto the three output targets."""
    if value is None or value is False:
        return OutputDisabled()
    if value is True:
        return AutoOutput()
    if not str(value).strip():
        raise ValidationError("--output path must not be empty")
    return ExplicitPath(path=Path(value))


def build_config(args: argparse.Namespace, settings: Settings) -> BatchConfig:
    """Validate parsed arguments into a BatchConfig.

    Raises:
        ValidationError: If the invocation is invalid
    """
    if not args.url and args.url_file is None:
        raise ValidationError("You need to provide a URL or a --url-file to parse")

    options = ExtractionOptions(
        content_type=ContentType(args.format or settings.DEFAULT_CONTENT_TYPE),
        headers=parse_pairs(args.header, "--header"),
        extend=parse_pairs(args.extend, "--extend"),
        extend_list=parse_pairs(args.extend_list, "--extend-list"),
        add_extractor=args.add_extractor
    )

    return BatchConfig(
        url=args.url,
        url_file=args.url_file,
        separator=args.separator or settings.URL_SEPARATOR,
        options=options,
        concurrency=parse_concurrency(args.concurrency, settings.DEFAULT_CONCURRENCY),
        output=parse_output_target(args.output),
        output_dir=args.output_dir or Path(settings.OUTPUT_DIR),
        show_progress=settings.SHOW_PROGRESS and not args.no_progress
    )


def build_registry(config: BatchConfig) -> ExtractorRegistry:
    registry = ExtractorRegistry()
    if config.options.add_extractor:
        for custom in load_custom_extractors(config.options.add_extractor):
            registry.register(custom)
    return registry


def main(argv: Optional[List[str]] = None, extractor: Optional[ContentExtractor] = None) -> int:
    """Run the command line and return the process exit code.

    Args:
        argv: Arguments without the program name (default: sys.argv[1:])
        extractor: Extractor to use instead of the newspaper4k ArticleExtractor
    """
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except PydanticValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_FAILURE

    configure_logging(settings, level=args.log_level)

    try:
        config = build_config(args, settings)
        registry = build_registry(config)
        if extractor is None:
            extractor = ArticleExtractor(settings=settings, registry=registry)
        asyncio.run(process_batch(config, extractor))
    except BaseAppException as e:
        logger.error(e.message, **e.to_dict())
        return EXIT_FAILURE
    except Exception as e:
        error = InternalError(f"Unexpected error: {e}", details={"error_type": type(e).__name__})
        logger.error(error.message, exc_info=True, **error.to_dict())
        return EXIT_FAILURE

    return EXIT_OK


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
