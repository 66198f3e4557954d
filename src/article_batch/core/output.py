"""Deciding where batch content goes, and writing it there.

plan() is pure: it maps the result count and the output target to an
OutputPlan. execute() performs the plan once the whole batch has settled.

Per-file naming in SplitFilesPlan does no collision detection: two articles
that derive the same filename are written to the same path, and the later one
wins.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, TextIO, Union
from urllib.parse import urlparse

import structlog

from article_batch.core.aggregator import AggregatedOutput, format_failure
from article_batch.core.models import (
    ArticleResult,
    AutoOutput,
    ExplicitPath,
    OutputDisabled,
    OutputTarget,
)
from article_batch.shared.exceptions import OutputWriteError

logger = structlog.get_logger(__name__)

FILE_EXTENSION = ".md"
FALLBACK_STEM = "article"

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class StdoutPlan:
    pass


@dataclass(frozen=True)
class SingleFilePlan:
    path: Path


@dataclass(frozen=True)
class SplitFilesPlan:
    paths: List[Path]


OutputPlan = Union[StdoutPlan, SingleFilePlan, SplitFilesPlan]


def slugify(value: str) -> str:
    """Lower-case ``value`` and collapse every run of non [a-z0-9] into one hyphen."""
    return _NON_SLUG_CHARS.sub("-", value.lower()).strip("-")


def url_slug_source(url: str) -> str:
    """Return hostname (final label and leading www. removed) followed by the path."""
    parsed = urlparse(url)
    hostname = parsed.hostname or ""
    labels = hostname.split(".")
    host = ".".join(labels[:-1]) if len(labels) > 1 else ""
    if host.startswith("www."):
        host = host[len("www."):]
    return f"{host}{parsed.path}"


def derive_filename(result: ArticleResult) -> str:
    """Derive a filesystem-safe Markdown filename for ``result``.

    The title is preferred; when it is missing (or has no usable characters)
    the name is built from the URL instead.
    """
    stem = slugify(result.title or "")
    if not stem:
        stem = slugify(url_slug_source(result.url))
    return f"{stem or FALLBACK_STEM}{FILE_EXTENSION}"


def plan(
    results: Sequence[ArticleResult],
    target: OutputTarget,
    output_dir: Path = Path(".")
) -> OutputPlan:
    """Choose between stdout, one file, or one file per result.

    An explicit path always receives the aggregated content. Automatic naming
    always writes one file per result holding only that result's content,
    whatever the number of results or failures in the batch.
    """
    if isinstance(target, OutputDisabled) or not results:
        return StdoutPlan()

    if isinstance(target, ExplicitPath):
        return SingleFilePlan(path=Path(target.path))

    if isinstance(target, AutoOutput):
        return SplitFilesPlan(paths=[Path(output_dir) / derive_filename(r) for r in results])

    raise TypeError(f"Unknown output target: {target!r}")


def approximate_size(content: str) -> str:
    """Human readable size of ``content`` once encoded as UTF-8."""
    size = len(content.encode("utf-8"))
    if size < 1024:
        return f"~{size} B"
    if size < 1024 * 1024:
        return f"~{size / 1024:.1f} KB"
    return f"~{size / (1024 * 1024):.1f} MB"


def write_file(path: Path, content: str) -> None:
    """Write ``content`` to ``path``, creating parent directories.

    Raises:
        OutputWriteError: If the file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        logger.error("Failed to write output file", path=str(path), error=str(e))
        raise OutputWriteError(str(path), e.strerror or str(e))

    logger.info("Wrote output file", path=str(path), size=approximate_size(content))


def execute(
    output_plan: OutputPlan,
    aggregated: AggregatedOutput,
    stdout: Optional[TextIO] = None
) -> List[Path]:
    """Carry out ``output_plan`` and return the paths written.

    Raises:
        OutputWriteError: On the first file that cannot be written. Files
            written before it are left in place.
    """
    if isinstance(output_plan, StdoutPlan):
        print(aggregated.content, file=stdout)
        return []

    if isinstance(output_plan, SingleFilePlan):
        write_file(output_plan.path, aggregated.content)
        return [output_plan.path]

    if isinstance(output_plan, SplitFilesPlan):
        for failure in aggregated.failures:
            logger.warning(format_failure(failure), url=failure.url)
        for path, result in zip(output_plan.paths, aggregated.results):
            write_file(path, result.content)
        return list(output_plan.paths)

    raise TypeError(f"Unknown output plan: {output_plan!r}")
