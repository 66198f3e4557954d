"""Combining batch outcomes into printable content."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from article_batch.core.models import ArticleResult, Failure, Outcome, Success

# Fixed marker between articles in a combined document; safe to split on.
DOCUMENT_SEPARATOR = "\n\n---\n<!-- article-batch:separator -->\n---\n\n"

# Attributes left out of the metadata block: the payload itself, or values
# already shown elsewhere in the block.
OMITTED_METADATA_KEYS = frozenset({"content", "excerpt", "url", "domain", "direction"})


@dataclass
class AggregatedOutput:
    content: str
    results: List[ArticleResult] = field(default_factory=list)
    failures: List[Failure] = field(default_factory=list)


def format_failure(failure: Failure) -> str:
    return f"Error processing {failure.url}: {failure.message}"


def compact_metadata(result: ArticleResult) -> Dict[str, Any]:
    """Return the result's metadata without large/duplicate or empty values."""
    return {
        key: value
        for key, value in result.metadata().items()
        if key not in OMITTED_METADATA_KEYS and value
    }


def render_result(result: ArticleResult) -> str:
    """Render one article as a Markdown block for a combined document."""
    parts = [f"# {result.title or result.url}", f"URL: {result.url}"]

    metadata = compact_metadata(result)
    if metadata:
        metadata_json = json.dumps(metadata, indent=2, ensure_ascii=False, default=str)
        parts.append(f"```json\n{metadata_json}\n```")

    parts.append(result.content)
    return "\n\n".join(parts)


def aggregate(outcomes: Sequence[Outcome]) -> AggregatedOutput:
    """Partition outcomes and build the printable content.

    A single successful outcome yields its raw content. Several outcomes are
    rendered in input order, each as an article block or a one-line error,
    joined by DOCUMENT_SEPARATOR.
    """
    results = [outcome.result for outcome in outcomes if isinstance(outcome, Success)]
    failures = [outcome for outcome in outcomes if isinstance(outcome, Failure)]

    if len(outcomes) == 1:
        outcome = outcomes[0]
        if isinstance(outcome, Success):
            content = outcome.result.content
        else:
            content = format_failure(outcome)
        return AggregatedOutput(content=content, results=results, failures=failures)

    blocks = []
    for outcome in outcomes:
        if isinstance(outcome, Success):
            blocks.append(render_result(outcome.result))
        else:
            blocks.append(format_failure(outcome))

    return AggregatedOutput(
        content=DOCUMENT_SEPARATOR.join(blocks),
        results=results,
        failures=failures
    )
