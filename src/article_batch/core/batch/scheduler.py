"""Bounded-concurrency batch extraction.

This module provides the BatchScheduler class that runs one extraction per
work item with at most ``concurrency`` extractions in flight at once.

The scheduler:
- Admits work through an asyncio.Semaphore sized to the concurrency limit
- Converts every extractor exception into a Failure outcome for that item,
  leaving sibling extractions untouched
- Advances the progress reporter once per completed item, success or failure
- Returns outcomes in input order, whatever order extractions complete in

Example:
    ```python
    import asyncio
    from article_batch.shared.config import get_settings
    from article_batch.core.extractor import ArticleExtractor
    from article_batch.core.batch.scheduler import BatchScheduler
    from article_batch.core.batch.urls import build_work_items
    from article_batch.core.models import ExtractionOptions

    async def main():
        extractor = ArticleExtractor(settings=get_settings())
        scheduler = BatchScheduler(extractor=extractor)
        items = build_work_items(
            ["https://example.com/a", "https://example.com/b"],
            ExtractionOptions()
        )
        outcomes = await scheduler.run(items, concurrency=2)
        for outcome in outcomes:
            print(type(outcome).__name__, outcome.url)

    asyncio.run(main())
    ```
"""

import asyncio
from typing import List, Optional, Protocol, Sequence
from uuid import uuid4

import structlog

from article_batch.core.batch.progress import ProgressReporter
from article_batch.core.models import (
    ArticleResult,
    ExtractionOptions,
    Failure,
    Outcome,
    Success,
    WorkItem,
)
from article_batch.shared.exceptions import BaseAppException, ValidationError


class ContentExtractor(Protocol):
    """Anything that can turn a URL into an ArticleResult."""

    async def extract(self, url: str, options: ExtractionOptions) -> ArticleResult:
        ...


def describe_error(error: BaseException) -> str:
    """Return a short human readable description of an extraction error."""
    if isinstance(error, BaseAppException):
        return error.message
    message = str(error).strip()
    return message or type(error).__name__


class BatchScheduler:
    """Run extractions for a batch of work items under a concurrency cap.

    Args:
        extractor: Content extractor invoked once per work item
        progress: Optional progress reporter advanced on every completion
        logger: Optional structlog logger
    """

    def __init__(
        self,
        extractor: ContentExtractor,
        progress: Optional[ProgressReporter] = None,
        logger=None
    ):
        self.extractor = extractor
        self.progress = progress
        self.logger = logger or structlog.get_logger(__name__)

    async def run(self, items: Sequence[WorkItem], concurrency: int = 1) -> List[Outcome]:
        """Extract every work item and return one outcome per item.

        Args:
            items: Work items in input order
            concurrency: Maximum number of extractions in flight

        Returns:
            Outcomes where ``outcomes[i]`` belongs to ``items[i]``

        Raises:
            ValidationError: If ``concurrency`` is less than 1
        """
        if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
            raise ValidationError(
                f"Concurrency must be a positive integer, got {concurrency!r}",
                details={"concurrency": concurrency}
            )

        if not items:
            return []

        correlation_id = str(uuid4())
        log = self.logger.bind(correlation_id=correlation_id)
        log.info(
            "Starting batch extraction",
            urls_count=len(items),
            concurrency=concurrency
        )

        outcomes: List[Optional[Outcome]] = [None] * len(items)
        semaphore = asyncio.Semaphore(concurrency)

        async def extract_single(index: int, item: WorkItem) -> None:
            async with semaphore:
                try:
                    result = await self.extractor.extract(item.url, item.options)
                    outcome: Outcome = Success(index=index, url=item.url, result=result)
                except Exception as e:
                    log.warning(
                        "Failed to extract article",
                        url=item.url,
                        error=describe_error(e),
                        error_type=type(e).__name__
                    )
                    outcome = Failure(index=index, url=item.url, message=describe_error(e))
            outcomes[index] = outcome
            if self.progress is not None:
                self.progress.advance()

        await asyncio.gather(*(extract_single(i, item) for i, item in enumerate(items)))

        succeeded = sum(1 for outcome in outcomes if isinstance(outcome, Success))
        log.info(
            "Batch extraction completed",
            total_urls=len(items),
            successful_extractions=succeeded,
            failed_extractions=len(items) - succeeded
        )

        return list(outcomes)
