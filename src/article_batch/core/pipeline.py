"""One batch run, end to end: URLs -> outcomes -> aggregated content -> output."""

from pathlib import Path
from typing import List, Optional, TextIO

import structlog

from article_batch.core import output
from article_batch.core.aggregator import aggregate
from article_batch.core.batch.progress import ProgressReporter
from article_batch.core.batch.scheduler import BatchScheduler, ContentExtractor
from article_batch.core.batch.urls import work_items_for
from article_batch.core.models import BatchConfig

logger = structlog.get_logger(__name__)


async def process_batch(
    config: BatchConfig,
    extractor: ContentExtractor,
    stdout: Optional[TextIO] = None
) -> List[Path]:
    """Extract every URL of ``config`` and write the result.

    Output is planned and written only after every extraction has settled.

    Returns:
        Paths of the files written (empty when printing to stdout)

    Raises:
        ValidationError: If the URL sources are missing or invalid
        OutputWriteError: If an output file cannot be written
    """
    items = work_items_for(config)
    if not items:
        logger.warning("No URLs to process", url_file=str(config.url_file) if config.url_file else None)
        return []

    with ProgressReporter(total=len(items), enabled=config.show_progress) as progress:
        scheduler = BatchScheduler(extractor=extractor, progress=progress)
        outcomes = await scheduler.run(items, concurrency=config.concurrency)

    aggregated = aggregate(outcomes)
    output_plan = output.plan(aggregated.results, config.output, config.output_dir)
    return output.execute(output_plan, aggregated, stdout=stdout)
