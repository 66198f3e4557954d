"""Batch package: URL sources, bounded-concurrency scheduling and progress."""

from .progress import ProgressReporter
from .scheduler import BatchScheduler

__all__ = ["BatchScheduler", "ProgressReporter"]
