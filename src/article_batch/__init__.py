"""Batch extraction of article content from URLs into Markdown."""

__version__ = "0.1.0"
