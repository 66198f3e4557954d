"""Tests for structured logging configuration."""

import json
import logging

import structlog

from article_batch.shared.config import Settings
from article_batch.shared.logging import configure_logging


class TestConfigureLogging:

    def test_json_logs_go_to_stderr(self, capsys):
        configure_logging(Settings(_env_file=None, LOG_FORMAT="json", LOG_LEVEL="INFO"))

        structlog.get_logger("article_batch.test").info("Wrote output file", path="out.md")

        captured = capsys.readouterr()
        assert captured.out == ""
        record = json.loads(captured.err.strip().splitlines()[-1])
        assert record["event"] == "Wrote output file"
        assert record["path"] == "out.md"
        assert record["level"] == "info"
        assert record["logger"] == "article_batch.test"

    def test_level_override(self, capsys):
        configure_logging(Settings(_env_file=None, LOG_LEVEL="INFO"), level="error")

        assert logging.getLogger().level == logging.ERROR
        structlog.get_logger("article_batch.test").warning("Hidden")

        assert "Hidden" not in capsys.readouterr().err
