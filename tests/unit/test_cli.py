"""Unit tests for command-line parsing and validation."""

from pathlib import Path

import pytest

from article_batch.cli import (
    build_config,
    build_parser,
    build_registry,
    parse_concurrency,
    parse_output_target,
    parse_pairs,
)
from article_batch.core.models import AutoOutput, ContentType, ExplicitPath, OutputDisabled
from article_batch.shared.config import Settings
from article_batch.shared.exceptions import ExtractorRegistrationError, ValidationError


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, SHOW_PROGRESS=True)


def parse(*argv):
    return build_parser().parse_args(list(argv))


class TestParsePairs:

    def test_value_may_contain_equals(self):
        assert parse_pairs(["Cookie=a=b; c=d"], "--header") == {"Cookie": "a=b; c=d"}

    def test_later_pair_wins(self):
        assert parse_pairs(["x=1", "x=2"], "--extend") == {"x": "2"}

    @pytest.mark.parametrize("raw", ["no-separator", "=value", "  =value"])
    def test_malformed_pair_rejected(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            parse_pairs([raw], "--header")

        assert "--header" in exc_info.value.message


class TestParseConcurrency:

    def test_default_when_absent(self):
        assert parse_concurrency(None, 3) == 3

    def test_valid_value(self):
        assert parse_concurrency("8", 1) == 8

    @pytest.mark.parametrize("value", ["0", "-2", "abc", "1.5", ""])
    def test_invalid_value_rejected(self, value):
        with pytest.raises(ValidationError):
            parse_concurrency(value, 1)


class TestParseOutputTarget:

    def test_absent_flag_disables_output(self):
        assert parse_output_target(None) == OutputDisabled()

    def test_bare_flag_is_auto(self):
        assert parse_output_target(True) == AutoOutput()

    def test_path(self):
        assert parse_output_target("out/combined.md") == ExplicitPath(path=Path("out/combined.md"))

    def test_empty_path_rejected(self):
        with pytest.raises(ValidationError):
            parse_output_target("  ")


class TestBuildConfig:
    """Test cases for turning arguments into a BatchConfig."""

    def test_minimal_invocation(self, settings):
        config = build_config(parse("https://example.com/a"), settings)

        assert config.url == "https://example.com/a"
        assert config.url_file is None
        assert config.concurrency == 1
        assert config.output == OutputDisabled()
        assert config.options.content_type == ContentType.MARKDOWN
        assert config.show_progress is True

    def test_full_invocation(self, settings):
        args = parse(
            "https://example.com/a",
            "--url-file", "urls.txt",
            "--separator", ",",
            "-f", "text",
            "-H", "Cookie=a=b",
            "-e", "comment_count=.comments .count",
            "-E", "tags=.tags a|href",
            "-c", "4",
            "--output-dir", "articles",
            "--no-progress",
            "-o",
        )

        config = build_config(args, settings)

        assert config.url_file == Path("urls.txt")
        assert config.separator == ","
        assert config.options.content_type == ContentType.TEXT
        assert config.options.headers == {"Cookie": "a=b"}
        assert config.options.extend == {"comment_count": ".comments .count"}
        assert config.options.extend_list == {"tags": ".tags a|href"}
        assert config.concurrency == 4
        assert config.output == AutoOutput()
        assert config.output_dir == Path("articles")
        assert config.show_progress is False

    def test_settings_provide_defaults(self):
        settings = Settings(_env_file=None, DEFAULT_CONCURRENCY=5, DEFAULT_CONTENT_TYPE="html")

        config = build_config(parse("https://example.com/a"), settings)

        assert config.concurrency == 5
        assert config.options.content_type == ContentType.HTML

    def test_url_source_required(self, settings):
        with pytest.raises(ValidationError) as exc_info:
            build_config(parse(), settings)

        assert exc_info.value.message == "You need to provide a URL or a --url-file to parse"

    def test_unknown_format_rejected_by_parser(self):
        with pytest.raises(SystemExit):
            parse("https://example.com/a", "-f", "pdf")


class TestBuildRegistry:

    def test_no_custom_extractor(self, settings):
        registry = build_registry(build_config(parse("https://example.com/a"), settings))

        assert len(registry) == 0

    def test_missing_custom_extractor(self, settings, tmp_path):
        args = parse("https://example.com/a", "-a", str(tmp_path / "missing.json"))

        with pytest.raises(ExtractorRegistrationError):
            build_registry(build_config(args, settings))
