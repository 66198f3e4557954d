"""Unit tests for output planning and writing."""

import io
from pathlib import Path

import pytest

from article_batch.core.aggregator import aggregate
from article_batch.core.models import (
    ArticleResult,
    AutoOutput,
    ExplicitPath,
    Failure,
    OutputDisabled,
    Success,
)
from article_batch.core.output import (
    SingleFilePlan,
    SplitFilesPlan,
    StdoutPlan,
    approximate_size,
    derive_filename,
    execute,
    plan,
    slugify,
)
from article_batch.shared.exceptions import ErrorCode, OutputWriteError


def make_result(title, url="https://example.com/a", content="Body"):
    return ArticleResult(title=title, url=url, content=content)


class TestDeriveFilename:
    """Test cases for title/URL based filenames."""

    def test_title_is_slugified(self):
        assert derive_filename(make_result("Hello, World! 2024")) == "hello-world-2024.md"

    def test_slug_is_idempotent(self):
        slug = slugify("Hello, World! 2024")
        assert slugify(slug) == slug

    @pytest.mark.parametrize("title,url", [
        ("Hello, World! 2024", "https://example.com/a"),
        (None, "https://www.example.com/news/Some_Story.html"),
    ])
    def test_derive_filename_is_deterministic(self, title, url):
        result = make_result(title, url=url)

        assert derive_filename(result) == derive_filename(result)
        assert derive_filename(result) == derive_filename(make_result(title, url=url))

    def test_non_ascii_runs_collapse(self):
        assert derive_filename(make_result("  Crème brûlée -- recipe  ")) == "cr-me-br-l-e-recipe.md"

    def test_missing_title_uses_url(self):
        result = make_result(None, url="https://www.example.com/news/Some_Story.html")

        assert derive_filename(result) == "example-news-some-story-html.md"

    def test_unusable_title_falls_back_to_url(self):
        result = make_result("!!!", url="https://blog.example.org/post")

        assert derive_filename(result) == "blog-example-post.md"

    def test_nothing_usable_falls_back_to_default_name(self):
        assert derive_filename(make_result("", url="https://localhost")) == "article.md"


class TestPlan:
    """Test cases for the pure planning step."""

    def test_disabled_target_prints(self):
        assert plan([make_result("A")], OutputDisabled()) == StdoutPlan()

    def test_no_results_prints_even_with_output(self):
        assert plan([], AutoOutput()) == StdoutPlan()
        assert plan([], ExplicitPath(Path("out.md"))) == StdoutPlan()

    def test_explicit_path_is_one_file(self):
        results = [make_result("A"), make_result("B")]

        assert plan(results, ExplicitPath(Path("combined.md"))) == SingleFilePlan(path=Path("combined.md"))

    def test_auto_with_one_result_uses_title(self, tmp_path):
        output_plan = plan([make_result("My Story")], AutoOutput(), tmp_path)

        assert output_plan == SplitFilesPlan(paths=[tmp_path / "my-story.md"])

    def test_auto_with_many_results_splits(self, tmp_path):
        results = [make_result("One"), make_result("Two"), make_result("Three")]

        output_plan = plan(results, AutoOutput(), tmp_path)

        assert isinstance(output_plan, SplitFilesPlan)
        assert output_plan.paths == [tmp_path / "one.md", tmp_path / "two.md", tmp_path / "three.md"]

    def test_unknown_target_rejected(self):
        with pytest.raises(TypeError):
            plan([make_result("A")], "out.md")


class TestExecute:
    """Test cases for carrying out a plan."""

    def test_stdout_plan_prints_content(self, capsys):
        aggregated = aggregate([Success(0, "https://example.com/a", make_result("A", content="Hello"))])

        written = execute(StdoutPlan(), aggregated)

        assert written == []
        assert capsys.readouterr().out == "Hello\n"

    def test_stdout_plan_uses_given_stream(self):
        aggregated = aggregate([Success(0, "https://example.com/a", make_result("A", content="Hello"))])
        stream = io.StringIO()

        execute(StdoutPlan(), aggregated, stdout=stream)

        assert stream.getvalue() == "Hello\n"

    def test_single_file_gets_raw_content(self, tmp_path):
        aggregated = aggregate([Success(0, "https://example.com/a", make_result("A", content="Raw body"))])
        path = tmp_path / "nested" / "out.md"

        written = execute(SingleFilePlan(path=path), aggregated)

        assert written == [path]
        assert path.read_text(encoding="utf-8") == "Raw body"

    def test_split_files_write_each_result(self, tmp_path):
        outcomes = [
            Success(i, f"https://example.com/{i}", make_result(f"Title {i}", content=f"Body {i}"))
            for i in range(3)
        ]
        aggregated = aggregate(outcomes)
        output_plan = plan(aggregated.results, AutoOutput(), tmp_path)

        execute(output_plan, aggregated)

        assert sorted(p.name for p in tmp_path.iterdir()) == ["title-0.md", "title-1.md", "title-2.md"]
        for i in range(3):
            assert (tmp_path / f"title-{i}.md").read_text(encoding="utf-8") == f"Body {i}"

    def test_split_files_skip_failures(self, tmp_path):
        outcomes = [
            Success(0, "https://example.com/0", make_result("Kept", content="Body")),
            Failure(1, "https://example.com/1", "Network error: refused"),
            Success(2, "https://example.com/2", make_result("Also Kept", content="Body 2")),
        ]
        aggregated = aggregate(outcomes)

        written = execute(plan(aggregated.results, AutoOutput(), tmp_path), aggregated)

        assert [p.name for p in written] == ["kept.md", "also-kept.md"]
        assert len(list(tmp_path.iterdir())) == 2

    def test_auto_output_with_a_sibling_failure_writes_raw_content(self, tmp_path):
        outcomes = [
            Success(0, "https://example.com/0", make_result("Kept", content="Only this body")),
            Failure(1, "https://example.com/1", "boom"),
        ]
        aggregated = aggregate(outcomes)

        written = execute(plan(aggregated.results, AutoOutput(), tmp_path), aggregated)

        assert written == [tmp_path / "kept.md"]
        assert (tmp_path / "kept.md").read_text(encoding="utf-8") == "Only this body"

    def test_duplicate_names_overwrite(self, tmp_path):
        outcomes = [
            Success(0, "https://example.com/0", make_result("Same", content="first")),
            Success(1, "https://example.com/1", make_result("Same", content="second")),
        ]
        aggregated = aggregate(outcomes)

        execute(plan(aggregated.results, AutoOutput(), tmp_path), aggregated)

        assert [p.name for p in tmp_path.iterdir()] == ["same.md"]
        assert (tmp_path / "same.md").read_text(encoding="utf-8") == "second"

    def test_unwritable_path_raises_output_write_error(self, tmp_path):
        aggregated = aggregate([Success(0, "https://example.com/a", make_result("A"))])
        directory = tmp_path / "taken"
        directory.mkdir()

        with pytest.raises(OutputWriteError) as exc_info:
            execute(SingleFilePlan(path=directory), aggregated)

        assert exc_info.value.code == ErrorCode.OUTPUT_WRITE_FAILED
        assert str(directory) in exc_info.value.message


@pytest.mark.parametrize("content,expected", [
    ("", "~0 B"),
    ("a" * 512, "~512 B"),
    ("a" * 2048, "~2.0 KB"),
    ("a" * (3 * 1024 * 1024), "~3.0 MB"),
])
def test_approximate_size(content, expected):
    assert approximate_size(content) == expected
