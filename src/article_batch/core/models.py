"""Domain models shared by the extractor, batch scheduler and output stages.

Outcomes and output targets are small frozen dataclasses used as tagged
unions: callers branch with ``isinstance`` and never mutate them.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ContentType(str, Enum):
    """Rendering of the article payload."""
    HTML = "html"
    MARKDOWN = "markdown"
    TEXT = "text"


class ExtractionOptions(BaseModel):
    """Options applied to each extraction call."""

    model_config = ConfigDict(frozen=True)

    content_type: ContentType = Field(default=ContentType.MARKDOWN)
    headers: Dict[str, str] = Field(
        default_factory=dict,
        description="Extra request headers, overriding the default User-Agent"
    )
    extend: Dict[str, str] = Field(
        default_factory=dict,
        description="Field name -> CSS selector; first match (optionally 'selector|attr')"
    )
    extend_list: Dict[str, str] = Field(
        default_factory=dict,
        description="Field name -> CSS selector; every match"
    )
    add_extractor: Optional[str] = Field(
        default=None,
        description="Path or module of a custom extractor registered at startup"
    )


class ArticleResult(BaseModel):
    """An extracted article.

    ``fields`` carries everything beyond the well-known attributes: values the
    extractor contributes (author, date_published, domain, ...) and the output
    of ``extend``/``extend_list`` rules, whose names are only known at runtime.
    """

    title: Optional[str] = None
    url: str
    content: str
    excerpt: Optional[str] = None
    fields: Dict[str, Any] = Field(default_factory=dict)

    def metadata(self) -> Dict[str, Any]:
        """Return every non-payload attribute as a flat mapping."""
        data: Dict[str, Any] = {
            "title": self.title,
            "url": self.url,
            "excerpt": self.excerpt,
        }
        data.update(self.fields)
        return data


@dataclass(frozen=True)
class WorkItem:
    """One URL and the options it is extracted with."""
    url: str
    options: ExtractionOptions = field(default_factory=ExtractionOptions)


@dataclass(frozen=True)
class Success:
    index: int
    url: str
    result: ArticleResult


@dataclass(frozen=True)
class Failure:
    index: int
    url: str
    message: str


Outcome = Union[Success, Failure]


@dataclass(frozen=True)
class OutputDisabled:
    """Print to stdout; no file is written."""


@dataclass(frozen=True)
class AutoOutput:
    """Write files named after each article's title."""


@dataclass(frozen=True)
class ExplicitPath:
    """Write everything to exactly this path."""
    path: Path


OutputTarget = Union[OutputDisabled, AutoOutput, ExplicitPath]


@dataclass(frozen=True)
class BatchConfig:
    """Fully parsed configuration for one batch run.

    ``url`` and ``url_file`` are the two URL sources; at least one must be set
    before a batch may start. ``separator`` is the regular expression that
    splits the URL file into records.
    """
    url: Optional[str] = None
    url_file: Optional[Path] = None
    separator: str = r"[\r\n]+"
    options: ExtractionOptions = field(default_factory=ExtractionOptions)
    concurrency: int = 1
    output: OutputTarget = field(default_factory=OutputDisabled)
    output_dir: Path = Path(".")
    show_progress: bool = True
