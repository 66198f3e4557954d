"""Custom, site-specific extractors registered at runtime.

A custom extractor is a set of CSS selectors for one domain. It can be
supplied as:

- a ``.json`` file holding one extractor object or a list of them;
- a ``.py`` file, or the dotted name of an importable module, exposing either
  ``extractor`` (one definition) or ``extractors`` (a list).

Each definition is a ``CustomExtractor`` or a dict with the same keys:

    extractor = {
        "domain": "example.com",
        "title": ["h1.headline"],
        "content": ["div.article-body"],
        "clean": [".newsletter-signup"],
        "extend": {"section": "nav .active"},
    }
"""

import importlib
import importlib.util
import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional
from urllib.parse import urlparse

import structlog
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from article_batch.shared.exceptions import ExtractorRegistrationError

logger = structlog.get_logger(__name__)


def normalize_host(host: str) -> str:
    host = host.strip().lower()
    if host.startswith("www."):
        host = host[len("www."):]
    return host


class CustomExtractor(BaseModel):
    """Selectors overriding the generic extraction for one domain.

    Selector lists are tried in order; the first that matches wins.
    """

    domain: str
    title: List[str] = Field(default_factory=list)
    content: List[str] = Field(default_factory=list)
    excerpt: List[str] = Field(default_factory=list)
    author: List[str] = Field(default_factory=list)
    date_published: List[str] = Field(default_factory=list)
    lead_image_url: List[str] = Field(default_factory=list)
    clean: List[str] = Field(default_factory=list)
    extend: Dict[str, str] = Field(default_factory=dict)

    @field_validator("domain")
    @classmethod
    def validate_domain(cls, v: str) -> str:
        domain = normalize_host(v)
        if not domain:
            raise ValueError("domain must not be empty")
        return domain

    def matches(self, url: str) -> bool:
        host = normalize_host(urlparse(url).hostname or "")
        return host == self.domain or host.endswith("." + self.domain)


class ExtractorRegistry:
    """Custom extractors keyed by domain; a later registration replaces an earlier one."""

    def __init__(self, extractors: Optional[Iterable[CustomExtractor]] = None):
        self._extractors: Dict[str, CustomExtractor] = {}
        for extractor in extractors or ():
            self.register(extractor)

    def __len__(self) -> int:
        return len(self._extractors)

    def register(self, extractor: CustomExtractor) -> None:
        if extractor.domain in self._extractors:
            logger.info("Replacing custom extractor", domain=extractor.domain)
        self._extractors[extractor.domain] = extractor

    def match(self, url: str) -> Optional[CustomExtractor]:
        """Return the most specific custom extractor for ``url``, if any."""
        candidates = [e for e in self._extractors.values() if e.matches(url)]
        if not candidates:
            return None
        return max(candidates, key=lambda e: len(e.domain))


def _definitions_from_module(reference: str) -> object:
    path = Path(reference)
    if path.suffix == ".py":
        if not path.is_file():
            raise ExtractorRegistrationError(reference, "file not found")
        spec = importlib.util.spec_from_file_location(f"article_batch_custom_{path.stem}", path)
        if spec is None or spec.loader is None:
            raise ExtractorRegistrationError(reference, "cannot load module")
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise ExtractorRegistrationError(reference, f"module raised {type(e).__name__}: {e}")
    else:
        try:
            module = importlib.import_module(reference)
        except ImportError as e:
            raise ExtractorRegistrationError(reference, str(e))

    if hasattr(module, "extractors"):
        return module.extractors
    if hasattr(module, "extractor"):
        return module.extractor
    raise ExtractorRegistrationError(reference, "module defines neither 'extractor' nor 'extractors'")


def _definitions_from_json(reference: str) -> object:
    try:
        return json.loads(Path(reference).read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ExtractorRegistrationError(reference, "file not found")
    except (OSError, json.JSONDecodeError) as e:
        raise ExtractorRegistrationError(reference, str(e))


def load_custom_extractors(reference: str) -> List[CustomExtractor]:
    """Load custom extractor definitions from a file or module reference.

    Raises:
        ExtractorRegistrationError: If the reference cannot be loaded or a
            definition is invalid
    """
    if reference.endswith(".json"):
        raw = _definitions_from_json(reference)
    else:
        raw = _definitions_from_module(reference)

    definitions = raw if isinstance(raw, (list, tuple)) else [raw]

    extractors = []
    for definition in definitions:
        if isinstance(definition, CustomExtractor):
            extractors.append(definition)
            continue
        try:
            extractors.append(CustomExtractor.model_validate(definition))
        except PydanticValidationError as e:
            raise ExtractorRegistrationError(reference, f"invalid definition: {e}")

    if not extractors:
        raise ExtractorRegistrationError(reference, "no extractor definitions found")

    logger.info(
        "Loaded custom extractors",
        reference=reference,
        domains=[e.domain for e in extractors]
    )
    return extractors
