"""Content extraction — one handler per ContentCategory.

``extract()`` never raises: any handler failure is logged and reported as
``None`` so the pipeline continues with less information. Adding a category
means adding one entry to :data:`EXTRACTORS`.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ..errors import ExtractionFailed
from ..models.analysis import (
    AnalysisInput,
    ContentCategory,
    ExtractedContent,
    FileInput,
    UrlInput,
)
from .image import extract_image
from .pdf import PDF_TEXT_LIMIT, extract_pdf
from .url import URL_TEXT_LIMIT, extract_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractOptions:
    """Knobs the orchestrator passes down to handlers."""

    pdf_strategy: str = "text"
    fetch: bool = True
    fetch_timeout: float = 10.0


Extractor = Callable[[AnalysisInput, ExtractOptions], Awaitable[ExtractedContent]]


def _require_file(item: AnalysisInput) -> FileInput:
    if not isinstance(item, FileInput):
        raise ExtractionFailed(f"Expected a file input, got {item.kind}")
    return item


def _link_of(item: AnalysisInput) -> str:
    if isinstance(item, UrlInput):
        return item.url
    if item.file_url:
        return item.file_url
    raise ExtractionFailed(f"File {item.name!r} has no URL to inspect")


async def _pdf(item: AnalysisInput, options: ExtractOptions) -> ExtractedContent:
    return await extract_pdf(_require_file(item), options.pdf_strategy)


async def _image(item: AnalysisInput, options: ExtractOptions) -> ExtractedContent:
    return await extract_image(_require_file(item))


async def _link(item: AnalysisInput, options: ExtractOptions) -> ExtractedContent:
    return await extract_url(_link_of(item), fetch=options.fetch, timeout=options.fetch_timeout)


EXTRACTORS: dict[ContentCategory, Extractor] = {
    ContentCategory.PDF: _pdf,
    ContentCategory.IMAGE: _image,
    ContentCategory.GITHUB: _link,
    ContentCategory.FIGMA: _link,
    ContentCategory.BEHANCE: _link,
    ContentCategory.DRIBBBLE: _link,
    ContentCategory.GENERIC_LINK: _link,
}


async def extract(
    item: AnalysisInput,
    category: ContentCategory,
    options: ExtractOptions | None = None,
) -> ExtractedContent | None:
    """Best-effort content summary for *item*, or None."""
    handler = EXTRACTORS.get(category)
    if handler is None:
        return None
    try:
        return await handler(item, options or ExtractOptions())
    except Exception as exc:
        logger.warning("Extraction failed for %s input (%s): %s", category.value, type(exc).__name__, exc)
        return None


__all__ = [
    "EXTRACTORS",
    "ExtractOptions",
    "PDF_TEXT_LIMIT",
    "URL_TEXT_LIMIT",
    "extract",
]
