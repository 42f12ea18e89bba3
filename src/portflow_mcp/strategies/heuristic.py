"""Heuristic strategy — filename and URL patterns only, cannot fail.

No network, no credentials, no parsing that can raise: every branch ends
in a non-empty title and description built from string templates.
"""

from __future__ import annotations

import zlib
from collections.abc import Callable
from urllib.parse import urlparse

from ..extractors.image import classify_image
from ..extractors.pdf import analyze_pdf_name
from ..extractors.url import analyze_url, path_segments
from ..models.analysis import (
    AnalysisMethod,
    AnalysisResult,
    ContentCategory,
    FileInput,
    UrlInput,
)
from ..text import (
    format_file_size,
    humanize,
    project_context,
    title_from_filename,
    truncate_title,
)
from .base import GenerationRequest, Strategy

DEFAULT_TITLE = "Creative Project"
SHORT_DESCRIPTION_LENGTH = 50

BASIC_TEMPLATES: tuple[str, ...] = (
    "Professional {context} demonstrating creative expertise and technical proficiency. "
    "Features innovative problem-solving and attention to detail.",
    "Comprehensive {context} showcasing modern design principles and professional execution. "
    "Highlights skills in creative development and strategic thinking.",
    "Strategic {context} reflecting expertise in creative solutions and professional delivery. "
    "Demonstrates strong technical skills and design methodology.",
)


def _link_of(request: GenerationRequest) -> str:
    item = request.input
    return item.url if isinstance(item, UrlInput) else item.file_url


def fallback_title(request: GenerationRequest) -> str:
    """Humanized filename, else last URL path segment or hostname."""
    item = request.input
    if isinstance(item, FileInput):
        title = title_from_filename(item.name)
        if title:
            return title
    url = _link_of(request)
    if url:
        try:
            hostname = urlparse(url).hostname or ""
        except ValueError:
            return "Web Project"
        segments = path_segments(url)
        return humanize(segments[-1] if segments else hostname) or "Web Project"
    return DEFAULT_TITLE


def basic_description(title: str, notes: str) -> str:
    """One of three templates, picked by a stable hash of *title*."""
    index = zlib.crc32(title.encode("utf-8")) % len(BASIC_TEMPLATES)
    return BASIC_TEMPLATES[index].format(context=project_context(notes))


def _pdf(request: GenerationRequest) -> tuple[str, str]:
    item = request.input
    title = fallback_title(request)
    doc = request.document
    if doc is None:
        name = item.name if isinstance(item, FileInput) else title
        size = item.size if isinstance(item, FileInput) else None
        doc = analyze_pdf_name(name, size)
    if doc.source == "heuristic" and doc.text:
        return title, doc.text
    return title, (
        f"Professional PDF {doc.kind} showcasing {project_context(item.notes)}. Contains structured "
        "content and detailed information demonstrating expertise and attention to detail."
    )


def _image(request: GenerationRequest) -> tuple[str, str]:
    item = request.input
    title = fallback_title(request)
    doc = request.document
    if doc is not None and doc.text:
        return title, doc.text
    if isinstance(item, FileInput):
        _kind, template, _hints = classify_image(item.name, item.mime_type)
        return title, template.format(size=format_file_size(item.size))
    return title, (
        f"Visual {project_context(item.notes)} showcasing creative design work and visual "
        "communication skills. Professional visual content demonstrating artistic expertise "
        "and design thinking."
    )


def _link(request: GenerationRequest) -> tuple[str, str]:
    url = _link_of(request)
    page = request.page
    if page is not None:
        heuristic_title, heuristic_description = page.heuristic_title, page.heuristic_description
    else:
        _platform, heuristic_title, heuristic_description = analyze_url(url)

    if page is not None and page.title:
        title = truncate_title(page.title)
    else:
        title = heuristic_title or fallback_title(request)

    description = (page.meta_description if page is not None else "") or heuristic_description
    if not description:
        description = (
            f"Web-based {project_context(request.input.notes)} demonstrating digital expertise "
            "and modern development practices."
        )
    if len(description) < SHORT_DESCRIPTION_LENGTH:
        description += " Features professional implementation and user-focused design principles."
    return title, description


def _basic(request: GenerationRequest) -> tuple[str, str]:
    title = fallback_title(request)
    return title, basic_description(title, request.input.notes)


DESCRIBERS: dict[ContentCategory, Callable[[GenerationRequest], tuple[str, str]]] = {
    ContentCategory.PDF: _pdf,
    ContentCategory.IMAGE: _image,
    ContentCategory.GITHUB: _link,
    ContentCategory.FIGMA: _link,
    ContentCategory.BEHANCE: _link,
    ContentCategory.DRIBBBLE: _link,
    ContentCategory.GENERIC_LINK: _link,
}


class HeuristicStrategy(Strategy):
    """Guaranteed backstop; always last in the chain."""

    name = "heuristic"
    method = AnalysisMethod.HEURISTIC

    def describe(self, request: GenerationRequest) -> tuple[str, str]:
        title, description = DESCRIBERS.get(request.category, _basic)(request)
        return title.strip() or DEFAULT_TITLE, description.strip() or basic_description(title, "")

    async def attempt(self, request: GenerationRequest) -> AnalysisResult:
        title, description = self.describe(request)
        return AnalysisResult(
            title=title,
            description=description,
            category=request.category,
            method=self.method,
            extracted_preview=request.preview(),
        )
