"""Content type detection for files and links.

Pure functions: no I/O and no failure mode. Every input maps to exactly
one ContentCategory, ``unknown`` when nothing matches.
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from urllib.parse import urlparse

from .models.analysis import AnalysisInput, ContentCategory, FileInput

logger = logging.getLogger(__name__)

PDF_EXTENSIONS = frozenset({".pdf"})
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".svg", ".webp", ".bmp", ".avif"})

# Hostname substring -> category, checked in order.
PLATFORM_CATEGORIES: tuple[tuple[str, ContentCategory], ...] = (
    ("github.com", ContentCategory.GITHUB),
    ("figma.com", ContentCategory.FIGMA),
    ("behance.net", ContentCategory.BEHANCE),
    ("dribbble.com", ContentCategory.DRIBBBLE),
)

# Display label per hostname pattern, used by the URL extractor and heuristics.
PLATFORM_LABELS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("github.com",), "GitHub"),
    (("figma.com",), "Figma"),
    (("behance.net",), "Behance"),
    (("dribbble.com",), "Dribbble"),
    (("codepen.io",), "CodePen"),
    (("codesandbox.io",), "CodeSandbox"),
    (("vercel.app", "netlify.app", "herokuapp.com"), "Deployed App"),
    (("youtube.com", "youtu.be"), "YouTube"),
    (("vimeo.com",), "Vimeo"),
    (("loom.com",), "Loom"),
)
DEFAULT_PLATFORM = "Website"


def category_from_name(name: str) -> ContentCategory | None:
    suffix = PurePosixPath(name.lower()).suffix
    if suffix in PDF_EXTENSIONS:
        return ContentCategory.PDF
    if suffix in IMAGE_EXTENSIONS:
        return ContentCategory.IMAGE
    return None


def _category_from_mime(mime_type: str) -> ContentCategory | None:
    mime = mime_type.lower()
    if "pdf" in mime:
        return ContentCategory.PDF
    if mime.startswith("image/"):
        return ContentCategory.IMAGE
    return None


def _hostname(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def category_from_url(url: str) -> ContentCategory:
    """Classify a link by hostname; non-http strings are ``unknown``."""
    if not url.lower().startswith("http"):
        return ContentCategory.UNKNOWN
    host = _hostname(url) or url.lower()
    for pattern, category in PLATFORM_CATEGORIES:
        if pattern in host:
            return category
    return ContentCategory.GENERIC_LINK


def detect(item: AnalysisInput) -> ContentCategory:
    """Assign a ContentCategory to *item*.

    Filename extension wins, then MIME type, then the URL hostname
    (for links, or for files that only carry an uploaded URL).
    """
    if isinstance(item, FileInput):
        category = category_from_name(item.name) or _category_from_mime(item.mime_type)
        if category is not None:
            return category
        if item.file_url:
            return category_from_name(urlparse(item.file_url).path) or category_from_url(item.file_url)
        logger.debug("No detection rule matched file %r", item.name)
        return ContentCategory.UNKNOWN

    category = category_from_url(item.url)
    if category is ContentCategory.UNKNOWN:
        logger.debug("No detection rule matched %r", item.url)
    return category


def detect_platform(url: str) -> str:
    """Human-readable platform label for *url* (``Website`` by default)."""
    host = _hostname(url)
    for patterns, label in PLATFORM_LABELS:
        if any(p in host for p in patterns):
            return label
    return DEFAULT_PLATFORM
