"""String helpers shared by extractors and strategies.

Everything here is pure and network-free; the heuristic strategy is built
only from these functions so it cannot fail.
"""

from __future__ import annotations

import math
import re

MAX_TITLE_LENGTH = 60

_SEPARATORS_RE = re.compile(r"[-_]+")
_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_EXTENSION_RE = re.compile(r"\.[^/.]+$")

# Checked in order; first keyword hit wins.
_PROJECT_CONTEXTS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("web", "website"), "web development project"),
    (("app", "mobile"), "application development"),
    (("brand", "logo"), "branding project"),
    (("ui", "interface"), "interface design"),
    (("graphic", "design"), "design project"),
)
DEFAULT_PROJECT_CONTEXT = "creative project"


def humanize(text: str | None) -> str:
    """Turn ``my-cool_projectName`` into ``My Cool Project Name``.

    Separators become spaces, camelCase boundaries are split, whitespace is
    collapsed and every word is capitalised. Applying it twice gives the
    same string as applying it once.

    Examples:
        >>> humanize("UX_Research_Notes")
        'Ux Research Notes'
        >>> humanize("widget")
        'Widget'
    """
    if not text:
        return ""
    spaced = _SEPARATORS_RE.sub(" ", text)
    spaced = _CAMEL_BOUNDARY_RE.sub(" ", spaced)
    return " ".join(word.capitalize() for word in spaced.split())


def strip_extension(file_name: str) -> str:
    """Drop the last ``.ext`` from *file_name*."""
    return _EXTENSION_RE.sub("", file_name)


def title_from_filename(file_name: str) -> str:
    return humanize(strip_extension(file_name))


def truncate_title(title: str, max_length: int = MAX_TITLE_LENGTH) -> str:
    """Truncate at a word boundary, not mid-word.

    A single word longer than *max_length* is cut and ellipsised.
    """
    title = " ".join(title.split())
    if len(title) <= max_length:
        return title
    truncated = title[:max_length]
    last_space = truncated.rfind(" ")
    if last_space == -1:
        return title[: max_length - 3] + "..."
    return truncated[:last_space].rstrip()


def format_file_size(size: int | None) -> str:
    """Readable size like ``1.5 KB``; ``Unknown size`` when missing."""
    if not size:
        return "Unknown size"
    units = ("Bytes", "KB", "MB", "GB")
    i = min(int(math.floor(math.log(size, 1024))), len(units) - 1)
    value = round(size / (1024 ** i), 2)
    if value == int(value):
        value = int(value)
    return f"{value} {units[i]}"


def project_context(notes: str | None) -> str:
    """Phrase describing the kind of project, guessed from user notes."""
    if not notes:
        return DEFAULT_PROJECT_CONTEXT
    lowered = notes.lower()
    for keywords, phrase in _PROJECT_CONTEXTS:
        if any(k in lowered for k in keywords):
            return phrase
    return DEFAULT_PROJECT_CONTEXT


def append_notes(description: str, notes: str | None) -> str:
    """Append user notes as an ``Additional context`` clause."""
    cleaned = (notes or "").strip()
    if not cleaned:
        return description
    return f"{description.rstrip()} Additional context: {cleaned}"


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split())
