"""PDF extraction — pdfplumber text with a filename-vocabulary fallback.

Both strategies return DocumentContent. The text strategy caps output at
PDF_TEXT_LIMIT characters so downstream prompts stay a predictable size.
"""

from __future__ import annotations

import asyncio
import io
import logging

import pdfplumber

from ..errors import ExtractionFailed
from ..models.analysis import DocumentContent, FileInput
from ..text import format_file_size

logger = logging.getLogger(__name__)

PDF_TEXT_LIMIT = 2000

# (filename keywords, kind, description template, hints). First hit wins.
PDF_VOCABULARY: tuple[tuple[tuple[str, ...], str, str, tuple[str, ...]], ...] = (
    (
        ("resume", "cv"), "resume",
        "Professional resume/CV document ({size}). Contains career experience, skills, education, "
        "and professional accomplishments. Well-structured presentation of qualifications and expertise.",
        ("career", "professional", "skills", "experience"),
    ),
    (
        ("portfolio",), "portfolio",
        "Design portfolio document ({size}). Showcases creative work, project case studies, and design "
        "expertise. Features professional project presentations and creative achievements.",
        ("creative", "design", "projects", "visual"),
    ),
    (
        ("proposal", "pitch"), "proposal",
        "Project proposal document ({size}). Contains project overview, methodology, timeline, and "
        "deliverables. Professional business document outlining project scope and approach.",
        ("business", "project", "strategy", "planning"),
    ),
    (
        ("report", "analysis"), "report",
        "Professional report document ({size}). Contains detailed analysis, findings, and "
        "recommendations. Structured presentation of research and insights.",
        ("analysis", "research", "findings", "professional"),
    ),
    (
        ("presentation", "deck", "slides"), "presentation",
        "Presentation document ({size}). Contains slide-based content with visual presentations and "
        "key information. Professional presentation materials.",
        ("presentation", "visual", "communication", "slides"),
    ),
    (
        ("contract", "agreement"), "contract",
        "Contract or agreement document ({size}). Contains legal or business terms, conditions, and "
        "formal documentation.",
        ("legal", "business", "formal", "terms"),
    ),
    (
        ("manual", "guide", "instructions"), "manual",
        "Manual or guide document ({size}). Contains instructions, procedures, and detailed "
        "documentation. Educational or reference material.",
        ("instructions", "guide", "reference", "educational"),
    ),
)

_DEFAULT_DESCRIPTION = (
    "Professional PDF document ({size}). Contains structured content and detailed information "
    "demonstrating expertise and attention to detail."
)
_DEFAULT_HINTS = ("professional", "document", "content")


def classify_pdf_name(file_name: str) -> tuple[str, str, tuple[str, ...]]:
    """Return ``(kind, description_template, hints)`` for a PDF filename."""
    lowered = file_name.lower()
    for keywords, kind, template, hints in PDF_VOCABULARY:
        if any(k in lowered for k in keywords):
            return kind, template, hints
    return "document", _DEFAULT_DESCRIPTION, _DEFAULT_HINTS


def analyze_pdf_name(file_name: str, size: int | None = None) -> DocumentContent:
    """Heuristic PDF summary from the filename alone."""
    kind, template, hints = classify_pdf_name(file_name)
    return DocumentContent(
        kind=kind,
        text=template.format(size=format_file_size(size)),
        hints=list(hints),
        source="heuristic",
    )


def extract_pdf_text(data: bytes, limit: int = PDF_TEXT_LIMIT) -> str:
    """Extract plain text from PDF bytes, truncated to *limit* characters.

    Blocking; call through ``asyncio.to_thread`` from async code.

    Raises:
        ExtractionFailed: If pdfplumber cannot parse the document.
    """
    pages: list[str] = []
    collected = 0
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            for page in pdf.pages:
                page_text = page.extract_text() or ""
                if page_text.strip():
                    pages.append(page_text.strip())
                    collected += len(page_text)
                if collected >= limit:
                    break
    except Exception as exc:
        raise ExtractionFailed(f"PDF text extraction failed: {exc}") from exc
    return "\n\n".join(pages)[:limit]


async def extract_pdf(item: FileInput, strategy: str = "text") -> DocumentContent:
    """Summarise a PDF upload using the selected strategy.

    The text strategy falls back to the filename heuristic when the document
    has no extractable text or cannot be parsed.
    """
    heuristic = analyze_pdf_name(item.name, item.size)
    if strategy != "text" or not item.data:
        return heuristic

    try:
        text = await asyncio.to_thread(extract_pdf_text, item.data)
    except ExtractionFailed as exc:
        logger.warning("%s; using filename heuristic for %s", exc, item.name)
        return heuristic

    if not text.strip():
        logger.info("No extractable text in %s, using filename heuristic", item.name)
        return heuristic

    return DocumentContent(kind=heuristic.kind, text=text, hints=heuristic.hints, source="text")
