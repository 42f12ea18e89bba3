"""Analysis service — server side of ``POST /api/analyze-file``.

The remote strategy of another deployment talks to this. It extracts
content itself (PDF text, page metadata, image bytes), asks Gemini for a
title and description, and substitutes a per-type fallback when the model
is unavailable or answers badly. Only a failure outside that path produces
a 500 with a generic ``fallback`` payload.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
import logging
import mimetypes
from pathlib import PurePosixPath
from urllib.parse import urlparse

import httpx
from google.genai import types

from .client import GeminiClient
from .config import get_config
from .detector import category_from_name, category_from_url
from .errors import ExtractionFailed
from .extractors.pdf import PDF_TEXT_LIMIT, extract_pdf_text
from .extractors.url import fetch_page, parse_html
from .models.analysis import ContentCategory, GeneratedText
from .prompts.portfolio import PORTFOLIO_WRITER_SYSTEM, SERVICE_IMAGE, SERVICE_LINK, SERVICE_PDF
from .text import strip_extension
from .url_policy import UrlPolicyError, fetch_checked

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100
MAX_DOWNLOAD_BYTES = 20 * 1024 * 1024

FAILURE_FALLBACK = {
    "title": "Analysis Failed",
    "description": "This file could not be analyzed due to a technical error",
}

# Used when the model call fails for an otherwise supported type.
TYPE_FALLBACKS: dict[ContentCategory, dict[str, str]] = {
    ContentCategory.PDF: {"title": "PDF Document", "description": "A PDF file that could not be analyzed"},
    ContentCategory.IMAGE: {"title": "Image File", "description": "An image that could not be analyzed"},
    ContentCategory.GITHUB: {"title": "GitHub Link", "description": "A link to a GitHub repository"},
    ContentCategory.FIGMA: {"title": "Figma Design", "description": "A link to a Figma design project"},
    ContentCategory.GENERIC_LINK: {"title": "Web Link", "description": "A link to an external website"},
}
DEFAULT_FALLBACK = {"title": "Unknown File", "description": "File could not be analyzed"}

# Used when a link has no fetchable metadata; never reaches the model.
LINK_PATTERN_FALLBACKS: dict[ContentCategory, dict[str, str]] = {
    ContentCategory.GITHUB: {
        "title": "GitHub Repository",
        "description": "A software development project hosted on GitHub",
    },
    ContentCategory.FIGMA: {
        "title": "Figma Design",
        "description": "A design project or prototype created in Figma",
    },
    ContentCategory.BEHANCE: {
        "title": "Behance Project",
        "description": "A creative project showcased on Behance",
    },
    ContentCategory.DRIBBBLE: {
        "title": "Dribbble Shot",
        "description": "A design concept or animation shared on Dribbble",
    },
}


class ServiceRequestError(ValueError):
    """The request body is unusable (400)."""


def detect_payload_type(file_url: str | None, file_name: str | None) -> ContentCategory:
    """Filename extension first, then the URL path, then the URL host."""
    if file_name:
        category = category_from_name(file_name)
        if category is not None:
            return category
    if file_url:
        by_path = category_from_name(PurePosixPath(urlparse(file_url).path).name)
        if by_path is not None:
            return by_path
        return category_from_url(file_url)
    return ContentCategory.UNKNOWN


def _decode_buffer(file_buffer: str) -> bytes:
    try:
        return base64.b64decode(file_buffer, validate=False)
    except (binascii.Error, ValueError) as exc:
        raise ServiceRequestError("fileBuffer is not valid base64") from exc


async def _download(url: str) -> bytes | None:
    cfg = get_config()
    try:
        return await fetch_checked(url, max_bytes=MAX_DOWNLOAD_BYTES, timeout=cfg.fetch_timeout_seconds)
    except (httpx.HTTPError, UrlPolicyError) as exc:
        logger.warning("Could not download %s: %s", url, exc)
        return None


async def _pdf_text(data: bytes | None) -> str | None:
    if not data:
        return None
    try:
        text = await asyncio.to_thread(extract_pdf_text, data, PDF_TEXT_LIMIT)
    except ExtractionFailed as exc:
        logger.warning("PDF extraction failed: %s", exc)
        return None
    return text or None


async def _link_metadata(url: str) -> dict[str, str | None]:
    try:
        parsed = parse_html(await fetch_page(url, get_config().fetch_timeout_seconds))
    except (httpx.HTTPError, UrlPolicyError) as exc:
        logger.warning("Link metadata extraction failed for %s: %s", url, exc)
        return {"title": None, "description": None, "url": url}
    return {
        "title": parsed["title"] or None,
        "description": parsed["meta_description"] or None,
        "url": url,
    }


async def _ask_model(contents: list) -> dict[str, str]:
    raw = await GeminiClient.generate(
        contents,
        system_instruction=PORTFOLIO_WRITER_SYSTEM,
        response_schema=GeneratedText.model_json_schema(),
    )
    if not raw:
        raise ValueError("No response from AI")
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse model response: %s", raw)
        raise ValueError("Invalid JSON response from AI") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Invalid JSON response from AI")
    return {
        "title": str(parsed.get("title") or "Untitled"),
        "description": str(parsed.get("description") or "No description available"),
    }


async def analyze_with_model(
    category: ContentCategory,
    *,
    file_url: str | None = None,
    file_name: str | None = None,
    extracted_text: str | None = None,
    metadata: dict[str, str | None] | None = None,
    image: bytes | None = None,
    image_mime: str = "image/jpeg",
) -> dict[str, str]:
    """Title and description for one payload; per-type fallback on model failure."""
    try:
        if category is ContentCategory.PDF:
            if not extracted_text:
                base_name = strip_extension(file_name) if file_name else "Document"
                return {
                    "title": f"PDF: {base_name}",
                    "description": (
                        f"A PDF document that couldn't be analyzed. Filename: {file_name or 'Unknown'}"
                    ),
                }
            return await _ask_model([SERVICE_PDF.format(text=extracted_text)])

        if category is ContentCategory.IMAGE:
            if not image:
                raise ValueError("Image bytes unavailable")
            part = types.Part.from_bytes(data=image, mime_type=image_mime)
            return await _ask_model([part, SERVICE_IMAGE])

        if category.is_link:
            if metadata and (metadata.get("title") or metadata.get("description")):
                prompt = SERVICE_LINK.format(
                    title=metadata.get("title") or "No title",
                    description=metadata.get("description") or "No description",
                    url=metadata.get("url") or file_url,
                )
                return await _ask_model([prompt])
            return dict(
                LINK_PATTERN_FALLBACKS.get(
                    category, {"title": "Web Link", "description": f"A link to {file_url}"},
                )
            )

        return {"title": "Unknown File", "description": "This file type could not be analyzed"}
    except Exception as exc:
        logger.error("AI analysis failed for %s: %s", category.value, exc)
        return dict(TYPE_FALLBACKS.get(category, DEFAULT_FALLBACK))


def _image_mime(file_name: str | None, file_url: str | None) -> str:
    mime, _ = mimetypes.guess_type(file_name or urlparse(file_url or "").path)
    return mime if mime and mime.startswith("image/") else "image/jpeg"


async def analyze_file_payload(payload: dict) -> tuple[int, dict]:
    """Handle one analyze-file request body.

    Args:
        payload: ``{fileName?, fileUrl?, fileBuffer?}`` with the buffer
            base64-encoded.

    Returns:
        ``(status_code, body)``; body always carries ``success``.
    """
    file_url = payload.get("fileUrl") or None
    file_name = payload.get("fileName") or None
    file_buffer = payload.get("fileBuffer") or None

    if not file_url and not file_buffer:
        return 400, {"success": False, "error": "fileUrl or fileBuffer is required"}

    try:
        category = detect_payload_type(file_url, file_name)
        data = _decode_buffer(file_buffer) if file_buffer else None

        extracted_text: str | None = None
        metadata: dict[str, str | None] | None = None
        image: bytes | None = None

        if category is ContentCategory.PDF:
            if data is None and file_url:
                data = await _download(file_url)
            extracted_text = await _pdf_text(data)
        elif category.is_link and file_url:
            metadata = await _link_metadata(file_url)
        elif category is ContentCategory.IMAGE:
            image = data if data is not None else (await _download(file_url) if file_url else None)

        result = await analyze_with_model(
            category,
            file_url=file_url,
            file_name=file_name,
            extracted_text=extracted_text,
            metadata=metadata,
            image=image,
            image_mime=_image_mime(file_name, file_url),
        )
    except ServiceRequestError as exc:
        return 400, {"success": False, "error": str(exc)}
    except Exception as exc:
        logger.error("Analysis failed: %s", exc)
        return 500, {"success": False, "error": str(exc), "fallback": dict(FAILURE_FALLBACK)}

    return 200, {
        "success": True,
        **result,
        "fileType": category.value,
        "extractedText": extracted_text[:PREVIEW_LENGTH] + "..." if extracted_text else None,
    }
