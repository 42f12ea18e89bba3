"""Local model strategy — category-specific prompt sent straight to Gemini."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable

from google.genai import types

from ..client import GeminiClient
from ..config import PipelineSettings
from ..errors import ModelResponseMalformed, ModelUnavailable, StrategyError
from ..models.analysis import (
    AnalysisMethod,
    AnalysisResult,
    ContentCategory,
    FileInput,
    GeneratedText,
    UrlInput,
)
from ..prompts.portfolio import (
    IMAGE_VISION,
    OCR_SUMMARY,
    PDF_SUMMARY,
    PORTFOLIO_WRITER_SYSTEM,
    URL_CONTENT_LIMIT,
    URL_SUMMARY,
    basic_prompt,
)
from .base import GenerationRequest, Strategy

logger = logging.getLogger(__name__)

FALLBACK_TITLE_LENGTH = 50

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

# What the prompt builders return: prompt contents plus the model to call.
PromptBuild = tuple[list, str]


def _notes(request: GenerationRequest) -> str:
    return request.input.notes.strip() or "None"


def _source_url(request: GenerationRequest) -> str:
    item = request.input
    return item.url if isinstance(item, UrlInput) else item.file_url


def _basic(request: GenerationRequest, settings: PipelineSettings) -> PromptBuild:
    item = request.input
    if isinstance(item, FileInput):
        prompt = basic_prompt(
            file_name=item.name, mime_type=item.mime_type, url=item.file_url, notes=item.notes,
        )
    else:
        prompt = basic_prompt(url=item.url, notes=item.notes)
    return [prompt], settings.model


def _pdf(request: GenerationRequest, settings: PipelineSettings) -> PromptBuild:
    doc = request.document
    if doc is None or doc.source != "text" or not isinstance(request.input, FileInput):
        return _basic(request, settings)
    prompt = PDF_SUMMARY.format(text=doc.text, file_name=request.input.name, notes=_notes(request))
    return [prompt], settings.model


def _image(request: GenerationRequest, settings: PipelineSettings) -> PromptBuild:
    item = request.input
    if not isinstance(item, FileInput):
        return _basic(request, settings)
    doc = request.document
    if doc is not None and doc.source == "text" and doc.text:
        prompt = OCR_SUMMARY.format(text=doc.text, file_name=item.name, notes=_notes(request))
        return [prompt], settings.model
    if not item.data:
        return _basic(request, settings)
    prompt = IMAGE_VISION.format(file_name=item.name, notes=_notes(request))
    image_part = types.Part.from_bytes(data=item.data, mime_type=item.mime_type or "image/jpeg")
    return [image_part, prompt], settings.vision_model


def _link(request: GenerationRequest, settings: PipelineSettings) -> PromptBuild:
    page = request.page
    if page is None or not page.fetched:
        return _basic(request, settings)
    prompt = URL_SUMMARY.format(
        url=_source_url(request),
        title=page.title or page.heuristic_title,
        description=page.meta_description or page.heuristic_description,
        content=page.body_snippet[:URL_CONTENT_LIMIT],
        notes=_notes(request),
    )
    return [prompt], settings.model


PROMPT_BUILDERS: dict[ContentCategory, Callable[[GenerationRequest, PipelineSettings], PromptBuild]] = {
    ContentCategory.PDF: _pdf,
    ContentCategory.IMAGE: _image,
    ContentCategory.GITHUB: _link,
    ContentCategory.FIGMA: _link,
    ContentCategory.BEHANCE: _link,
    ContentCategory.DRIBBBLE: _link,
    ContentCategory.GENERIC_LINK: _link,
}


def _title_from_text(text: str) -> str:
    for line in text.split("\n"):
        if "title" in line.lower() and ":" in line:
            return line.split(":")[1].strip().rstrip(",").replace('"', "").strip()
    return text.split("\n")[0].strip()[:FALLBACK_TITLE_LENGTH]


def parse_model_response(raw: str) -> GeneratedText:
    """Turn a model reply into a title and description.

    Strict JSON first. A reply that is not JSON falls back to line parsing:
    the title comes from a ``title: ...`` line (or the first line, capped at
    50 characters) and the description from the last non-empty line.

    Raises:
        ModelResponseMalformed: If neither approach yields both fields.
    """
    text = _FENCE_RE.sub("", (raw or "").strip())
    if not text:
        raise ModelResponseMalformed("Model returned an empty response")

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = None
        logger.warning("Model reply is not valid JSON, parsing lines instead")

    if data is not None:
        if not isinstance(data, dict):
            raise ModelResponseMalformed("Model JSON is not an object")
        title = str(data.get("title") or "").strip()
        description = str(data.get("description") or "").strip()
        if not title or not description:
            raise ModelResponseMalformed("Model JSON is missing title or description")
        return GeneratedText(title=title, description=description)

    lines = [line.strip() for line in text.split("\n") if line.strip()]
    title = _title_from_text(text)
    description = lines[-1] if lines else ""
    if not title or not description:
        raise ModelResponseMalformed("Could not recover title and description from model reply")
    return GeneratedText(title=title, description=description)


class ModelStrategy(Strategy):
    """Gemini-backed generation; requires a model credential."""

    name = "model"
    method = AnalysisMethod.LOCAL_AI

    def __init__(self, settings: PipelineSettings) -> None:
        self._settings = settings

    def available(self) -> bool:
        return bool(self._settings.model_credential)

    async def attempt(self, request: GenerationRequest) -> AnalysisResult:
        if not self.available():
            raise ModelUnavailable("No model credential configured")

        builder = PROMPT_BUILDERS.get(request.category, _basic)
        contents, model = builder(request, self._settings)

        try:
            raw = await GeminiClient.generate(
                contents,
                api_key=self._settings.model_credential,
                model=model,
                system_instruction=PORTFOLIO_WRITER_SYSTEM,
                response_schema=GeneratedText.model_json_schema(),
                temperature=self._settings.temperature,
                max_output_tokens=self._settings.max_output_tokens,
                retry_max_attempts=self._settings.retry_max_attempts,
                retry_base_delay=self._settings.retry_base_delay,
                retry_max_delay=self._settings.retry_max_delay,
            )
        except Exception as exc:
            raise StrategyError(f"Model call failed: {exc}") from exc

        generated = parse_model_response(raw)
        return AnalysisResult(
            title=generated.title,
            description=generated.description,
            category=request.category,
            method=self.method,
            extracted_preview=request.preview(),
        )
