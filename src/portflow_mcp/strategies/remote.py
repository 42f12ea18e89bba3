"""Remote analysis strategy — delegate to the analysis service endpoint."""

from __future__ import annotations

import base64
import logging

import httpx

from ..config import PipelineSettings
from ..errors import RemoteServiceError, RemoteServiceUnavailable
from ..models.analysis import AnalysisMethod, AnalysisResult, FileInput
from .base import GenerationRequest, Strategy

logger = logging.getLogger(__name__)

ANALYZE_PATH = "/api/analyze-file"


def endpoint_url(base: str) -> str:
    """Accept either the service root or the full analyze-file URL."""
    base = base.rstrip("/")
    return base if base.endswith(ANALYZE_PATH) else base + ANALYZE_PATH


def build_payload(request: GenerationRequest) -> dict:
    """Request body for ``POST /api/analyze-file``.

    An uploaded copy's URL is preferred; raw bytes are only sent
    (base64) when no URL exists.
    """
    item = request.input
    if isinstance(item, FileInput):
        payload: dict = {"fileName": item.name, "fileUrl": item.file_url or None}
        if not item.file_url and item.data:
            payload["fileBuffer"] = base64.b64encode(item.data).decode("ascii")
        return payload
    return {"fileName": None, "fileUrl": item.url}


class RemoteAnalysisStrategy(Strategy):
    """Highest-fidelity link: the analysis service does its own extraction."""

    name = "remote"
    method = AnalysisMethod.REMOTE_AI

    def __init__(self, settings: PipelineSettings) -> None:
        self._settings = settings

    def available(self) -> bool:
        s = self._settings
        return s.remote_service_enabled and bool(s.remote_service_url) and not s.is_local_preview

    async def attempt(self, request: GenerationRequest) -> AnalysisResult:
        if not self.available():
            raise RemoteServiceUnavailable("Analysis service not available in this environment")

        headers = {"Content-Type": "application/json"}
        if self._settings.remote_service_token:
            headers["Authorization"] = f"Bearer {self._settings.remote_service_token}"

        url = endpoint_url(self._settings.remote_service_url)
        try:
            async with httpx.AsyncClient(timeout=self._settings.remote_service_timeout) as client:
                resp = await client.post(url, json=build_payload(request), headers=headers)
        except httpx.TransportError as exc:
            raise RemoteServiceUnavailable(f"Analysis service unreachable: {exc}") from exc

        if resp.status_code >= 400:
            raise RemoteServiceError(_error_message(resp))

        try:
            data = resp.json()
        except ValueError as exc:
            raise RemoteServiceError("Analysis service returned a non-JSON body") from exc

        if not isinstance(data, dict) or not data.get("success"):
            error = data.get("error") if isinstance(data, dict) else None
            raise RemoteServiceError(error or "Analysis failed")

        title = str(data.get("title") or "").strip()
        description = str(data.get("description") or "").strip()
        if not title or not description:
            raise RemoteServiceError("Analysis service response is missing title or description")

        logger.debug("Analysis service answered for %s input", request.category.value)
        return AnalysisResult(
            title=title,
            description=description,
            category=request.category,
            method=self.method,
            extracted_preview=data.get("extractedText") or request.preview(),
        )


def _error_message(resp: httpx.Response) -> str:
    message = f"HTTP error! status: {resp.status_code}"
    try:
        body = resp.json()
    except ValueError:
        return resp.reason_phrase or message
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return message
