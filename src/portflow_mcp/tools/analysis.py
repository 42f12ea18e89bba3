"""Analysis tools — 3 tools on a FastMCP sub-server."""

from __future__ import annotations

import logging
from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..config import get_config
from ..errors import make_tool_error
from ..models.analysis import AnalysisInput, AnalysisResult, FileInput, UrlInput
from ..models.batch import BatchAnalysisItem, BatchAnalysisResult
from ..models.portfolio import PortfolioItem
from ..pipeline import AnalysisOrchestrator
from ..service import FAILURE_FALLBACK, analyze_file_payload
from ..tracing import trace
from ..types import NotesParam

logger = logging.getLogger(__name__)

analysis_server = FastMCP("analysis")


def _orchestrator(fetch: bool = True) -> AnalysisOrchestrator:
    return AnalysisOrchestrator(get_config().pipeline_settings(), fetch=fetch)


def _build_input(url: str | None, file_path: str | None, notes: str) -> AnalysisInput:
    if bool(url) == bool(file_path):
        raise ValueError("Provide exactly one of url or file_path")
    if file_path:
        return FileInput.from_path(file_path, notes=notes)
    return UrlInput(url=url, notes=notes)


def _to_item(item: AnalysisInput, result: AnalysisResult) -> PortfolioItem:
    if isinstance(item, FileInput):
        return PortfolioItem.from_result(
            result, source=item.name, notes=item.notes, file_name=item.name, mime_type=item.mime_type,
        )
    return PortfolioItem.from_result(result, source=item.url, notes=item.notes, url=item.url)


@analysis_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
@trace(name="portfolio_analyze", span_type="TOOL")
async def portfolio_analyze(
    url: Annotated[str | None, Field(
        description="Project link to analyze (GitHub, Figma, Behance, Dribbble, any website)",
    )] = None,
    file_path: Annotated[str | None, Field(description="Path to a local PDF or image file")] = None,
    notes: NotesParam = "",
    include_trace: Annotated[bool, Field(
        description="Include which strategies ran and why they failed",
    )] = False,
    fetch: Annotated[bool, Field(description="Allow fetching the linked page")] = True,
) -> dict:
    """Generate a portfolio title and description for one file or link.

    Tries the analysis service, then Gemini, then filename/URL heuristics;
    always returns a usable title and description.

    Args:
        url: Project link (GitHub, Figma, Behance, Dribbble, any website).
        file_path: Local PDF or image file.
        notes: Optional context appended to the description.
        include_trace: Add the strategy attempt log to the response.
        fetch: Whether link analysis may download the page.

    Returns:
        Dict with the portfolio item (id, title, description, category,
        method, source) and optionally ``trace``.
    """
    try:
        item = _build_input(url, file_path, notes)
        result, analysis_trace = await _orchestrator(fetch).analyze_traced(item)
    except Exception as exc:
        return make_tool_error(exc)

    payload = {"success": True, **_to_item(item, result).model_dump(mode="json")}
    if include_trace:
        payload["trace"] = analysis_trace.model_dump(mode="json")
    return payload


@analysis_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
@trace(name="portfolio_analyze_batch", span_type="TOOL")
async def portfolio_analyze_batch(
    urls: Annotated[list[str] | None, Field(description="Project links to analyze")] = None,
    file_paths: Annotated[list[str] | None, Field(description="Local files to analyze")] = None,
    notes: NotesParam = "",
    concurrency: Annotated[int, Field(ge=1, le=10, description="Parallel analyses")] = 3,
    max_items: Annotated[int, Field(ge=1, le=50, description="Maximum sources to process")] = 20,
) -> dict:
    """Analyze several files and links concurrently.

    Files that cannot be read are reported per item; the rest are analyzed
    with bounded concurrency and returned in submission order.

    Returns:
        Dict matching BatchAnalysisResult.
    """
    sources: list[tuple[str, str]] = [("url", u) for u in urls or []]
    sources += [("file", p) for p in file_paths or []]
    if not sources:
        return make_tool_error(ValueError("Provide urls or file_paths"))
    sources = sources[:max_items]

    slots: list[BatchAnalysisItem] = []
    inputs: list[AnalysisInput] = []
    positions: list[int] = []
    for kind, value in sources:
        try:
            item = UrlInput(url=value, notes=notes) if kind == "url" else FileInput.from_path(value, notes=notes)
        except Exception as exc:
            slots.append(BatchAnalysisItem(source=value, error=str(exc)))
            continue
        positions.append(len(slots))
        slots.append(BatchAnalysisItem(source=value))
        inputs.append(item)

    results = await _orchestrator().analyze_many(inputs, concurrency=concurrency)
    for pos, result in zip(positions, results):
        slots[pos].result = result

    failed = sum(1 for s in slots if s.error)
    return BatchAnalysisResult(
        total=len(slots), successful=len(slots) - failed, failed=failed, items=slots,
    ).model_dump(mode="json")


@analysis_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
@trace(name="analysis_service_analyze", span_type="TOOL")
async def analysis_service_analyze(
    file_name: Annotated[str | None, Field(description="Original file name")] = None,
    file_url: Annotated[str | None, Field(description="Public URL of the file or link")] = None,
    file_buffer: Annotated[str | None, Field(description="Base64-encoded file bytes")] = None,
) -> dict:
    """Run the analysis service directly (same as POST /api/analyze-file).

    Returns:
        The service response body plus ``status_code``.
    """
    try:
        status, body = await analyze_file_payload(
            {"fileName": file_name, "fileUrl": file_url, "fileBuffer": file_buffer}
        )
    except Exception as exc:
        return make_tool_error(exc, fallback=dict(FAILURE_FALLBACK))
    return {"status_code": status, **body}
