"""Infrastructure tools — 2 tools on a FastMCP sub-server."""

from __future__ import annotations

from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..config import get_config, update_config
from ..errors import make_tool_error
from ..models.analysis import ContentCategory
from ..pipeline import AnalysisOrchestrator
from ..tracing import trace
from ..types import DeploymentEnv

infra_server = FastMCP("infra")
_SENSITIVE_CONFIG_FIELDS = {
    "gemini_api_key",
    "analysis_service_token",
    "weaviate_api_key",
}


def _redacted_config() -> dict:
    """Return runtime config with secret-bearing fields removed."""
    return get_config().model_dump(exclude=_SENSITIVE_CONFIG_FIELDS)


def capabilities() -> dict:
    """What the current configuration can do."""
    cfg = get_config()
    settings = cfg.pipeline_settings()
    remote = AnalysisOrchestrator(settings).remote_available()
    model = bool(settings.model_credential)
    return {
        "advancedAI": remote or model,
        "supportedTypes": [c.value for c in ContentCategory if c is not ContentCategory.UNKNOWN],
        "features": {
            "remoteAnalysis": remote,
            "modelAnalysis": model,
            "pdfTextExtraction": settings.pdf_strategy == "text",
            "imageVision": model,
            "linkMetadata": True,
            "fallbackAnalysis": True,
            "remoteStorage": cfg.weaviate_enabled,
        },
        "deploymentEnv": settings.deployment_env,
    }


@infra_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=False))
@trace(name="infra_capabilities", span_type="TOOL")
async def infra_capabilities() -> dict:
    """Report analysis and storage capabilities of the running server.

    Returns:
        Dict with advancedAI, supportedTypes, features and deploymentEnv.
    """
    try:
        return capabilities()
    except Exception as exc:
        return make_tool_error(exc)


@infra_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
@trace(name="infra_configure", span_type="TOOL")
async def infra_configure(
    model: Annotated[str | None, Field(description="Gemini model ID override")] = None,
    temperature: Annotated[float | None, Field(ge=0.0, le=2.0, description="Sampling temperature")] = None,
    deployment_env: Annotated[DeploymentEnv | None, Field(
        description="Deployment environment; local and preview disable the analysis service",
    )] = None,
) -> dict:
    """Reconfigure the server at runtime.

    Changes take effect for all subsequent tool calls.

    Returns:
        Dict with current_config (secrets removed) and capabilities.
    """
    try:
        overrides: dict[str, object] = {}
        if model is not None:
            overrides["default_model"] = model
        if temperature is not None:
            overrides["default_temperature"] = temperature
        if deployment_env is not None:
            overrides["deployment_env"] = deployment_env
        if overrides:
            update_config(**overrides)
        return {"current_config": _redacted_config(), "capabilities": capabilities()}
    except Exception as exc:
        return make_tool_error(exc)
