"""Portfolio tools — publish and fetch, 2 tools on a FastMCP sub-server."""

from __future__ import annotations

from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..errors import make_tool_error
from ..gateway import get_gateway
from ..models.portfolio import PortfolioItemInput, PortfolioMetadata
from ..tracing import trace
from ..types import PortfolioSlug, coerce_json_param

portfolio_server = FastMCP("portfolio")

_DEFAULTS = PortfolioMetadata()


@portfolio_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    )
)
@trace(name="portfolio_publish", span_type="TOOL")
async def portfolio_publish(
    items: Annotated[list[dict] | str, Field(
        description="Portfolio items: objects with title, description and optional notes, "
        "category, method, extracted_preview, source, url, file_path (as returned by portfolio_analyze)",
    )],
    title: Annotated[str | None, Field(description="Portfolio title")] = None,
    description: Annotated[str | None, Field(description="Portfolio description")] = None,
) -> dict:
    """Publish items as a shareable read-only portfolio.

    Saves to the remote store when configured and reachable, otherwise to
    the local offline store. Files named by ``file_path`` are uploaded.

    Args:
        items: Items to publish, in display order.
        title: Portfolio title (default "My Creative Portfolio").
        description: Portfolio blurb.

    Returns:
        Dict with success, url, slug, method ("remote" or "offline"),
        portfolio record and stored items.
    """
    try:
        raw_items = coerce_json_param(items, list)
        if not isinstance(raw_items, list) or not raw_items:
            raise ValueError("items must be a non-empty list of objects")
        portfolio_items = [PortfolioItemInput.model_validate(i).to_item() for i in raw_items]
        metadata = PortfolioMetadata(
            title=title or _DEFAULTS.title,
            description=description or _DEFAULTS.description,
        )
        result = await get_gateway().publish(portfolio_items, metadata)
        return result.model_dump(mode="json")
    except Exception as exc:
        return make_tool_error(exc)


@portfolio_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
@trace(name="portfolio_fetch", span_type="TOOL")
async def portfolio_fetch(slug: PortfolioSlug) -> dict:
    """Fetch a published portfolio and its items by share slug.

    Args:
        slug: The 8-character slug from the share URL.

    Returns:
        Dict with success, method, portfolio and items, or an error.
    """
    try:
        result = await get_gateway().fetch(slug)
    except Exception as exc:
        return make_tool_error(exc)
    if not result.success:
        return make_tool_error(LookupError(f"{result.error}: {slug}"))
    return result.model_dump(mode="json")
