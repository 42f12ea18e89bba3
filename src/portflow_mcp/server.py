"""Main FastMCP server — mounts all sub-servers and the HTTP routes."""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from . import tracing
from .client import GeminiClient
from .config import get_config
from .gateway import close_gateway, get_gateway
from .service import analyze_file_payload
from .tools.analysis import analysis_server
from .tools.infra import infra_server
from .tools.portfolio import portfolio_server
from .weaviate_client import WeaviateClient

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


@asynccontextmanager
async def _lifespan(server: FastMCP):
    """Startup/shutdown hook — tracing setup, then shared client teardown."""
    tracing.setup()
    yield {}
    await close_gateway()
    await WeaviateClient.aclose()
    closed = await GeminiClient.close_all()
    tracing.shutdown()
    logger.info("Lifespan shutdown: closed %d client(s)", closed)


app = FastMCP(
    "portflow",
    instructions=(
        "Portfolio builder — turns files and links into portfolio titles and "
        "descriptions (analysis service, Gemini, or heuristics) and publishes "
        "them as shareable read-only portfolios."
    ),
    lifespan=_lifespan,
)

app.mount(analysis_server)
app.mount(portfolio_server)
app.mount(infra_server)


def _authorized(request: Request) -> bool:
    token = get_config().analysis_service_token
    return not token or request.headers.get("authorization") == f"Bearer {token}"


@app.custom_route("/api/analyze-file", methods=["POST", "OPTIONS"])
async def analyze_file_route(request: Request) -> Response:
    """HTTP face of the analysis service."""
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)
    if not _authorized(request):
        return JSONResponse({"success": False, "error": "Unauthorized"}, status_code=401, headers=CORS_HEADERS)
    try:
        payload = await request.json()
    except json.JSONDecodeError:
        return JSONResponse(
            {"success": False, "error": "Request body must be JSON"}, status_code=400, headers=CORS_HEADERS,
        )
    if not isinstance(payload, dict):
        payload = {}
    status, body = await analyze_file_payload(payload)
    return JSONResponse(body, status_code=status, headers=CORS_HEADERS)


@app.custom_route("/files/{path:path}", methods=["GET"])
async def file_route(request: Request) -> Response:
    """Serve an uploaded portfolio file by storage path."""
    found = await get_gateway().read_file(request.path_params["path"])
    if found is None:
        return JSONResponse({"error": "File not found"}, status_code=404)
    data, mime_type = found
    return Response(content=data, media_type=mime_type or "application/octet-stream")


def main() -> None:
    """Entry-point for ``portflow-mcp`` console script."""
    cfg = get_config()
    if cfg.transport == "http":
        app.run(transport="http", host=cfg.http_host, port=cfg.http_port)
    else:
        app.run()


if __name__ == "__main__":
    main()
