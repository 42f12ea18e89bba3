"""Shared test fixtures for portflow-mcp."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from portflow_mcp.config import PipelineSettings
from portflow_mcp.models.analysis import FileInput, UrlInput


def unwrap_tool(tool: Any) -> Any:
    """Extract the raw coroutine from a FastMCP FunctionTool, if wrapped.

    FastMCP 2.x wraps @server.tool functions in FunctionTool (not callable).
    FastMCP 3.x preserves the original function. This helper works with both.
    """
    return getattr(tool, "fn", tool)


@pytest.fixture(autouse=True, scope="session")
def _unwrap_fastmcp_tools():
    """Patch tool modules so FunctionTool objects become directly callable."""
    import importlib
    import pkgutil

    import portflow_mcp.tools as tools_pkg

    modules = []
    for info in pkgutil.walk_packages(tools_pkg.__path__, tools_pkg.__name__ + "."):
        try:
            modules.append(importlib.import_module(info.name))
        except Exception:
            pass

    for mod in modules:
        for name in list(vars(mod)):
            obj = getattr(mod, name, None)
            if obj is not None and hasattr(obj, "fn") and not callable(obj):
                setattr(mod, name, obj.fn)


@pytest.fixture(autouse=True)
def _set_dummy_api_key(monkeypatch):
    """Ensure tests never hit real Gemini API."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key-not-real")


@pytest.fixture(autouse=True)
def _disable_tracing(monkeypatch):
    """Disable MLflow tracing in all tests to avoid real tracking-server calls."""
    monkeypatch.setenv("PORTFLOW_TRACING_ENABLED", "false")


@pytest.fixture(autouse=True)
def _isolate_dotenv(tmp_path, monkeypatch):
    """Prevent tests from loading the user's real ~/.config/portflow-mcp/.env."""
    monkeypatch.setattr(
        "portflow_mcp.dotenv.DEFAULT_ENV_PATH",
        tmp_path / "nonexistent.env",
    )


@pytest.fixture(autouse=True)
def _isolate_local_db(tmp_path, monkeypatch):
    """Keep the offline store out of the user's cache directory."""
    monkeypatch.setenv("PORTFLOW_LOCAL_DB", str(tmp_path / "portfolios.db"))
    monkeypatch.delenv("WEAVIATE_URL", raising=False)
    monkeypatch.delenv("PORTFLOW_ANALYSIS_SERVICE_URL", raising=False)


@pytest.fixture()
def clean_config():
    """Reset the config singleton between tests."""
    import portflow_mcp.config as cfg_mod

    cfg_mod._config = None
    yield
    cfg_mod._config = None


@pytest.fixture()
def clean_gateway():
    """Reset the gateway singleton between tests."""
    import portflow_mcp.gateway as gw_mod

    gw_mod._gateway = None
    yield
    gw = gw_mod._gateway
    gw_mod._gateway = None
    if gw is not None:
        gw.local._conn.close()


@pytest.fixture()
def mock_gemini_client():
    """Patch GeminiClient.get() and .generate() for unit tests."""
    with (
        patch("portflow_mcp.client.GeminiClient.get") as mock_get,
        patch(
            "portflow_mcp.client.GeminiClient.generate", new_callable=AsyncMock
        ) as mock_gen,
    ):
        client = MagicMock()
        mock_get.return_value = client
        yield {"get": mock_get, "generate": mock_gen, "client": client}


@pytest.fixture()
def offline_settings():
    """No remote service, no model credential: heuristics only."""
    return PipelineSettings(model_credential="")


@pytest.fixture()
def model_settings():
    """Model credential set, remote service off."""
    return PipelineSettings(model_credential="test-key-not-real")


@pytest.fixture()
def remote_settings():
    """Remote service enabled in production alongside a model credential."""
    return PipelineSettings(
        remote_service_enabled=True,
        remote_service_url="https://analysis.example.com",
        remote_service_token="svc-token",
        model_credential="test-key-not-real",
    )


@pytest.fixture()
def pdf_input():
    return FileInput(name="UX_Research_Notes.pdf", mime_type="application/pdf", data=b"%PDF-1.4 fake")


@pytest.fixture()
def github_input():
    return UrlInput(url="https://github.com/acme/widget")


@pytest.fixture()
def mock_weaviate_client():
    """Patch WeaviateClient for unit tests — provides mock client + collection."""
    mock_client = MagicMock()
    mock_collection = MagicMock()
    mock_client.collections.get.return_value = mock_collection
    mock_client.collections.list_all.return_value = {}

    mock_collection.data.insert.return_value = "test-uuid-1234"
    mock_collection.data.insert_many.return_value = MagicMock(has_errors=False, errors={})
    mock_collection.query.fetch_objects.return_value = MagicMock(objects=[])

    with (
        patch("portflow_mcp.weaviate_client._client", mock_client),
        patch("portflow_mcp.weaviate_client._schema_ensured", True),
        patch("portflow_mcp.weaviate_client.WeaviateClient.get", return_value=mock_client),
    ):
        yield {
            "client": mock_client,
            "collection": mock_collection,
        }
