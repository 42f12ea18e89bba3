"""Tests for the analysis, portfolio and infra MCP tools."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

import portflow_mcp.tools.analysis as analysis_mod
import portflow_mcp.tools.infra as infra_mod
import portflow_mcp.tools.portfolio as portfolio_mod
from tests.conftest import unwrap_tool

portfolio_analyze = unwrap_tool(analysis_mod.portfolio_analyze)
portfolio_analyze_batch = unwrap_tool(analysis_mod.portfolio_analyze_batch)
analysis_service_analyze = unwrap_tool(analysis_mod.analysis_service_analyze)
portfolio_publish = unwrap_tool(portfolio_mod.portfolio_publish)
portfolio_fetch = unwrap_tool(portfolio_mod.portfolio_fetch)
infra_capabilities = unwrap_tool(infra_mod.infra_capabilities)
infra_configure = unwrap_tool(infra_mod.infra_configure)


@pytest.fixture(autouse=True)
def _fresh_state(clean_config, clean_gateway):
    yield


@pytest.fixture()
def no_model_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "")


@pytest.fixture()
def case_study_pdf(tmp_path):
    path = tmp_path / "Case_Study.pdf"
    path.write_bytes(b"%PDF-1.4 fake")
    return path


class TestPortfolioAnalyze:
    async def test_url_with_model(self, mock_gemini_client):
        mock_gemini_client["generate"].return_value = '{"title": "Widget Library", "description": "Reusable UI."}'

        out = await portfolio_analyze(url="https://github.com/acme/widget", fetch=False)

        assert out["success"] is True
        assert out["title"] == "Widget Library"
        assert out["method"] == "localAI"
        assert out["category"] == "github"
        assert out["url"] == "https://github.com/acme/widget"
        assert "trace" not in out

    async def test_file_offline(self, no_model_key, case_study_pdf):
        with patch("portflow_mcp.extractors.pdf.extract_pdf_text", return_value=""):
            out = await portfolio_analyze(file_path=str(case_study_pdf), notes="Client work")

        assert out["success"] is True
        assert out["category"] == "pdf"
        assert out["method"] == "heuristic"
        assert out["source"] == "Case_Study.pdf"
        assert out["file_name"] == "Case_Study.pdf"
        assert out["description"].endswith("Additional context: Client work")
        assert "file_data" not in out

    async def test_include_trace(self, no_model_key):
        out = await portfolio_analyze(url="https://acme.dev/portfolio", include_trace=True, fetch=False)
        assert out["trace"]["category"] == "genericLink"
        assert out["trace"]["attempts"][-1]["name"] == "heuristic"

    async def test_requires_exactly_one_source(self, case_study_pdf):
        out = await portfolio_analyze(url="https://acme.dev", file_path=str(case_study_pdf))
        assert out["success"] is False
        assert out["category"] == "API_INVALID_ARGUMENT"

        out = await portfolio_analyze()
        assert out["success"] is False

    async def test_missing_file(self, tmp_path):
        out = await portfolio_analyze(file_path=str(tmp_path / "nope.pdf"))
        assert out["category"] == "FILE_NOT_FOUND"


class TestPortfolioAnalyzeBatch:
    async def test_mixed_sources_keep_order(self, no_model_key, case_study_pdf, tmp_path):
        with patch("portflow_mcp.pipeline.extract", new_callable=AsyncMock, return_value=None):
            out = await portfolio_analyze_batch(
                urls=["https://github.com/acme/widget", "https://acme.dev/studio-site"],
                file_paths=[str(tmp_path / "missing.png"), str(case_study_pdf)],
            )

        assert out["total"] == 4
        assert out["successful"] == 3
        assert out["failed"] == 1
        sources = [i["source"] for i in out["items"]]
        assert sources[0] == "https://github.com/acme/widget"
        assert sources[2].endswith("missing.png")
        assert out["items"][2]["error"]
        assert out["items"][2]["result"] is None
        assert out["items"][0]["result"]["title"] == "Widget"
        assert out["items"][3]["result"]["category"] == "pdf"

    async def test_max_items(self, no_model_key):
        with patch("portflow_mcp.pipeline.extract", new_callable=AsyncMock, return_value=None):
            out = await portfolio_analyze_batch(
                urls=[f"https://acme.dev/{i}" for i in range(5)], max_items=2,
            )
        assert out["total"] == 2

    async def test_empty(self):
        out = await portfolio_analyze_batch()
        assert out["success"] is False


class TestAnalysisServiceAnalyze:
    async def test_missing_input(self):
        out = await analysis_service_analyze(file_name="a.pdf")
        assert out["status_code"] == 400
        assert out["success"] is False

    async def test_unreachable_link_uses_pattern_fallback(self):
        with patch(
            "portflow_mcp.service.fetch_page", new_callable=AsyncMock,
            side_effect=httpx.ConnectError("refused"),
        ):
            out = await analysis_service_analyze(file_url="https://acme.dev")

        assert out["status_code"] == 200
        assert out["title"] == "Web Link"
        assert out["fileType"] == "genericLink"


class TestPortfolioPublishFetch:
    async def test_publish_offline_then_fetch(self):
        items = json.dumps([
            {"title": "Widget", "description": "A widget library.", "category": "github",
             "url": "https://github.com/acme/widget"},
            {"title": "Case Study", "description": "Checkout redesign.",
             "extracted_preview": "Interviews with twelve shoppers..."},
        ])

        published = await portfolio_publish(items=items, title="Jane's Work")

        assert published["success"] is True
        assert published["method"] == "offline"
        assert published["url"] == f"http://localhost:8000/portfolio/{published['slug']}"
        assert published["portfolio"]["title"] == "Jane's Work"
        assert published["portfolio"]["description"] == "A showcase of my professional work"

        fetched = await portfolio_fetch(published["slug"])
        assert fetched["success"] is True
        assert [i["title"] for i in fetched["items"]] == ["Widget", "Case Study"]
        assert fetched["items"][0]["category"] == "github"
        assert fetched["items"][1]["extracted_preview"] == "Interviews with twelve shoppers..."

    async def test_publish_uploads_file(self, tmp_path):
        shot = tmp_path / "shot.png"
        shot.write_bytes(b"\x89PNG")

        published = await portfolio_publish(
            items=[{"title": "Login", "description": "Login screen.", "file_path": str(shot)}],
        )

        item = published["items"][0]
        assert item["file_name"] == "shot.png"
        assert item["file_url"].startswith("http://localhost:8000/files/")

    async def test_publish_rejects_empty_items(self):
        out = await portfolio_publish(items=[])
        assert out["success"] is False
        assert out["category"] == "API_INVALID_ARGUMENT"

    async def test_publish_rejects_blank_title(self):
        out = await portfolio_publish(items=[{"title": "", "description": "x"}])
        assert out["success"] is False

    async def test_fetch_unknown_slug(self):
        out = await portfolio_fetch("zzzz9999")
        assert out["success"] is False
        assert out["category"] == "PORTFOLIO_NOT_FOUND"


class TestInfraTools:
    async def test_capabilities(self):
        out = await infra_capabilities()
        assert out["advancedAI"] is True
        assert out["features"]["remoteAnalysis"] is False
        assert out["features"]["modelAnalysis"] is True
        assert out["features"]["fallbackAnalysis"] is True
        assert "unknown" not in out["supportedTypes"]

    async def test_capabilities_offline(self, no_model_key):
        out = await infra_capabilities()
        assert out["advancedAI"] is False
        assert out["features"]["imageVision"] is False

    async def test_configure_updates_runtime_config(self):
        out = await infra_configure(model="gemini-test", temperature=0.2, deployment_env="local")
        cfg = out["current_config"]
        assert cfg["default_model"] == "gemini-test"
        assert cfg["default_temperature"] == 0.2
        assert cfg["deployment_env"] == "local"
        assert out["capabilities"]["deploymentEnv"] == "local"

    async def test_configure_redacts_secrets(self, monkeypatch):
        monkeypatch.setenv("WEAVIATE_API_KEY", "weaviate-secret")
        monkeypatch.setenv("PORTFLOW_ANALYSIS_SERVICE_TOKEN", "svc-secret")

        cfg = (await infra_configure())["current_config"]

        assert "gemini_api_key" not in cfg
        assert "weaviate_api_key" not in cfg
        assert "analysis_service_token" not in cfg

    async def test_configure_invalid_temperature(self):
        out = await infra_configure(temperature=5.0)
        assert out["success"] is False
        assert out["category"] == "API_INVALID_ARGUMENT"
