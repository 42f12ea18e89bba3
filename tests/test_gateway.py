"""Tests for publish/fetch with remote-first, offline-fallback persistence."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from portflow_mcp.config import ServerConfig
from portflow_mcp.errors import PersistenceUnavailable
from portflow_mcp.gateway import PortfolioGateway, get_gateway
from portflow_mcp.models.analysis import AnalysisMethod, AnalysisResult, ContentCategory
from portflow_mcp.models.portfolio import PortfolioItem, PortfolioMetadata
from portflow_mcp.pipeline import AnalysisOrchestrator
from portflow_mcp.stores import LocalPortfolioStore, WeaviatePortfolioStore


def _item(title: str = "Widget", **kwargs) -> PortfolioItem:
    result = AnalysisResult(
        title=title, description=f"{title} description.",
        category=ContentCategory.GITHUB, method=AnalysisMethod.HEURISTIC,
    )
    return PortfolioItem.from_result(result, source="https://github.com/acme/widget", **kwargs)


@pytest.fixture()
def local():
    store = LocalPortfolioStore(":memory:", "https://p.example.com")
    yield store
    store._conn.close()


@pytest.fixture()
def remote():
    """Remote store double whose methods are all AsyncMocks."""
    store = AsyncMock(spec=WeaviatePortfolioStore)
    store.create_portfolio.side_effect = lambda record: record
    store.insert_items.side_effect = lambda pid, items: items
    store.upload_file.return_value = "https://p.example.com/files/remote/path.png"
    store.get_portfolio.return_value = None
    store.get_items.return_value = []
    return store


class TestOfflineOnly:
    async def test_publish_then_fetch(self, local):
        gateway = PortfolioGateway(None, local, "https://p.example.com/")
        items = [_item("First"), _item("Second", notes="team project")]

        published = await gateway.publish(items, PortfolioMetadata(title="Jane's Work"))

        assert published.method == "offline"
        assert published.message == "Portfolio saved offline - will sync when online"
        assert published.url == f"https://p.example.com/portfolio/{published.slug}"

        fetched = await gateway.fetch(published.slug)
        assert fetched.success is True
        assert fetched.method == "offline"
        assert fetched.portfolio.title == "Jane's Work"
        assert [i.content_fields() for i in fetched.items] == [i.content_fields() for i in items]
        assert [i.id for i in fetched.items] == [i.id for i in items]

    async def test_analyzed_items_round_trip(self, local, offline_settings, pdf_input, github_input):
        orchestrator = AnalysisOrchestrator(offline_settings, fetch=False)
        with patch("portflow_mcp.extractors.pdf.extract_pdf_text", return_value=""):
            pdf_result = await orchestrator.analyze(pdf_input)
        link_result = await orchestrator.analyze(github_input)
        items = [
            PortfolioItem.from_result(pdf_result, source=pdf_input.name, file_name=pdf_input.name),
            PortfolioItem.from_result(link_result, source=github_input.url, url=github_input.url),
        ]
        assert items[0].extracted_preview

        gateway = PortfolioGateway(None, local)
        fetched = await gateway.fetch((await gateway.publish(items)).slug)

        assert [i.content_fields() for i in fetched.items] == [i.content_fields() for i in items]

    async def test_default_metadata(self, local):
        published = await PortfolioGateway(None, local).publish([_item()])
        assert published.portfolio.title == "My Creative Portfolio"

    async def test_file_is_uploaded_with_item(self, local):
        gateway = PortfolioGateway(None, local, "https://p.example.com")
        item = _item(file_name="shot.png", file_data=b"\x89PNG", mime_type="image/png")

        published = await gateway.publish([item])

        file_url = published.items[0].file_url
        assert file_url.startswith("https://p.example.com/files/")
        path = file_url.split("/files/", 1)[1]
        assert await gateway.read_file(path) == (b"\x89PNG", "image/png")

    async def test_fetch_missing(self, local):
        result = await PortfolioGateway(None, local).fetch("zzzz9999")
        assert result.success is False
        assert result.error == "Portfolio not found"


class TestRemoteFirst:
    async def test_remote_success(self, local, remote):
        gateway = PortfolioGateway(remote, local)
        published = await gateway.publish([_item()])

        assert published.method == "remote"
        assert published.message == "Portfolio published successfully!"
        assert await local.get_portfolio(published.slug) is None

    async def test_remote_failure_falls_back_offline(self, local, remote):
        remote.create_portfolio.side_effect = PersistenceUnavailable("Weaviate down")
        gateway = PortfolioGateway(remote, local)

        published = await gateway.publish([_item()])

        assert published.method == "offline"
        assert (await local.get_portfolio(published.slug)) is not None
        fetched = await gateway.fetch(published.slug)
        assert fetched.method == "offline"
        assert fetched.items[0].title == "Widget"

    async def test_items_failure_saves_offline_under_same_slug(self, local, remote):
        remote.insert_items.side_effect = PersistenceUnavailable("rejected")
        gateway = PortfolioGateway(remote, local)
        items = [_item("First"), _item("Second")]

        published = await gateway.publish(items)

        assert published.method == "offline"
        assert published.message == "Portfolio saved offline - will sync when online"
        assert [i.title for i in published.items] == ["First", "Second"]
        created = remote.create_portfolio.call_args.args[0]
        assert published.slug == created.slug
        assert (await local.get_portfolio(published.slug)).id == created.id

        remote.get_portfolio.return_value = created
        remote.get_items.return_value = []
        fetched = await gateway.fetch(published.slug)
        assert fetched.method == "offline"
        assert [i.title for i in fetched.items] == ["First", "Second"]

    async def test_upload_failure_is_not_fatal(self, local, remote):
        remote.upload_file.side_effect = PersistenceUnavailable("blob too big")
        item = _item(file_name="a.png", file_data=b"x", mime_type="image/png")

        published = await PortfolioGateway(remote, local).publish([item])

        assert published.method == "remote"
        assert published.items[0].file_url is None
        assert published.items[0].file_name == "a.png"

    async def test_fetch_prefers_remote(self, local, remote):
        remote.get_portfolio.return_value = None
        published = await PortfolioGateway(None, local).publish([_item()])

        fetched = await PortfolioGateway(remote, local).fetch(published.slug)

        remote.get_portfolio.assert_awaited_once_with(published.slug)
        assert fetched.method == "offline"

    async def test_fetch_serves_remote_items(self, local, remote):
        published = await PortfolioGateway(remote, local).publish([_item("First")])
        remote.get_portfolio.return_value = published.portfolio
        remote.get_items.return_value = published.items

        fetched = await PortfolioGateway(remote, local).fetch(published.slug)

        assert fetched.method == "remote"
        assert [i.title for i in fetched.items] == ["First"]

    async def test_fetch_remote_error_falls_back(self, local, remote):
        remote.get_portfolio.side_effect = PersistenceUnavailable("timeout")
        result = await PortfolioGateway(remote, local).fetch("zzzz9999")
        assert result.success is False
        assert result.method == "offline"


class TestGatewaySingleton:
    def test_from_config_offline(self, tmp_path):
        cfg = ServerConfig(local_db_path=str(tmp_path / "p.db"), public_base_url="https://p.example.com")
        gateway = PortfolioGateway.from_config(cfg)
        assert gateway.remote is None
        assert gateway.share_url("abc") == "https://p.example.com/portfolio/abc"

    def test_from_config_with_weaviate(self, tmp_path):
        cfg = ServerConfig(
            local_db_path=str(tmp_path / "p.db"), weaviate_url="http://localhost:8080", weaviate_enabled=True,
        )
        assert isinstance(PortfolioGateway.from_config(cfg).remote, WeaviatePortfolioStore)

    def test_get_gateway_is_cached(self, clean_config, clean_gateway):
        assert get_gateway() is get_gateway()
