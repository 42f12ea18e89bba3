"""Tests for Pydantic models."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from portflow_mcp.models.analysis import (
    AnalysisInput,
    AnalysisMethod,
    AnalysisResult,
    ContentCategory,
    FileInput,
    PageContent,
    UrlInput,
)
from portflow_mcp.models.batch import BatchAnalysisItem, BatchAnalysisResult
from portflow_mcp.models.portfolio import PortfolioItem, PortfolioItemInput


class TestAnalysisModels:
    def test_file_input_from_path(self, tmp_path):
        path = tmp_path / "deck.pdf"
        path.write_bytes(b"%PDF-1.4")

        item = FileInput.from_path(path, notes="Pitch deck")

        assert item.name == "deck.pdf"
        assert item.mime_type == "application/pdf"
        assert item.size == 8
        assert item.notes == "Pitch deck"

    def test_file_input_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            FileInput.from_path(tmp_path / "nope.pdf")

    def test_inputs_are_frozen(self):
        item = UrlInput(url="  https://acme.dev  ")
        assert item.url == "https://acme.dev"
        with pytest.raises(ValidationError):
            item.url = "https://other.dev"

    def test_discriminated_union(self):
        adapter = TypeAdapter(AnalysisInput)
        assert isinstance(adapter.validate_python({"kind": "url", "url": "https://acme.dev"}), UrlInput)
        assert isinstance(adapter.validate_python({"kind": "file", "name": "a.png"}), FileInput)
        with pytest.raises(ValidationError):
            adapter.validate_python({"kind": "video", "url": "x"})

    def test_result_rejects_blank_text(self):
        with pytest.raises(ValidationError):
            AnalysisResult(
                title="   ", description="ok",
                category=ContentCategory.PDF, method=AnalysisMethod.HEURISTIC,
            )

    def test_result_strips_text(self):
        result = AnalysisResult(
            title=" Widget ", description=" A repo. ",
            category=ContentCategory.GITHUB, method=AnalysisMethod.LOCAL_AI,
        )
        assert result.model_dump(mode="json") == {
            "title": "Widget", "description": "A repo.",
            "category": "github", "method": "localAI", "extracted_preview": None,
        }

    def test_link_categories(self):
        assert ContentCategory.FIGMA.is_link
        assert not ContentCategory.PDF.is_link
        assert not ContentCategory.UNKNOWN.is_link

    def test_page_content_fetched(self):
        assert PageContent().fetched is False
        assert PageContent(title="Acme").fetched is True


class TestPortfolioModels:
    def test_item_input_with_file(self, tmp_path):
        shot = tmp_path / "login.png"
        shot.write_bytes(b"\x89PNG")

        item = PortfolioItemInput(title="Login", description="Login UI.", file_path=str(shot)).to_item()

        assert item.file_data == b"\x89PNG"
        assert item.mime_type == "image/png"
        assert item.file_name == "login.png"
        assert item.source == "login.png"
        assert "file_data" not in item.model_dump()

    def test_item_input_keeps_id(self):
        item = PortfolioItemInput(id="fixed", title="A", description="B").to_item()
        assert item.id == "fixed"
        assert PortfolioItemInput(title="A", description="B").to_item().id != "fixed"

    def test_item_input_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PortfolioItemInput(title="A", description="B", file_path=str(tmp_path / "x.png")).to_item()

    def test_item_from_result(self):
        result = AnalysisResult(
            title="Widget", description="A repo.",
            category=ContentCategory.GITHUB, method=AnalysisMethod.HEURISTIC,
        )
        item = PortfolioItem.from_result(result, source="https://github.com/acme/widget", notes="OSS")
        assert item.content_fields() == {
            "title": "Widget", "description": "A repo.", "notes": "OSS",
            "category": "github", "method": "heuristic", "extracted_preview": None,
            "source": "https://github.com/acme/widget", "url": None,
        }


class TestBatchModels:
    def test_batch_item_error(self):
        item = BatchAnalysisItem(source="missing.pdf", error="File not found")
        assert item.result is None

    def test_batch_result_counts(self):
        out = BatchAnalysisResult(total=2, successful=1, failed=1)
        assert out.model_dump()["items"] == []
