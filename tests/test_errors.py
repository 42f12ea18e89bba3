"""Tests for structured error categorization and retryability flags."""

from __future__ import annotations

import httpx

from portflow_mcp.errors import (
    ModelResponseMalformed,
    PersistenceUnavailable,
    RemoteServiceError,
    make_tool_error,
)


class TestMakeToolError:
    def test_httpx_timeout_maps_to_network_error(self):
        result = make_tool_error(httpx.ReadTimeout("read timed out"))
        assert result["category"] == "NETWORK_ERROR"
        assert result["retryable"] is True

    def test_file_not_found(self):
        result = make_tool_error(FileNotFoundError("File not found: /tmp/x.pdf"))
        assert result["category"] == "FILE_NOT_FOUND"
        assert result["retryable"] is False
        assert result["success"] is False

    def test_remote_service_error(self):
        assert make_tool_error(RemoteServiceError("HTTP error! status: 502"))["category"] == "ANALYSIS_SERVICE_ERROR"

    def test_malformed_model_response(self):
        assert make_tool_error(ModelResponseMalformed("bad"))["category"] == "MODEL_RESPONSE_INVALID"

    def test_storage_unavailable_is_retryable(self):
        result = make_tool_error(PersistenceUnavailable("Weaviate down"))
        assert result["category"] == "STORAGE_UNAVAILABLE"
        assert result["retryable"] is True

    def test_portfolio_not_found(self):
        result = make_tool_error(LookupError("Portfolio not found: abc12345"))
        assert result["category"] == "PORTFOLIO_NOT_FOUND"

    def test_quota_sets_retry_after(self):
        result = make_tool_error(RuntimeError("429 RESOURCE_EXHAUSTED"))
        assert result["category"] == "API_QUOTA_EXCEEDED"
        assert result["retry_after_seconds"] == 60

    def test_value_error_is_invalid_argument(self):
        result = make_tool_error(ValueError("Provide exactly one of url or file_path"))
        assert result["category"] == "API_INVALID_ARGUMENT"

    def test_empty_message_uses_type_name(self):
        assert make_tool_error(RuntimeError())["error"] == "RuntimeError"

    def test_fallback_payload_attached(self):
        result = make_tool_error(RuntimeError("boom"), fallback={"title": "Analysis Failed"})
        assert result["fallback"] == {"title": "Analysis Failed"}
