"""Tests for retry logic with exponential backoff."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

import portflow_mcp.config as cfg_mod
from portflow_mcp.retry import _is_retryable, with_retry


@pytest.fixture(autouse=True)
def _clean_config():
    cfg_mod._config = None
    yield
    cfg_mod._config = None


class TestIsRetryable:
    @pytest.mark.parametrize("msg", [
        "429 Too Many Requests",
        "Quota exceeded for this project",
        "RESOURCE_EXHAUSTED: rate limit",
        "Request timeout after 30s",
        "503 Service Temporarily Unavailable",
    ])
    def test_transient_patterns(self, msg: str):
        assert _is_retryable(Exception(msg)) is True

    @pytest.mark.parametrize("msg", [
        "Invalid input: missing required field",
        "400 Bad Request",
        "Permission denied",
    ])
    def test_other_errors_not_retryable(self, msg: str):
        assert _is_retryable(Exception(msg)) is False


class TestWithRetry:
    @patch("portflow_mcp.retry.asyncio.sleep", new_callable=AsyncMock)
    async def test_success_first_attempt(self, mock_sleep):
        factory = AsyncMock(return_value="ok")

        assert await with_retry(factory) == "ok"
        factory.assert_awaited_once()
        mock_sleep.assert_not_awaited()

    @patch("portflow_mcp.retry.asyncio.sleep", new_callable=AsyncMock)
    async def test_recovers_after_transient_error(self, mock_sleep):
        factory = AsyncMock(side_effect=[Exception("429 rate limit"), "recovered"])

        assert await with_retry(factory) == "recovered"
        assert factory.await_count == 2
        mock_sleep.assert_awaited_once()

    @patch("portflow_mcp.retry.asyncio.sleep", new_callable=AsyncMock)
    async def test_exhausts_max_attempts(self, mock_sleep):
        factory = AsyncMock(side_effect=Exception("429 rate limit"))

        with pytest.raises(Exception, match="429 rate limit"):
            await with_retry(factory)

        assert factory.await_count == 3
        assert mock_sleep.await_count == 2

    @patch("portflow_mcp.retry.asyncio.sleep", new_callable=AsyncMock)
    async def test_non_retryable_raises_immediately(self, mock_sleep):
        factory = AsyncMock(side_effect=ValueError("invalid input"))

        with pytest.raises(ValueError, match="invalid input"):
            await with_retry(factory)

        factory.assert_awaited_once()
        mock_sleep.assert_not_awaited()

    @patch("portflow_mcp.retry.random.random", return_value=0.0)
    @patch("portflow_mcp.retry.asyncio.sleep", new_callable=AsyncMock)
    async def test_respects_config_delays(self, mock_sleep, _mock_random, monkeypatch):
        """base=0.5: 0.5, 1.0, then 2.0 capped at 1.5."""
        monkeypatch.setenv("PORTFLOW_RETRY_BASE_DELAY", "0.5")
        monkeypatch.setenv("PORTFLOW_RETRY_MAX_DELAY", "1.5")
        monkeypatch.setenv("PORTFLOW_RETRY_MAX_ATTEMPTS", "4")
        cfg_mod._config = None

        factory = AsyncMock(side_effect=[Exception("503")] * 3 + ["ok"])

        assert await with_retry(factory) == "ok"
        delays = [call.args[0] for call in mock_sleep.await_args_list]
        assert delays == [0.5, 1.0, 1.5]

    @patch("portflow_mcp.retry.random.random", return_value=0.0)
    @patch("portflow_mcp.retry.asyncio.sleep", new_callable=AsyncMock)
    async def test_explicit_settings_skip_config(self, mock_sleep, _mock_random):
        factory = AsyncMock(side_effect=[Exception("429")] * 2 + ["ok"])

        with patch("portflow_mcp.retry.get_config") as mock_cfg:
            assert await with_retry(factory, max_attempts=3, base_delay=0.25, max_delay=0.4) == "ok"

        mock_cfg.assert_not_called()
        assert [call.args[0] for call in mock_sleep.await_args_list] == [0.25, 0.4]
