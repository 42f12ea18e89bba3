"""Tests for GeminiClient.generate()."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

from portflow_mcp.client import GeminiClient


def _client(reply: str) -> MagicMock:
    part = MagicMock(text=reply, thought=False)
    response = MagicMock()
    response.candidates[0].content.parts = [part]
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=response)
    return client


class TestGenerate:
    async def test_explicit_settings_do_not_read_config(self):
        """Every setting passed in: the process config is never consulted."""
        client = _client('{"title": "T"}')
        with (
            patch.object(GeminiClient, "get", return_value=client),
            patch("portflow_mcp.client.get_config") as client_cfg,
            patch("portflow_mcp.retry.get_config") as retry_cfg,
        ):
            text = await GeminiClient.generate(
                "prompt", api_key="k", model="m-1", temperature=0.1, max_output_tokens=128,
                retry_max_attempts=2, retry_base_delay=0.5, retry_max_delay=2.0,
            )

        assert text == '{"title": "T"}'
        client_cfg.assert_not_called()
        retry_cfg.assert_not_called()
        kwargs = client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "m-1"
        assert kwargs["config"].temperature == 0.1
        assert kwargs["config"].max_output_tokens == 128

    async def test_missing_settings_fall_back_to_config(self, clean_config):
        client = _client("ok")
        with patch.object(GeminiClient, "get", return_value=client):
            await GeminiClient.generate("prompt", system_instruction="Be brief.")

        kwargs = client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-3-flash-preview"
        assert kwargs["config"].temperature == 0.7
        assert kwargs["config"].system_instruction == "Be brief."
