"""Shared Gemini client pool used by the model strategy and the analysis service."""

from __future__ import annotations

import logging
from typing import Any

from google import genai
from google.genai import types

from .config import get_config
from .retry import with_retry

logger = logging.getLogger(__name__)


class GeminiClient:
    """Process-wide Gemini client pool (one client per API key)."""

    _clients: dict[str, genai.Client] = {}

    @classmethod
    def get(cls, api_key: str | None = None) -> genai.Client:
        """Return (or create) the shared client for *api_key*."""
        key = api_key or get_config().gemini_api_key
        if not key:
            raise ValueError("No Gemini API key — set GEMINI_API_KEY or pass api_key explicitly")
        if key not in cls._clients:
            cls._clients[key] = genai.Client(api_key=key)
            logger.info("Created Gemini client (key …%s)", key[-4:])
        return cls._clients[key]

    @classmethod
    async def generate(
        cls,
        contents: Any,
        *,
        api_key: str | None = None,
        model: str | None = None,
        system_instruction: str | None = None,
        response_schema: dict | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
        thinking_level: str | None = None,
        retry_max_attempts: int | None = None,
        retry_base_delay: float | None = None,
        retry_max_delay: float | None = None,
    ) -> str:
        """Generate text via Gemini, optionally constrained to JSON.

        Settings left as None are read from the process config.

        Args:
            contents: Prompt contents (text or multimodal parts).
            api_key: Credential override; defaults to the configured key.
            model: Model ID override (defaults to config's default_model).
            system_instruction: System-level instruction for the model.
            response_schema: JSON schema dict; switches the response to JSON.
            temperature: Sampling temperature override.
            max_output_tokens: Output cap override.
            thinking_level: Optional thinking depth for models that support it.
            retry_max_attempts: Attempt cap for transient errors.
            retry_base_delay: First backoff delay in seconds.
            retry_max_delay: Backoff ceiling in seconds.

        Returns:
            The model's text response with thinking parts stripped.
        """
        if temperature is None or not max_output_tokens or not model:
            cfg = get_config()
            temperature = cfg.default_temperature if temperature is None else temperature
            max_output_tokens = max_output_tokens or cfg.max_output_tokens
            model = model or cfg.default_model
        config = types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        )
        if thinking_level:
            config.thinking_config = types.ThinkingConfig(thinking_level=thinking_level)
        if system_instruction:
            config.system_instruction = system_instruction
        if response_schema:
            config.response_mime_type = "application/json"
            config.response_json_schema = response_schema

        client = cls.get(api_key)
        response = await with_retry(
            lambda: client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=config,
            ),
            max_attempts=retry_max_attempts,
            base_delay=retry_base_delay,
            max_delay=retry_max_delay,
        )

        parts = response.candidates[0].content.parts if response.candidates else []
        text_parts = [p.text for p in parts or [] if p.text and not getattr(p, "thought", False)]
        return "\n".join(text_parts) if text_parts else (response.text or "")

    @classmethod
    async def close_all(cls) -> int:
        """Shut down all shared clients. Returns count closed."""
        count = 0
        for client in list(cls._clients.values()):
            try:
                await client.aio.aclose()
            except Exception as exc:
                logger.debug("Gemini async client close failed: %s", exc)
            try:
                client.close()
            except Exception as exc:
                logger.debug("Gemini client close failed: %s", exc)
            count += 1
        cls._clients.clear()
        logger.info("Closed %d Gemini client(s)", count)
        return count
