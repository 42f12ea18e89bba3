"""Exponential backoff retry for transient model API errors."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .config import get_config

logger = logging.getLogger(__name__)

T = TypeVar("T")

_RETRYABLE_PATTERNS: tuple[str, ...] = (
    "429",
    "quota",
    "resource_exhausted",
    "timeout",
    "503",
    "service unavailable",
)


def _is_retryable(exc: Exception) -> bool:
    """Check if an exception message matches known transient patterns."""
    msg = str(exc).lower()
    return any(p in msg for p in _RETRYABLE_PATTERNS)


async def with_retry(
    coro_factory: Callable[[], Awaitable[T]],
    *,
    max_attempts: int | None = None,
    base_delay: float | None = None,
    max_delay: float | None = None,
) -> T:
    """Execute an async callable with exponential backoff on transient errors.

    Args:
        coro_factory: Zero-arg callable that returns a fresh awaitable each attempt.
        max_attempts: Attempt cap; defaults to the configured value.
        base_delay: First backoff delay in seconds; defaults to the configured value.
        max_delay: Backoff ceiling in seconds; defaults to the configured value.

    Returns:
        The result of the first successful call.

    Raises:
        The last exception if all attempts are exhausted or non-retryable.
    """
    if max_attempts is None or base_delay is None or max_delay is None:
        cfg = get_config()
        max_attempts = cfg.retry_max_attempts if max_attempts is None else max_attempts
        base_delay = cfg.retry_base_delay if base_delay is None else base_delay
        max_delay = cfg.retry_max_delay if max_delay is None else max_delay

    for attempt in range(max_attempts):
        try:
            return await coro_factory()
        except Exception as exc:
            if not _is_retryable(exc) or attempt == max_attempts - 1:
                raise
            delay = min(base_delay * (2 ** attempt) + random.random(), max_delay)
            logger.warning(
                "Retry %d/%d after %.1fs: %s", attempt + 1, max_attempts, delay, exc,
            )
            await asyncio.sleep(delay)
    raise RuntimeError("with_retry called with retry_max_attempts < 1")
