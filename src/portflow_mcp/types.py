"""Shared type aliases and helpers for tool parameters."""

from __future__ import annotations

import json
from typing import Annotated, Literal

from pydantic import Field


def coerce_json_param(value: str | dict | list | None, expected_type: type) -> dict | list | None:
    """Parse MCP JSON-RPC string params back to dict/list.

    MCP clients sometimes send dict/list params as JSON strings, which
    pydantic v2 rejects. Non-JSON strings are returned unchanged.
    """
    if not isinstance(value, str):
        return value
    try:
        parsed = json.loads(value)
    except (json.JSONDecodeError, TypeError):
        return value
    return parsed if isinstance(parsed, expected_type) else value


# ── Literal enums ────────────────────────────────────────────────────────────

DeploymentEnv = Literal["production", "preview", "local"]

# ── Annotated aliases ────────────────────────────────────────────────────────

NotesParam = Annotated[str, Field(
    max_length=2000, description="Optional context appended to the generated description",
)]
PortfolioSlug = Annotated[str, Field(
    min_length=1, max_length=64, pattern=r"^[a-z0-9]+$", description="Share slug of a published portfolio",
)]
