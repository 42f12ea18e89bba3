"""Load credentials from a shared ``.env`` file.

Reads ``~/.config/portflow-mcp/.env`` and injects variables that are not
already set in the process environment. Model and storage credentials
usually live there so every MCP host sees the same capabilities.
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_ENV_PATH = Path.home() / ".config" / "portflow-mcp" / ".env"


def _is_unset_or_placeholder(key: str, value: str | None) -> bool:
    """Return True when the current env value should be treated as unset.

    Blank values and unresolved self-placeholders such as ``${GEMINI_API_KEY}``
    count as unset.
    """
    if value is None:
        return True

    normalized = value.strip()
    if len(normalized) >= 2 and normalized[0] == normalized[-1] and normalized[0] in ('"', "'"):
        normalized = normalized[1:-1].strip()
    if not normalized:
        return True

    if normalized in {f"${key}", f"${{{key}}}"}:
        return True
    return normalized.startswith(f"${{{key}:-") and normalized.endswith("}")


def parse_dotenv(path: Path) -> dict[str, str]:
    """Parse ``KEY=VALUE`` lines from *path*.

    Handles quoted values, ``export`` prefixes, blank lines and ``#``
    comments. Values are not expanded.
    """
    result: dict[str, str] = {}
    if not path.is_file():
        return result

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :]
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]
        if key:
            result[key] = value
    return result


def load_dotenv(path: Path | None = None) -> dict[str, str]:
    """Inject vars from *path* into ``os.environ`` where currently unset.

    Args:
        path: ``.env`` file location. Defaults to :data:`DEFAULT_ENV_PATH`.

    Returns:
        The vars that were actually injected.
    """
    if path is None:
        path = DEFAULT_ENV_PATH
    injected: dict[str, str] = {}
    for key, value in parse_dotenv(path).items():
        if _is_unset_or_placeholder(key, os.environ.get(key)):
            os.environ[key] = value
            injected[key] = value
    return injected
