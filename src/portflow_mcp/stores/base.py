"""Portfolio store capability interface and shared naming helpers."""

from __future__ import annotations

import re
import secrets
import string
import time
from abc import ABC, abstractmethod

from ..models.portfolio import PortfolioRecord, StoredItem

SLUG_LENGTH = 8
SLUG_ALPHABET = string.ascii_lowercase + string.digits

_UNSAFE_NAME_RE = re.compile(r"[^a-zA-Z0-9.-]")


def generate_slug(length: int = SLUG_LENGTH) -> str:
    """Random share slug over ``[a-z0-9]``."""
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(length))


def sanitize_file_name(name: str) -> str:
    """Lower-case *name* with anything outside ``[a-zA-Z0-9.-]`` as ``_``."""
    return _UNSAFE_NAME_RE.sub("_", name).lower()


def storage_path(portfolio_id: str, file_name: str, timestamp_ms: int | None = None) -> str:
    """``{portfolio_id}/{timestamp_ms}_{sanitized_name}``."""
    ts = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return f"{portfolio_id}/{ts}_{sanitize_file_name(file_name)}"


class PortfolioStore(ABC):
    """What the gateway needs from a backing store.

    Remote implementations raise ``PersistenceUnavailable`` on any failure
    so the gateway can switch to the local store.
    """

    name: str = "store"

    @abstractmethod
    async def create_portfolio(self, record: PortfolioRecord) -> PortfolioRecord:
        ...

    @abstractmethod
    async def insert_items(self, portfolio_id: str, items: list[StoredItem]) -> list[StoredItem]:
        ...

    @abstractmethod
    async def upload_file(self, portfolio_id: str, file_name: str, data: bytes, mime_type: str) -> str:
        """Store a file payload and return its public URL."""

    @abstractmethod
    async def read_file(self, path: str) -> tuple[bytes, str] | None:
        """Return ``(data, mime_type)`` for a stored path, or None."""

    @abstractmethod
    async def get_portfolio(self, slug: str) -> PortfolioRecord | None:
        ...

    @abstractmethod
    async def get_items(self, portfolio_id: str) -> list[StoredItem]:
        """Items of a portfolio ordered by ``sort_order``."""

    async def close(self) -> None:
        return None
