"""Portfolio stores: Weaviate (remote) and SQLite (offline)."""

from .base import PortfolioStore, generate_slug, sanitize_file_name, storage_path
from .local import LocalPortfolioStore
from .weaviate import WeaviatePortfolioStore

__all__ = [
    "LocalPortfolioStore",
    "PortfolioStore",
    "WeaviatePortfolioStore",
    "generate_slug",
    "sanitize_file_name",
    "storage_path",
]
