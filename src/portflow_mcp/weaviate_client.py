"""Weaviate client singleton for the remote portfolio store.

Lazily connects on first use and idempotently creates the portfolio
collections from weaviate_schema.ALL_COLLECTIONS. All calls are blocking;
the store wraps them in ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from urllib.parse import urlparse

import weaviate
from weaviate.classes.config import Configure, DataType, Property
from weaviate.classes.init import AdditionalConfig, Auth, Timeout

from .config import get_config
from .weaviate_schema import CollectionDef, PropertyDef

logger = logging.getLogger(__name__)

_client: weaviate.WeaviateClient | None = None
_schema_ensured = False
_lock = threading.Lock()

_DATA_TYPE_MAP: dict[str, DataType] = {
    "text": DataType.TEXT,
    "int": DataType.INT,
    "boolean": DataType.BOOL,
    "date": DataType.DATE,
    "blob": DataType.BLOB,
}

_TIMEOUT = Timeout(init=10, query=30, insert=60)
_ADDITIONAL_CONFIG = AdditionalConfig(timeout=_TIMEOUT)


def _to_property(prop_def: PropertyDef) -> Property:
    data_type = _DATA_TYPE_MAP.get(prop_def.data_type[0])
    if data_type is None:
        raise ValueError(f"Unknown data type: {prop_def.data_type[0]!r}")
    kwargs: dict = {
        "name": prop_def.name,
        "data_type": data_type,
        "description": prop_def.description or None,
        "skip_vectorization": prop_def.skip_vectorization,
        "index_filterable": prop_def.index_filterable,
        "index_range_filters": prop_def.index_range_filters,
    }
    if prop_def.index_searchable is not None:
        kwargs["index_searchable"] = prop_def.index_searchable
    return Property(**kwargs)


def _connect(url: str, api_key: str) -> weaviate.WeaviateClient:
    """Local instances by host, WCS for https, custom deployment otherwise."""
    parsed = urlparse(url)
    host = parsed.hostname or ""
    auth = Auth.api_key(api_key) if api_key else None

    if host in ("localhost", "127.0.0.1", "::1") or host.startswith("192.168."):
        port = parsed.port or 8080
        return weaviate.connect_to_local(
            host=host, port=port, grpc_port=port + 1, additional_config=_ADDITIONAL_CONFIG,
        )

    if parsed.scheme == "https":
        return weaviate.connect_to_weaviate_cloud(
            cluster_url=url, auth_credentials=auth, additional_config=_ADDITIONAL_CONFIG,
        )

    port = parsed.port or 8080
    return weaviate.connect_to_custom(
        http_host=host,
        http_port=port,
        http_secure=False,
        grpc_host=host,
        grpc_port=port + 1,
        grpc_secure=False,
        auth_credentials=auth,
        additional_config=_ADDITIONAL_CONFIG,
    )


class WeaviateClient:
    """Process-wide Weaviate client (single cluster, not a pool)."""

    @classmethod
    def get(cls) -> weaviate.WeaviateClient:
        """Return (or create) the shared client; thread-safe.

        Raises:
            ValueError: If WEAVIATE_URL is not configured.
        """
        global _client, _schema_ensured
        cfg = get_config()
        if not cfg.weaviate_url:
            raise ValueError("WEAVIATE_URL not configured")

        with _lock:
            if _client is None:
                _client = _connect(cfg.weaviate_url, cfg.weaviate_api_key)
                logger.info("Connected to Weaviate at %s", cfg.weaviate_url)
            if not _schema_ensured:
                cls.ensure_collections()
                _schema_ensured = True
        return _client

    @classmethod
    def ensure_collections(cls) -> None:
        """Create missing collections; add missing properties to existing ones."""
        from .weaviate_schema import ALL_COLLECTIONS

        if _client is None:
            return

        existing = set(_client.collections.list_all().keys())
        for col_def in ALL_COLLECTIONS:
            if col_def.name not in existing:
                _client.collections.create(
                    name=col_def.name,
                    description=col_def.description,
                    properties=[_to_property(p) for p in col_def.properties],
                    vector_config=Configure.Vectors.text2vec_weaviate(),
                )
                logger.info("Created Weaviate collection: %s", col_def.name)
            else:
                cls._evolve_collection(col_def)

    @classmethod
    def _evolve_collection(cls, col_def: CollectionDef) -> None:
        col = _client.collections.get(col_def.name)
        existing_props = {p.name for p in col.config.get().properties}
        for prop_def in col_def.properties:
            if prop_def.name in existing_props:
                continue
            try:
                col.config.add_property(_to_property(prop_def))
                logger.info("Added property %s.%s", col_def.name, prop_def.name)
            except Exception as exc:
                logger.debug("Property %s.%s already exists or failed: %s", col_def.name, prop_def.name, exc)

    @classmethod
    def close(cls) -> None:
        global _client, _schema_ensured
        with _lock:
            if _client is not None:
                try:
                    _client.close()
                except Exception as exc:
                    logger.debug("Weaviate close failed: %s", exc)
                _client = None
                _schema_ensured = False
                logger.info("Closed Weaviate client")

    @classmethod
    async def aclose(cls) -> None:
        await asyncio.to_thread(cls.close)

    @classmethod
    def reset(cls) -> None:
        """Drop singleton state without closing (tests)."""
        global _client, _schema_ensured
        _client = None
        _schema_ensured = False
