"""Publish/fetch gateway — remote store first, offline store on failure.

Any remote write failure switches the whole publish to the offline store.
When the header was already created remotely, the offline copy keeps the
same id and slug, and fetch prefers it over the item-less remote header.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone

from .config import ServerConfig, get_config
from .errors import PersistenceUnavailable
from .models.portfolio import (
    FetchResult,
    PersistenceMethod,
    PortfolioItem,
    PortfolioMetadata,
    PortfolioRecord,
    PublishResult,
    StoredItem,
)
from .stores import LocalPortfolioStore, PortfolioStore, WeaviatePortfolioStore, generate_slug

logger = logging.getLogger(__name__)

NOT_FOUND_ERROR = "Portfolio not found"


class PortfolioGateway:
    """Publishes item collections and fetches them back by slug.

    Args:
        remote: Remote store, or None for offline-only operation.
        local: Offline store; always available.
        base_url: Origin used to build share URLs.
    """

    def __init__(
        self,
        remote: PortfolioStore | None,
        local: PortfolioStore,
        base_url: str = "http://localhost:8000",
    ) -> None:
        self.remote = remote
        self.local = local
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_config(cls, cfg: ServerConfig) -> PortfolioGateway:
        """Weaviate remote when WEAVIATE_URL is set, else offline only."""
        remote = WeaviatePortfolioStore(cfg.public_base_url) if cfg.weaviate_enabled else None
        local = LocalPortfolioStore(cfg.local_db_path, cfg.public_base_url)
        return cls(remote=remote, local=local, base_url=cfg.public_base_url)

    def share_url(self, slug: str) -> str:
        return f"{self.base_url}/portfolio/{slug}"

    @staticmethod
    def _new_record(metadata: PortfolioMetadata) -> PortfolioRecord:
        return PortfolioRecord(
            id=uuid.uuid4().hex,
            slug=generate_slug(),
            title=metadata.title,
            description=metadata.description,
            created_at=datetime.now(timezone.utc).isoformat(),
        )

    async def _save_items(
        self, store: PortfolioStore, portfolio_id: str, items: Sequence[PortfolioItem],
    ) -> list[StoredItem]:
        stored: list[StoredItem] = []
        for index, item in enumerate(items):
            file_url = item.file_url
            file_name = item.file_name
            if item.file_data:
                try:
                    file_url = await store.upload_file(
                        portfolio_id, item.file_name or item.source or item.id,
                        item.file_data, item.mime_type,
                    )
                except PersistenceUnavailable as exc:
                    logger.warning("File upload failed for %s (non-fatal): %s", item.file_name, exc)
            stored.append(StoredItem(
                id=item.id,
                portfolio_id=portfolio_id,
                sort_order=index,
                file_url=file_url,
                file_name=file_name,
                **item.content_fields(),
            ))
        return await store.insert_items(portfolio_id, stored)

    async def publish(
        self,
        items: Sequence[PortfolioItem],
        metadata: PortfolioMetadata | None = None,
    ) -> PublishResult:
        """Persist *items* as a new portfolio and return its share URL."""
        metadata = metadata or PortfolioMetadata()
        record = self._new_record(metadata)

        if self.remote is not None:
            try:
                record = await self.remote.create_portfolio(record)
            except PersistenceUnavailable as exc:
                logger.warning("Remote publish failed (%s), saving offline", exc)
            else:
                try:
                    stored = await self._save_items(self.remote, record.id, items)
                except PersistenceUnavailable as exc:
                    logger.warning(
                        "Items save failed after portfolio %s was created (%s), saving offline",
                        record.slug, exc,
                    )
                else:
                    return self._published(record, stored, "remote", "Portfolio published successfully!")

        await self.local.create_portfolio(record)
        stored = await self._save_items(self.local, record.id, items)
        return self._published(record, stored, "offline", "Portfolio saved offline - will sync when online")

    def _published(
        self,
        record: PortfolioRecord,
        stored: list[StoredItem],
        method: PersistenceMethod,
        message: str,
    ) -> PublishResult:
        return PublishResult(
            url=self.share_url(record.slug),
            slug=record.slug,
            method=method,
            portfolio=record,
            items=stored,
            message=message,
        )

    async def fetch(self, slug: str) -> FetchResult:
        """Load a published portfolio: remote first, offline on failure or miss."""
        if self.remote is not None:
            try:
                record = await self.remote.get_portfolio(slug)
                if record is not None:
                    items = await self.remote.get_items(record.id)
                    if items or await self.local.get_portfolio(slug) is None:
                        return FetchResult(success=True, method="remote", portfolio=record, items=items)
            except PersistenceUnavailable as exc:
                logger.warning("Remote fetch failed (%s), trying offline store", exc)

        record = await self.local.get_portfolio(slug)
        if record is None:
            return FetchResult(success=False, method="offline", error=NOT_FOUND_ERROR)
        items = await self.local.get_items(record.id)
        return FetchResult(success=True, method="offline", portfolio=record, items=items)

    async def read_file(self, path: str) -> tuple[bytes, str] | None:
        """Uploaded file payload by storage path, remote first."""
        if self.remote is not None:
            try:
                found = await self.remote.read_file(path)
                if found is not None:
                    return found
            except PersistenceUnavailable as exc:
                logger.warning("Remote file read failed (%s), trying offline store", exc)
        return await self.local.read_file(path)

    async def close(self) -> None:
        if self.remote is not None:
            await self.remote.close()
        await self.local.close()


_gateway: PortfolioGateway | None = None


def get_gateway() -> PortfolioGateway:
    """Process-wide gateway built from the current config."""
    global _gateway
    if _gateway is None:
        _gateway = PortfolioGateway.from_config(get_config())
    return _gateway


async def close_gateway() -> None:
    global _gateway
    if _gateway is not None:
        await _gateway.close()
        _gateway = None
