"""Remote portfolio store on Weaviate.

Every blocking client call runs in ``asyncio.to_thread``. Any failure is
re-raised as PersistenceUnavailable so the gateway can fall back offline.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TypeVar

from weaviate.classes.query import Filter, Sort

from ..errors import PersistenceUnavailable
from ..models.portfolio import PortfolioRecord, StoredItem
from ..weaviate_client import WeaviateClient
from .base import PortfolioStore, storage_path

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_ITEMS = 500


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_datetime(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return _now()


def _as_iso(value: object) -> str:
    return value.isoformat() if isinstance(value, datetime) else str(value or "")


class WeaviatePortfolioStore(PortfolioStore):
    """Collections Portfolios, PortfolioItems and PortfolioFiles."""

    name = "remote"

    def __init__(self, base_url: str = "http://localhost:8000") -> None:
        self._base_url = base_url.rstrip("/")

    async def _run(self, op: str, fn: Callable[[], T]) -> T:
        try:
            return await asyncio.to_thread(fn)
        except PersistenceUnavailable:
            raise
        except Exception as exc:
            raise PersistenceUnavailable(f"Weaviate {op} failed: {exc}") from exc

    async def create_portfolio(self, record: PortfolioRecord) -> PortfolioRecord:
        def _insert() -> None:
            WeaviateClient.get().collections.get("Portfolios").data.insert(properties={
                "portfolio_id": record.id,
                "created_at": _as_datetime(record.created_at),
                "slug": record.slug,
                "title": record.title,
                "description": record.description,
                "is_public": record.is_public,
            })

        await self._run("create_portfolio", _insert)
        logger.info("Published portfolio %s to Weaviate", record.slug)
        return record

    async def insert_items(self, portfolio_id: str, items: list[StoredItem]) -> list[StoredItem]:
        created_at = _now()

        def _insert() -> None:
            collection = WeaviateClient.get().collections.get("PortfolioItems")
            result = collection.data.insert_many([
                {
                    "portfolio_id": portfolio_id,
                    "created_at": created_at,
                    "item_id": item.id,
                    "title": item.title,
                    "description": item.description,
                    "notes": item.notes,
                    "category": item.category,
                    "method": item.method,
                    "extracted_preview": item.extracted_preview or "",
                    "source": item.source,
                    "url": item.url or "",
                    "file_url": item.file_url or "",
                    "file_name": item.file_name or "",
                    "sort_order": item.sort_order,
                }
                for item in items
            ])
            if result.has_errors:
                raise PersistenceUnavailable(
                    f"Weaviate rejected {len(result.errors)} of {len(items)} item(s)"
                )

        await self._run("insert_items", _insert)
        return [i.model_copy(update={"portfolio_id": portfolio_id}) for i in items]

    async def upload_file(self, portfolio_id: str, file_name: str, data: bytes, mime_type: str) -> str:
        path = storage_path(portfolio_id, file_name)

        def _insert() -> None:
            WeaviateClient.get().collections.get("PortfolioFiles").data.insert(properties={
                "portfolio_id": portfolio_id,
                "created_at": _now(),
                "path": path,
                "mime_type": mime_type,
                "data": base64.b64encode(data).decode("ascii"),
            })

        await self._run("upload_file", _insert)
        return f"{self._base_url}/files/{path}"

    async def read_file(self, path: str) -> tuple[bytes, str] | None:
        def _query():
            collection = WeaviateClient.get().collections.get("PortfolioFiles")
            return collection.query.fetch_objects(
                filters=Filter.by_property("path").equal(path),
                limit=1,
                return_properties=["data", "mime_type"],
            )

        response = await self._run("read_file", _query)
        if not response.objects:
            return None
        props = response.objects[0].properties
        return base64.b64decode(props.get("data") or ""), str(props.get("mime_type") or "")

    async def get_portfolio(self, slug: str) -> PortfolioRecord | None:
        def _query():
            collection = WeaviateClient.get().collections.get("Portfolios")
            return collection.query.fetch_objects(
                filters=Filter.by_property("slug").equal(slug) & Filter.by_property("is_public").equal(True),
                limit=1,
            )

        response = await self._run("get_portfolio", _query)
        if not response.objects:
            return None
        props = response.objects[0].properties
        return PortfolioRecord(
            id=str(props.get("portfolio_id", "")),
            slug=str(props.get("slug", slug)),
            title=str(props.get("title", "")),
            description=str(props.get("description", "")),
            created_at=_as_iso(props.get("created_at")),
            is_public=bool(props.get("is_public", True)),
        )

    async def get_items(self, portfolio_id: str) -> list[StoredItem]:
        def _query():
            collection = WeaviateClient.get().collections.get("PortfolioItems")
            return collection.query.fetch_objects(
                filters=Filter.by_property("portfolio_id").equal(portfolio_id),
                sort=Sort.by_property("sort_order", ascending=True),
                limit=MAX_ITEMS,
            )

        response = await self._run("get_items", _query)
        items = []
        for obj in response.objects:
            p = obj.properties
            items.append(StoredItem(
                id=str(p.get("item_id") or obj.uuid),
                portfolio_id=portfolio_id,
                title=str(p.get("title", "")),
                description=str(p.get("description", "")),
                notes=str(p.get("notes") or ""),
                category=str(p.get("category") or "unknown"),
                method=str(p.get("method") or "heuristic"),
                extracted_preview=p.get("extracted_preview") or None,
                source=str(p.get("source") or ""),
                url=p.get("url") or None,
                file_url=p.get("file_url") or None,
                file_name=p.get("file_name") or None,
                sort_order=int(p.get("sort_order") or 0),
            ))
        return items

    async def close(self) -> None:
        await WeaviateClient.aclose()
