"""SQLite-backed offline portfolio store with WAL mode."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from ..models.portfolio import PortfolioRecord, StoredItem
from .base import PortfolioStore, storage_path

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS portfolios (
    id TEXT PRIMARY KEY,
    slug TEXT NOT NULL UNIQUE,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL,
    is_public INTEGER NOT NULL DEFAULT 1
);
CREATE TABLE IF NOT EXISTS portfolio_items (
    id TEXT NOT NULL,
    portfolio_id TEXT NOT NULL,
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    notes TEXT NOT NULL DEFAULT '',
    category TEXT NOT NULL DEFAULT 'unknown',
    method TEXT NOT NULL DEFAULT 'heuristic',
    source TEXT NOT NULL DEFAULT '',
    url TEXT,
    file_url TEXT,
    file_name TEXT,
    sort_order INTEGER NOT NULL DEFAULT 0,
    extracted_preview TEXT,
    PRIMARY KEY (portfolio_id, id)
);
CREATE TABLE IF NOT EXISTS portfolio_files (
    path TEXT PRIMARY KEY,
    portfolio_id TEXT NOT NULL,
    mime_type TEXT NOT NULL DEFAULT '',
    data BLOB NOT NULL
);
"""

_ITEM_COLUMNS = (
    "id, portfolio_id, title, description, notes, category, method, "
    "source, url, file_url, file_name, sort_order, extracted_preview"
)


class LocalPortfolioStore(PortfolioStore):
    """Offline store: one SQLite file holds portfolios, items and file blobs.

    Calls are synchronous under the hood; each statement completes in well
    under a millisecond, so they run inline on the event loop.
    """

    name = "offline"

    def __init__(self, db_path: str, base_url: str = "http://localhost:8000") -> None:
        path = Path(db_path).expanduser().resolve() if db_path != ":memory:" else None
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(path) if path else ":memory:")
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")
        self._conn.executescript(_SCHEMA)
        self._migrate()
        self._base_url = base_url.rstrip("/")

    def _migrate(self) -> None:
        """Add columns introduced after the initial schema."""
        columns = {row[1] for row in self._conn.execute("PRAGMA table_info(portfolio_items)")}
        if "extracted_preview" not in columns:
            self._conn.execute("ALTER TABLE portfolio_items ADD COLUMN extracted_preview TEXT")
            self._conn.commit()

    async def create_portfolio(self, record: PortfolioRecord) -> PortfolioRecord:
        self._conn.execute(
            "INSERT INTO portfolios (id, slug, title, description, created_at, is_public) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (record.id, record.slug, record.title, record.description, record.created_at,
             int(record.is_public)),
        )
        self._conn.commit()
        logger.info("Saved portfolio %s offline", record.slug)
        return record

    async def insert_items(self, portfolio_id: str, items: list[StoredItem]) -> list[StoredItem]:
        self._conn.executemany(
            f"INSERT OR REPLACE INTO portfolio_items ({_ITEM_COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                (i.id, portfolio_id, i.title, i.description, i.notes, i.category, i.method,
                 i.source, i.url, i.file_url, i.file_name, i.sort_order, i.extracted_preview)
                for i in items
            ],
        )
        self._conn.commit()
        return [i.model_copy(update={"portfolio_id": portfolio_id}) for i in items]

    async def upload_file(self, portfolio_id: str, file_name: str, data: bytes, mime_type: str) -> str:
        path = storage_path(portfolio_id, file_name)
        self._conn.execute(
            "INSERT OR REPLACE INTO portfolio_files (path, portfolio_id, mime_type, data) "
            "VALUES (?, ?, ?, ?)",
            (path, portfolio_id, mime_type, data),
        )
        self._conn.commit()
        return f"{self._base_url}/files/{path}"

    async def read_file(self, path: str) -> tuple[bytes, str] | None:
        row = self._conn.execute(
            "SELECT data, mime_type FROM portfolio_files WHERE path = ?", (path,),
        ).fetchone()
        if row is None:
            return None
        return bytes(row[0]), row[1]

    async def get_portfolio(self, slug: str) -> PortfolioRecord | None:
        row = self._conn.execute(
            "SELECT id, slug, title, description, created_at, is_public "
            "FROM portfolios WHERE slug = ? AND is_public = 1",
            (slug,),
        ).fetchone()
        if row is None:
            return None
        return PortfolioRecord(
            id=row[0], slug=row[1], title=row[2], description=row[3],
            created_at=row[4], is_public=bool(row[5]),
        )

    async def get_items(self, portfolio_id: str) -> list[StoredItem]:
        rows = self._conn.execute(
            f"SELECT {_ITEM_COLUMNS} FROM portfolio_items "
            "WHERE portfolio_id = ? ORDER BY sort_order ASC",
            (portfolio_id,),
        ).fetchall()
        return [
            StoredItem(
                id=r[0], portfolio_id=r[1], title=r[2], description=r[3], notes=r[4],
                category=r[5], method=r[6], source=r[7], url=r[8], file_url=r[9],
                file_name=r[10], sort_order=r[11], extracted_preview=r[12],
            )
            for r in rows
        ]

    async def close(self) -> None:
        self._conn.close()
