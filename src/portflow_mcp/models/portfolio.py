"""Portfolio models — items, publish metadata, and gateway results."""

from __future__ import annotations

import mimetypes
import uuid
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from .analysis import AnalysisMethod, AnalysisResult, ContentCategory

PersistenceMethod = Literal["remote", "offline"]


class PortfolioItem(BaseModel):
    """One analysed piece of work plus the user's edits.

    ``title`` and ``description`` start as the generated values; the caller
    may overwrite them. ``source`` is the original URL or file name.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: str
    description: str
    notes: str = ""
    category: ContentCategory = ContentCategory.UNKNOWN
    method: AnalysisMethod = AnalysisMethod.HEURISTIC
    extracted_preview: str | None = None
    source: str = ""
    url: str | None = None
    file_name: str | None = None
    file_url: str | None = None
    mime_type: str = ""
    file_data: bytes | None = Field(default=None, exclude=True)

    @classmethod
    def from_result(
        cls,
        result: AnalysisResult,
        *,
        source: str,
        notes: str = "",
        url: str | None = None,
        file_name: str | None = None,
        file_url: str | None = None,
        file_data: bytes | None = None,
        mime_type: str = "",
    ) -> PortfolioItem:
        """Build an item from a pipeline result; the id is fixed here."""
        return cls(
            title=result.title,
            description=result.description,
            notes=notes,
            category=result.category,
            method=result.method,
            extracted_preview=result.extracted_preview,
            source=source,
            url=url,
            file_name=file_name,
            file_url=file_url,
            file_data=file_data,
            mime_type=mime_type,
        )

    def content_fields(self) -> dict:
        """Fields that survive persistence, excluding storage identifiers."""
        return self.model_dump(
            mode="json",
            include={
                "title", "description", "notes", "category", "method",
                "extracted_preview", "source", "url",
            },
        )


class PortfolioMetadata(BaseModel):
    """Title and blurb shown on the published view."""

    title: str = "My Creative Portfolio"
    description: str = "A showcase of my professional work"


class PortfolioRecord(BaseModel):
    """A stored portfolio header row."""

    id: str
    slug: str
    title: str
    description: str
    created_at: str
    is_public: bool = True


class StoredItem(BaseModel):
    """A portfolio item as persisted by a store."""

    id: str
    portfolio_id: str
    title: str
    description: str
    notes: str = ""
    category: str = ContentCategory.UNKNOWN.value
    method: str = AnalysisMethod.HEURISTIC.value
    extracted_preview: str | None = None
    source: str = ""
    url: str | None = None
    file_url: str | None = None
    file_name: str | None = None
    sort_order: int = 0

    def content_fields(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "notes": self.notes,
            "category": self.category,
            "method": self.method,
            "extracted_preview": self.extracted_preview,
            "source": self.source,
            "url": self.url,
        }


class PublishResult(BaseModel):
    """Outcome of publishing a collection."""

    success: bool = True
    url: str
    slug: str
    method: PersistenceMethod
    portfolio: PortfolioRecord
    items: list[StoredItem] = Field(default_factory=list)
    message: str = ""


class FetchResult(BaseModel):
    """Outcome of fetching a published collection."""

    success: bool
    method: PersistenceMethod
    portfolio: PortfolioRecord | None = None
    items: list[StoredItem] = Field(default_factory=list)
    error: str = ""


class PortfolioItemInput(BaseModel):
    """Item as submitted to ``portfolio_publish``.

    ``file_path`` points at a local file whose bytes are uploaded with the
    item; everything else mirrors PortfolioItem.
    """

    id: str | None = None
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    notes: str = ""
    category: ContentCategory = ContentCategory.UNKNOWN
    method: AnalysisMethod = AnalysisMethod.HEURISTIC
    extracted_preview: str | None = None
    source: str = ""
    url: str | None = None
    file_name: str | None = None
    file_url: str | None = None
    file_path: str | None = None

    def to_item(self) -> PortfolioItem:
        """Build a PortfolioItem, reading ``file_path`` if given.

        Raises:
            FileNotFoundError: If ``file_path`` does not exist.
        """
        data = self.model_dump(exclude={"file_path", "id"})
        if self.id:
            data["id"] = self.id
        if self.file_path:
            path = Path(self.file_path).expanduser()
            if not path.is_file():
                raise FileNotFoundError(f"File not found: {self.file_path}")
            mime, _ = mimetypes.guess_type(path.name)
            data["file_data"] = path.read_bytes()
            data["mime_type"] = mime or ""
            data["file_name"] = self.file_name or path.name
            data["source"] = self.source or path.name
        return PortfolioItem(**data)
