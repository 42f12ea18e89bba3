"""Analysis pipeline models — inputs, extracted content, and results.

AnalysisInput is a discriminated union on ``kind`` so tools can validate
raw JSON straight into the right shape. Inputs are frozen: the pipeline
reads them but never rewrites them.
"""

from __future__ import annotations

import mimetypes
from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContentCategory(str, Enum):
    """Coarse content-type tag assigned once by the detector."""

    PDF = "pdf"
    IMAGE = "image"
    GITHUB = "github"
    FIGMA = "figma"
    BEHANCE = "behance"
    DRIBBBLE = "dribbble"
    GENERIC_LINK = "genericLink"
    UNKNOWN = "unknown"

    @property
    def is_link(self) -> bool:
        return self in LINK_CATEGORIES


LINK_CATEGORIES = frozenset({
    ContentCategory.GITHUB,
    ContentCategory.FIGMA,
    ContentCategory.BEHANCE,
    ContentCategory.DRIBBBLE,
    ContentCategory.GENERIC_LINK,
})


class AnalysisMethod(str, Enum):
    """Which strategy produced an AnalysisResult."""

    REMOTE_AI = "remoteAI"
    LOCAL_AI = "localAI"
    HEURISTIC = "heuristic"


class FileInput(BaseModel):
    """An uploaded file: name, MIME type and raw bytes."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["file"] = "file"
    name: str = Field(min_length=1)
    mime_type: str = ""
    data: bytes = b""
    notes: str = ""
    file_url: str = Field(default="", description="Public URL of an already-uploaded copy")

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: str | Path, *, notes: str = "") -> FileInput:
        """Read a local file into a FileInput, guessing its MIME type."""
        p = Path(path).expanduser()
        if not p.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        mime, _ = mimetypes.guess_type(p.name)
        return cls(name=p.name, mime_type=mime or "", data=p.read_bytes(), notes=notes)


class UrlInput(BaseModel):
    """A pasted link."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["url"] = "url"
    url: str = Field(min_length=1)
    notes: str = ""

    @field_validator("url")
    @classmethod
    def strip_url(cls, value: str) -> str:
        return value.strip()


AnalysisInput = Annotated[Union[FileInput, UrlInput], Field(discriminator="kind")]


class DocumentContent(BaseModel):
    """Summary of a document or image: text plus topic hints."""

    kind: str = "document"
    text: str = ""
    hints: list[str] = Field(default_factory=list)
    source: Literal["text", "heuristic"] = "heuristic"


class PageContent(BaseModel):
    """Summary of a fetched (or pattern-analysed) web page."""

    platform: str = "Website"
    title: str = ""
    meta_description: str = ""
    body_snippet: str = ""
    heuristic_title: str = ""
    heuristic_description: str = ""
    summary: str = ""

    @property
    def fetched(self) -> bool:
        return bool(self.title or self.meta_description or self.body_snippet)


ExtractedContent = Union[DocumentContent, PageContent]


class GeneratedText(BaseModel):
    """JSON shape requested from the model."""

    title: str = Field(description="Short portfolio title, 2-6 words")
    description: str = Field(description="1-3 sentence professional description")


class AnalysisResult(BaseModel):
    """Terminal output of the pipeline and the unit stored per portfolio item."""

    title: str
    description: str
    category: ContentCategory
    method: AnalysisMethod
    extracted_preview: str | None = None

    @field_validator("title", "description")
    @classmethod
    def require_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must be a non-empty string")
        return value


class StrategyOutcome(BaseModel):
    """One attempted strategy and whether it produced the result."""

    name: str
    ok: bool
    error: str = ""


class AnalysisTrace(BaseModel):
    """Diagnostics for one analyze call."""

    category: ContentCategory
    extracted: bool = False
    attempts: list[StrategyOutcome] = Field(default_factory=list)
