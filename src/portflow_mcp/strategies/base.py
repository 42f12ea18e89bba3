"""Strategy protocol shared by every description generator."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..models.analysis import (
    AnalysisInput,
    AnalysisMethod,
    AnalysisResult,
    ContentCategory,
    DocumentContent,
    ExtractedContent,
    PageContent,
)


@dataclass(frozen=True)
class GenerationRequest:
    """Everything a strategy may look at. Strategies never mutate it."""

    input: AnalysisInput
    category: ContentCategory
    extracted: ExtractedContent | None = None

    @property
    def document(self) -> DocumentContent | None:
        return self.extracted if isinstance(self.extracted, DocumentContent) else None

    @property
    def page(self) -> PageContent | None:
        return self.extracted if isinstance(self.extracted, PageContent) else None

    def preview(self, limit: int = 100) -> str | None:
        """Short excerpt of the extracted text for ``extracted_preview``."""
        if self.document is not None and self.document.text:
            text = self.document.text
        elif self.page is not None and self.page.summary:
            text = self.page.summary
        else:
            return None
        return text if len(text) <= limit else text[:limit] + "..."


class Strategy(ABC):
    """One link in the generation chain.

    ``attempt`` either returns a complete AnalysisResult or raises a
    StrategyError subclass; the orchestrator then moves to the next link.
    """

    name: str = "strategy"
    method: AnalysisMethod

    def available(self) -> bool:
        """Whether the strategy should be attempted at all right now."""
        return True

    @abstractmethod
    async def attempt(self, request: GenerationRequest) -> AnalysisResult:
        ...
