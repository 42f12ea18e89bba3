"""Pydantic models for analysis inputs, results, and portfolios."""

from .analysis import (
    AnalysisInput,
    AnalysisMethod,
    AnalysisResult,
    AnalysisTrace,
    ContentCategory,
    DocumentContent,
    ExtractedContent,
    FileInput,
    GeneratedText,
    PageContent,
    StrategyOutcome,
    UrlInput,
)
from .portfolio import (
    FetchResult,
    PortfolioItem,
    PortfolioItemInput,
    PortfolioMetadata,
    PortfolioRecord,
    PublishResult,
    StoredItem,
)

__all__ = [
    "AnalysisInput",
    "AnalysisMethod",
    "AnalysisResult",
    "AnalysisTrace",
    "ContentCategory",
    "DocumentContent",
    "ExtractedContent",
    "FetchResult",
    "FileInput",
    "GeneratedText",
    "PageContent",
    "PortfolioItem",
    "PortfolioItemInput",
    "PortfolioMetadata",
    "PortfolioRecord",
    "PublishResult",
    "StoredItem",
    "StrategyOutcome",
    "UrlInput",
]
