"""Batch analysis models — output schema for portfolio_analyze_batch.

Each submitted file or URL becomes one BatchAnalysisItem. Analyses run
concurrently and never share state, so one item's error does not affect
the others.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from .analysis import AnalysisResult


class BatchAnalysisItem(BaseModel):
    """Result for a single source in a batch."""

    source: str
    result: AnalysisResult | None = None
    error: str = ""


class BatchAnalysisResult(BaseModel):
    """Aggregated batch outcome, items in submission order."""

    total: int
    successful: int
    failed: int
    items: list[BatchAnalysisItem] = Field(default_factory=list)
