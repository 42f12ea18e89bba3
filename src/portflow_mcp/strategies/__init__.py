"""Description generators, ordered from highest fidelity to guaranteed-safe."""

from __future__ import annotations

from ..config import PipelineSettings
from .base import GenerationRequest, Strategy
from .heuristic import HeuristicStrategy
from .model import ModelStrategy, parse_model_response
from .remote import RemoteAnalysisStrategy


def default_strategies(settings: PipelineSettings) -> list[Strategy]:
    """Remote service, then local model, then heuristic."""
    return [
        RemoteAnalysisStrategy(settings),
        ModelStrategy(settings),
        HeuristicStrategy(),
    ]


__all__ = [
    "GenerationRequest",
    "HeuristicStrategy",
    "ModelStrategy",
    "RemoteAnalysisStrategy",
    "Strategy",
    "default_strategies",
    "parse_model_response",
]
