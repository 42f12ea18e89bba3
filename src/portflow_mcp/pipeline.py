"""Analysis orchestrator — detect, extract, then walk the strategy chain.

Phases run strictly in order for one input. Extraction is best-effort and
isolated; each strategy failure is logged and the next strategy is tried.
The heuristic strategy is always last, so ``analyze`` always returns a
result with a non-empty title and description.

Nothing here catches ``asyncio.CancelledError``: cancelling the awaiting
task cancels the in-flight analysis.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from .config import PipelineSettings
from .detector import detect
from .errors import StrategyError
from .extractors import ExtractOptions, extract
from .models.analysis import (
    AnalysisInput,
    AnalysisResult,
    AnalysisTrace,
    StrategyOutcome,
)
from .strategies import (
    GenerationRequest,
    HeuristicStrategy,
    RemoteAnalysisStrategy,
    Strategy,
    default_strategies,
)
from .text import append_notes

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 3


class AnalysisOrchestrator:
    """Turns one file or link into an AnalysisResult.

    Args:
        settings: Capability switches; read at call time, never mutated.
        strategies: Custom chain. A trailing HeuristicStrategy is appended
            when the list does not already contain one.
        fetch: Whether link extraction may hit the network.
    """

    def __init__(
        self,
        settings: PipelineSettings,
        strategies: Sequence[Strategy] | None = None,
        *,
        fetch: bool = True,
    ) -> None:
        self.settings = settings
        chain = list(strategies) if strategies is not None else default_strategies(settings)
        if not any(isinstance(s, HeuristicStrategy) for s in chain):
            chain.append(HeuristicStrategy())
        self.strategies = chain
        self.extract_options = ExtractOptions(
            pdf_strategy=settings.pdf_strategy,
            fetch=fetch,
            fetch_timeout=settings.fetch_timeout,
        )

    def remote_available(self) -> bool:
        """Whether the remote analysis strategy would run for these settings."""
        return RemoteAnalysisStrategy(self.settings).available()

    async def analyze(self, item: AnalysisInput) -> AnalysisResult:
        result, _trace = await self.analyze_traced(item)
        return result

    async def analyze_traced(self, item: AnalysisInput) -> tuple[AnalysisResult, AnalysisTrace]:
        """Analyze *item* and report which strategies ran and why they failed."""
        category = detect(item)
        extracted = await extract(item, category, self.extract_options)
        trace = AnalysisTrace(category=category, extracted=extracted is not None)
        request = GenerationRequest(input=item, category=category, extracted=extracted)

        result: AnalysisResult | None = None
        for strategy in self.strategies:
            if not strategy.available():
                trace.attempts.append(StrategyOutcome(name=strategy.name, ok=False, error="unavailable"))
                continue
            try:
                result = await strategy.attempt(request)
            except StrategyError as exc:
                logger.warning("%s strategy failed (%s), falling back", strategy.name, exc)
                trace.attempts.append(StrategyOutcome(name=strategy.name, ok=False, error=str(exc)))
                continue
            except Exception as exc:
                logger.warning(
                    "%s strategy raised %s: %s, falling back", strategy.name, type(exc).__name__, exc,
                )
                trace.attempts.append(
                    StrategyOutcome(name=strategy.name, ok=False, error=f"{type(exc).__name__}: {exc}")
                )
                continue
            trace.attempts.append(StrategyOutcome(name=strategy.name, ok=True))
            break

        if result is None:
            # Only reachable when a custom heuristic subclass misbehaves.
            result = await HeuristicStrategy().attempt(request)
            trace.attempts.append(StrategyOutcome(name="heuristic", ok=True))

        if item.notes.strip():
            result = result.model_copy(
                update={"description": append_notes(result.description, item.notes)}
            )
        logger.info(
            "Analyzed %s input via %s", category.value, result.method.value,
        )
        return result, trace

    async def analyze_many(
        self,
        items: Sequence[AnalysisInput],
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> list[AnalysisResult]:
        """Analyze independent inputs concurrently; results keep input order."""
        semaphore = asyncio.Semaphore(max(1, concurrency))

        async def _one(item: AnalysisInput) -> AnalysisResult:
            async with semaphore:
                return await self.analyze(item)

        return list(await asyncio.gather(*[_one(item) for item in items]))
