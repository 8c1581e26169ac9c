"""
Context Engine

Single entry point of the compaction pipeline. One call takes one assembled text and
returns one OptimizedContext:

    Segmenter -> Scorer -> RedundancyFilter -> AttentionWeighter
              -> TierSelector -> BudgetedCompactor -> ReportBuilder

Data flows strictly forward. Segments live only for the duration of a call.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING

from ..errors import InvalidBudgetError
from ..observability import trace
from ..sizing import HeuristicEstimator, estimator_name
from .attention import AttentionWeighter
from .compactor import BudgetedCompactor
from .compressor import SegmentCompressor
from .config import EngineConfig
from .features import FeatureFn
from .models import ContentSegment, OptimizedContext, OptimizeRequest
from .redundancy import RedundancyFilter
from .report import ReportBuilder
from .scorer import Scorer
from .segmenter import Segmenter, position_for_offset
from .tiers import TierSelection, TierSelector

if TYPE_CHECKING:
    from ..cache import ContextMemo

logger = logging.getLogger(__name__)


class ContextEngine:
    """
    Context budgeting and relevance-ranked compaction engine.

    The engine holds configuration and stage objects only; nothing about a request
    outlives the call, so one instance can serve any number of sequential calls.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        estimator: Callable[[str], int] | None = None,
        features: Mapping[str, FeatureFn] | None = None,
        cache: ContextMemo | None = None,
    ):
        """
        Build the pipeline stages.

        Args:
            config: Engine configuration (defaults for every stage when omitted)
            estimator: Pure text -> size function (heuristic estimate by default)
            features: Feature functions overriding or extending the built-in ones
            cache: Optional result memo; results are identical with or without it
        """
        self.config = config or EngineConfig()
        self.estimator = estimator or HeuristicEstimator()
        self.cache = cache

        seg_config = self.config.segmenter
        self.joiner = seg_config.joiner
        self.segmenter = Segmenter(seg_config)
        self.scorer = Scorer(self.config.scorer, features)
        self.redundancy = RedundancyFilter(self.config.redundancy, max_tags=seg_config.max_tags)
        self.attention = AttentionWeighter(self.config.attention)
        self.tier_selector = TierSelector(self.config.compaction.tiers)
        self.compactor = BudgetedCompactor(
            self.estimator,
            SegmentCompressor(seg_config.quote_pairs),
            joiner=self.joiner,
            allow_overrun_on_infeasible=self.config.compaction.allow_overrun_on_infeasible,
        )
        self.reporter = ReportBuilder(self.joiner, self.config.compaction.high_importance_threshold)

        self._separator_size = self.estimator(self.joiner)
        self._config_json = self.config.model_dump_json()

    def assembled_size(self, sizes: Iterable[int]) -> int:
        """Size of segments joined with the separator: sum of parts plus one separator per gap."""
        total = 0
        count = 0
        for size in sizes:
            total += size
            count += 1
        if count > 1:
            total += self._separator_size * (count - 1)
        return total

    def resolve_cursor(self, segments: list[ContentSegment], request: OptimizeRequest) -> int:
        if request.cursor_position is None:
            return len(segments)
        if request.cursor_unit == "char":
            return position_for_offset(segments, request.cursor_position)
        return request.cursor_position

    def select_tier(self, total_size: int, budget: int, force_tier: int | None) -> TierSelection:
        if force_tier is None:
            return self.tier_selector.select(total_size, budget)

        tier = self.tier_selector.by_level(force_tier)
        needed_ratio = min(1.0, budget / total_size) if total_size else 1.0
        infeasible = total_size > budget and tier.target_ratio > needed_ratio
        return TierSelection(tier=tier, total_size=total_size, needed_ratio=needed_ratio, infeasible=infeasible)

    def optimize(self, request: OptimizeRequest) -> OptimizedContext:
        """
        Compact the request text into its budget.

        Raises:
            InvalidBudgetError: If budget <= 0 (before any work is done)
            KeyError: If force_tier names a level that is not configured

        An infeasible budget is not an error: the best-effort result carries
        ``stats.budget_infeasible`` / ``stats.budget_exceeded`` instead. Call
        ``raise_for_budget()`` on the result to turn an overrun into an exception.
        """
        if request.budget <= 0:
            raise InvalidBudgetError(request.budget)

        cache_key = None
        cached = None
        if self.cache is not None:
            try:
                cache_key = self.cache.make_key(
                    request.raw_text,
                    request.focus_characters,
                    request.cursor_position,
                    request.budget,
                    config_json=self._config_json,
                    estimator=estimator_name(self.estimator),
                    force_tier=request.force_tier,
                    cursor_unit=request.cursor_unit,
                )
                cached = self.cache.get(cache_key)
            except Exception as e:
                logger.warning(f"Context memo lookup failed, recomputing: {e}", extra={"error": str(e)})
                cache_key = None
            if cached is not None:
                logger.debug("Context memo hit", extra={"budget": request.budget})
                return cached

        with trace("engine.optimize", {"budget": request.budget, "chars": len(request.raw_text)}):
            result = self._run(request)

        if self.cache is not None and cache_key is not None:
            try:
                self.cache.set(cache_key, result)
            except Exception as e:
                logger.warning(f"Context memo store failed: {e}", extra={"error": str(e)})

        logger.info(
            f"Optimized context: {result.original_size} -> {result.final_size} (budget {result.budget}, "
            f"tier {result.tier_used}, quality {result.quality_score:.2f})",
            extra=result.summary(),
        )
        return result

    def _run(self, request: OptimizeRequest) -> OptimizedContext:
        segments = self.segmenter.segment(request.raw_text)
        if not segments:
            tier = self.tier_selector.tiers[0]
            if request.force_tier is not None:
                tier = self.tier_selector.by_level(request.force_tier)
            return self.reporter.empty(request.budget, tier)

        sizes = {seg.id: self.estimator(seg.text) for seg in segments}
        original_size = self.assembled_size(sizes[seg.id] for seg in segments)

        self.scorer.score(segments, request.focus_characters)

        filtered = self.redundancy.filter(segments)
        surviving = filtered.kept

        cursor = self.resolve_cursor(segments, request)
        self.attention.apply(surviving, cursor)

        total_size = self.assembled_size(sizes[seg.id] for seg in surviving)
        selection = self.select_tier(total_size, request.budget, request.force_tier)

        compaction = self.compactor.compact(
            surviving,
            sizes,
            selection.tier,
            request.budget,
            infeasible=selection.infeasible,
        )

        return self.reporter.build(
            segments=segments,
            surviving=surviving,
            redundant=filtered.removed,
            compaction=compaction,
            selection=selection,
            budget=request.budget,
            original_size=original_size,
            decay_applied=True,
            quality_ceiling=self.quality_ceiling(surviving, sizes, selection, request.budget),
        )

    def quality_ceiling(
        self,
        surviving: list[ContentSegment],
        sizes: dict[int, int],
        selection: TierSelection,
        budget: int,
    ) -> float:
        """
        Lowest quality score among the tiers less aggressive than the selected one.

        Each of those tiers is compacted against the same segments and budget. A more
        aggressive tier may fit more passages in compressed form, but its score never
        exceeds what a gentler tier achieves.
        """
        ceiling = 1.0
        for tier in self.tier_selector.tiers:
            if tier.level >= selection.tier.level:
                break
            infeasible = selection.total_size > budget and tier.target_ratio > selection.needed_ratio
            compaction = self.compactor.compact(surviving, sizes, tier, budget, infeasible=infeasible)
            ceiling = min(ceiling, self.reporter.quality_score(surviving, compaction, tier))
        return ceiling

    def optimize_text(
        self,
        raw_text: str,
        budget: int,
        focus_characters: Iterable[str] = (),
        cursor_position: int | None = None,
        cursor_unit: str = "segment",
        force_tier: int | None = None,
    ) -> OptimizedContext:
        """Convenience wrapper building the OptimizeRequest from plain arguments."""
        request = OptimizeRequest(
            raw_text=raw_text,
            focus_characters=frozenset(focus_characters),
            cursor_position=cursor_position,
            cursor_unit=cursor_unit,
            budget=budget,
            force_tier=force_tier,
        )
        return self.optimize(request)


def optimize_context(
    raw_text: str,
    budget: int,
    focus_characters: Iterable[str] = (),
    cursor_position: int | None = None,
    config: EngineConfig | None = None,
    estimator: Callable[[str], int] | None = None,
) -> OptimizedContext:
    """One-shot optimization with a throwaway engine."""
    engine = ContextEngine(config=config, estimator=estimator)
    return engine.optimize_text(
        raw_text,
        budget,
        focus_characters=focus_characters,
        cursor_position=cursor_position,
    )
