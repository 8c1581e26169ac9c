"""
ReportBuilder

Assembles the immutable OptimizedContext from the compaction outcome: final text,
size accounting, quality score, preserved/lost concept tags and run statistics.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .compactor import CompactionResult
from .models import CompressionTier, ContentSegment, OptimizationStats, OptimizedContext
from .tiers import TierSelection

logger = logging.getLogger(__name__)

LOW_QUALITY_THRESHOLD = 0.7


def _tag_union(segments: Iterable[ContentSegment]) -> set[str]:
    tags: set[str] = set()
    for seg in segments:
        tags |= seg.semantic_tags
    return tags


class ReportBuilder:
    def __init__(self, joiner: str = "\n\n", high_importance_threshold: float = 0.5):
        self.joiner = joiner
        self.high_importance_threshold = high_importance_threshold

    def empty(self, budget: int, tier: CompressionTier) -> OptimizedContext:
        return OptimizedContext(
            content="",
            original_size=0,
            final_size=0,
            budget=budget,
            compression_ratio=1.0,
            tier_used=tier.level,
            quality_score=1.0,
        )

    def coverage(self, surviving: list[ContentSegment], kept_ids: set[int]) -> float:
        """
        Fraction of high-importance segments that were kept.

        A segment is high-importance when its importance reaches the configured
        fraction of the highest importance among surviving segments.
        """
        if not surviving:
            return 1.0
        top = max(s.importance for s in surviving)
        cutoff = top * self.high_importance_threshold
        high = [s for s in surviving if s.importance >= cutoff]
        if not high:
            return 1.0
        return sum(1 for s in high if s.id in kept_ids) / len(high)

    def quality_score(self, surviving: list[ContentSegment], compaction: CompactionResult, tier: CompressionTier) -> float:
        kept_ids = {a.segment.id for a in compaction.accepted}
        coverage = self.coverage(surviving, kept_ids)
        if compaction.accepted:
            losses = [tier.quality_loss if a.compressed else 0.0 for a in compaction.accepted]
            mean_loss = sum(losses) / len(losses)
        else:
            mean_loss = 0.0
        score = coverage * (1.0 - mean_loss)
        return min(score, 1.0 - tier.quality_loss)

    def suggestions(self, selection: TierSelection, quality: float, exceeded: bool, lost: list[str]) -> list[str]:
        out: list[str] = []
        if exceeded:
            out.append("Budget is too small for even one compressed passage; raise the budget or narrow the focus set")
        elif selection.infeasible:
            out.append(
                f"No compression tier reaches the needed ratio {selection.needed_ratio:.2f}; "
                "lower-priority passages were dropped"
            )
        if quality < LOW_QUALITY_THRESHOLD:
            out.append(f"Quality score {quality:.2f} is below {LOW_QUALITY_THRESHOLD}; consider a larger budget")
        if lost:
            preview = ", ".join(lost[:5])
            out.append(f"{len(lost)} concepts were dropped (e.g. {preview})")
        return out

    def build(
        self,
        segments: list[ContentSegment],
        surviving: list[ContentSegment],
        redundant: list[ContentSegment],
        compaction: CompactionResult,
        selection: TierSelection,
        budget: int,
        original_size: int,
        decay_applied: bool,
        quality_ceiling: float = 1.0,
    ) -> OptimizedContext:
        """
        Build the result report.

        ``quality_ceiling`` caps the quality score, so a tier never reports more than
        the less aggressive tiers would for the same input and budget.
        """
        tier = selection.tier
        content = self.joiner.join(compaction.content_parts)
        final_size = compaction.total_size
        ratio = final_size / original_size if original_size else 1.0

        kept_segments = [a.segment for a in compaction.accepted]
        preserved = _tag_union(kept_segments)
        lost = _tag_union([*compaction.discarded, *redundant]) - preserved
        preserved_list = sorted(preserved)
        lost_list = sorted(lost)

        quality = min(self.quality_score(surviving, compaction, tier), quality_ceiling)
        exceeded = final_size > budget

        stats = OptimizationStats(
            segments_processed=len(segments),
            redundancy_removed=len(redundant),
            decay_applied=decay_applied,
            strategies_used=compaction.strategies_used,
            segments_kept=len(compaction.accepted),
            segments_compressed=sum(1 for a in compaction.accepted if a.compressed),
            segments_discarded=len(compaction.discarded),
            budget_infeasible=selection.infeasible,
            budget_exceeded=exceeded,
        )

        if exceeded:
            logger.warning(
                f"Final size {final_size} exceeds budget {budget}",
                extra={"final_size": final_size, "budget": budget, "tier": tier.level},
            )

        return OptimizedContext(
            content=content,
            original_size=original_size,
            final_size=final_size,
            budget=budget,
            compression_ratio=ratio,
            tier_used=tier.level,
            quality_score=min(1.0, max(0.0, quality)),
            preserved_elements=preserved_list,
            lost_elements=lost_list,
            kept_positions=[a.segment.position for a in compaction.accepted],
            suggestions=self.suggestions(selection, quality, exceeded, lost_list),
            stats=stats,
        )
