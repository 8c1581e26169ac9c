"""
BudgetedCompactor

Greedy 0/1 selection with a compression fallback over a max-priority heap:

1. Heap entries are (-importance, distance, position, id) tuples pointing into an
   arena of segments keyed by id.
2. Popped segments are accepted verbatim if they fit the remaining budget,
   otherwise in the tier's compressed form if that fits, otherwise discarded.
3. Selection stops when the heap is empty or the budget is used up.
4. Accepted segments are emitted in ascending position order.
"""

from __future__ import annotations

import heapq
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from .compressor import SegmentCompressor
from .models import CompressionStrategy, CompressionTier, ContentSegment

logger = logging.getLogger(__name__)


@dataclass
class AcceptedSegment:
    segment: ContentSegment
    text: str
    size: int
    compressed: bool = False


@dataclass
class CompactionResult:
    accepted: list[AcceptedSegment]
    discarded: list[ContentSegment]
    total_size: int
    strategies_used: list[CompressionStrategy] = field(default_factory=list)
    overrun: bool = False

    @property
    def content_parts(self) -> list[str]:
        return [a.text for a in self.accepted]


class BudgetedCompactor:
    def __init__(
        self,
        estimator: Callable[[str], int],
        compressor: SegmentCompressor,
        joiner: str = "\n\n",
        allow_overrun_on_infeasible: bool = True,
    ):
        self.estimator = estimator
        self.compressor = compressor
        self.joiner = joiner
        self.separator_size = estimator(joiner)
        self.allow_overrun_on_infeasible = allow_overrun_on_infeasible

    def _cost(self, size: int, accepted_count: int) -> int:
        return size + (self.separator_size if accepted_count else 0)

    def compact(
        self,
        segments: list[ContentSegment],
        sizes: dict[int, int],
        tier: CompressionTier,
        budget: int,
        infeasible: bool = False,
    ) -> CompactionResult:
        arena = {seg.id: seg for seg in segments}
        heap = [(-seg.importance, seg.distance, seg.position, seg.id) for seg in segments]
        heapq.heapify(heap)

        accepted: list[AcceptedSegment] = []
        discarded: list[ContentSegment] = []
        used: list[CompressionStrategy] = []
        running_total = 0

        while heap and running_total < budget:
            _, _, _, seg_id = heapq.heappop(heap)
            seg = arena[seg_id]
            size = sizes[seg_id]
            cost = self._cost(size, len(accepted))

            if running_total + cost <= budget:
                accepted.append(AcceptedSegment(segment=seg, text=seg.text, size=size))
                running_total += cost
                continue

            strategies = tier.strategies_for(seg.kind)
            if not strategies:
                discarded.append(seg)
                continue

            for strategy in strategies:
                if strategy not in used:
                    used.append(strategy)

            compressed = self.compressor.compress(seg, strategies)
            if compressed is None or compressed == seg.text:
                discarded.append(seg)
                continue

            compressed_size = self.estimator(compressed)
            compressed_cost = self._cost(compressed_size, len(accepted))
            if running_total + compressed_cost <= budget:
                accepted.append(AcceptedSegment(segment=seg, text=compressed, size=compressed_size, compressed=True))
                running_total += compressed_cost
            else:
                discarded.append(seg)

        # Segments never popped because the budget ran out
        discarded.extend(arena[entry[3]] for entry in heap)

        overrun = False
        if not accepted and infeasible and self.allow_overrun_on_infeasible and segments:
            best = self._best_effort(segments, tier)
            discarded = [seg for seg in discarded if seg.id != best.segment.id]
            accepted.append(best)
            running_total = best.size
            overrun = running_total > budget
            logger.warning(
                f"Budget {budget} infeasible, emitting best-effort segment of size {best.size}",
                extra={"budget": budget, "segment_id": best.segment.id, "size": best.size},
            )

        accepted.sort(key=lambda a: a.segment.position)
        discarded.sort(key=lambda s: s.position)

        logger.debug(
            f"Compaction kept {len(accepted)} segments ({running_total}/{budget})",
            extra={
                "kept": len(accepted),
                "compressed": sum(1 for a in accepted if a.compressed),
                "discarded": len(discarded),
                "tier": tier.level,
            },
        )
        return CompactionResult(
            accepted=accepted,
            discarded=discarded,
            total_size=running_total,
            strategies_used=used,
            overrun=overrun,
        )

    def _best_effort(self, segments: list[ContentSegment], tier: CompressionTier) -> AcceptedSegment:
        """Most compressed form of the top-priority segment."""
        top = min(segments, key=lambda s: (-s.importance, s.distance, s.position))
        strategies = tier.strategies_for(top.kind)
        compressed = self.compressor.compress(top, strategies) if strategies else None
        if compressed is None or compressed == top.text:
            compressed = self.compressor.abstract(top.text, 12)
        return AcceptedSegment(segment=top, text=compressed, size=self.estimator(compressed), compressed=True)
