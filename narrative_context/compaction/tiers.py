"""
Compression Tiers

Default tier ladder and the TierSelector that picks the least aggressive tier able
to bring the surviving segments under the budget.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .models import CompressionStrategy, CompressionTier, SegmentKind, StrategyKind

logger = logging.getLogger(__name__)


def default_tiers() -> list[CompressionTier]:
    """Tier ladder used when the caller configures none (levels 0-4)."""
    return [
        CompressionTier(
            level=0,
            name="verbatim",
            description="No lossy compression; verified redundancy only",
            target_ratio=1.0,
            quality_loss=0.0,
            strategies=[],
        ),
        CompressionTier(
            level=1,
            name="light",
            description="Drop low-value description, keep every important passage",
            target_ratio=0.9,
            quality_loss=0.05,
            strategies=[
                CompressionStrategy(
                    kind=StrategyKind.ELIMINATION,
                    target_kind=SegmentKind.DESCRIPTION,
                    parameters={"max_importance": 0.2},
                ),
                CompressionStrategy(
                    kind=StrategyKind.SUMMARIZATION,
                    target_kind=SegmentKind.DESCRIPTION,
                    parameters={"keep_ratio": 0.75},
                ),
            ],
        ),
        CompressionTier(
            level=2,
            name="moderate",
            description="Summarize descriptive and action passages",
            target_ratio=0.7,
            quality_loss=0.15,
            strategies=[
                CompressionStrategy(
                    kind=StrategyKind.SUMMARIZATION,
                    target_kind=SegmentKind.DESCRIPTION,
                    parameters={"keep_ratio": 0.5},
                ),
                CompressionStrategy(
                    kind=StrategyKind.SUMMARIZATION,
                    target_kind=SegmentKind.ACTION,
                    parameters={"keep_ratio": 0.7},
                ),
                CompressionStrategy(
                    kind=StrategyKind.SUMMARIZATION,
                    target_kind=SegmentKind.INTERNAL_THOUGHT,
                    parameters={"keep_ratio": 0.7},
                ),
            ],
        ),
        CompressionTier(
            level=3,
            name="aggressive",
            description="Keep core plot beats and spoken lines only",
            target_ratio=0.5,
            quality_loss=0.3,
            strategies=[
                CompressionStrategy(
                    kind=StrategyKind.ABSTRACTION,
                    target_kind=SegmentKind.DESCRIPTION,
                    parameters={"max_words": 20},
                ),
                CompressionStrategy(
                    kind=StrategyKind.SUMMARIZATION,
                    target_kind=SegmentKind.ACTION,
                    parameters={"keep_ratio": 0.4},
                ),
                CompressionStrategy(
                    kind=StrategyKind.SUMMARIZATION,
                    target_kind=SegmentKind.INTERNAL_THOUGHT,
                    parameters={"keep_ratio": 0.4},
                ),
                CompressionStrategy(
                    kind=StrategyKind.DIALOGUE_CONDENSE,
                    target_kind=SegmentKind.DIALOGUE,
                    parameters={"max_utterances": 3},
                ),
            ],
        ),
        CompressionTier(
            level=4,
            name="skeletal",
            description="Reduce every passage to a short abstract",
            target_ratio=0.3,
            quality_loss=0.5,
            strategies=[
                CompressionStrategy(
                    kind=StrategyKind.DIALOGUE_CONDENSE,
                    target_kind=SegmentKind.DIALOGUE,
                    parameters={"max_utterances": 1},
                ),
                CompressionStrategy(kind=StrategyKind.ABSTRACTION, parameters={"max_words": 12}),
            ],
        ),
    ]


@dataclass(frozen=True)
class TierSelection:
    tier: CompressionTier
    total_size: int
    needed_ratio: float
    infeasible: bool = False


class TierSelector:
    """
    Picks a compression tier from the total surviving size and the budget.

    If everything fits, tier 0. Otherwise the least aggressive tier whose
    target_ratio is at most budget/total; when none is aggressive enough the most
    aggressive tier is returned with ``infeasible`` set.
    """

    def __init__(self, tiers: Sequence[CompressionTier]):
        if not tiers:
            raise ValueError("At least one compression tier is required")
        self.tiers = sorted(tiers, key=lambda t: t.level)

    def by_level(self, level: int) -> CompressionTier:
        for tier in self.tiers:
            if tier.level == level:
                return tier
        raise KeyError(f"No compression tier with level {level}")

    def select(self, total_size: int, budget: int) -> TierSelection:
        if total_size <= budget:
            ratio = 1.0 if total_size == 0 else budget / total_size
            return TierSelection(tier=self.tiers[0], total_size=total_size, needed_ratio=min(1.0, ratio))

        needed_ratio = budget / total_size
        for tier in self.tiers:
            if tier.target_ratio <= needed_ratio:
                logger.debug(
                    f"Selected tier {tier.level} ({tier.name}) for needed ratio {needed_ratio:.3f}",
                    extra={"tier": tier.level, "total_size": total_size, "budget": budget},
                )
                return TierSelection(tier=tier, total_size=total_size, needed_ratio=needed_ratio)

        most_aggressive = self.tiers[-1]
        logger.warning(
            f"No tier reaches needed ratio {needed_ratio:.3f}; using most aggressive tier {most_aggressive.level}",
            extra={"tier": most_aggressive.level, "total_size": total_size, "budget": budget},
        )
        return TierSelection(
            tier=most_aggressive,
            total_size=total_size,
            needed_ratio=needed_ratio,
            infeasible=True,
        )
