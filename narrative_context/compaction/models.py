"""
Context Compaction Models

Data models shared by every stage of the compaction pipeline:
segments (mutable, per-run), compression tiers (configuration) and the
OptimizedContext report (immutable engine output).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..errors import BudgetInfeasibleError


class SegmentKind(str, Enum):
    """Narrative role of a segment."""

    DIALOGUE = "dialogue"
    ACTION = "action"
    DESCRIPTION = "description"
    INTERNAL_THOUGHT = "internal_thought"


class StrategyKind(str, Enum):
    """Compression transformations a tier can apply to a segment."""

    ELIMINATION = "elimination"
    SUMMARIZATION = "summarization"
    ABSTRACTION = "abstraction"
    DIALOGUE_CONDENSE = "dialogue_condense"


@dataclass
class ContentSegment:
    """
    A contiguous, typed unit of narrative text.

    ``text`` is never modified after creation; compressed forms are carried by the
    compactor separately. ``importance`` is written by the Scorer and refined by the
    AttentionWeighter only.
    """

    id: int
    text: str
    kind: SegmentKind
    position: int
    offset: int = 0
    importance: float = 0.0
    character_relevance: dict[str, float] = field(default_factory=dict)
    compression_resistance: float = 0.0
    semantic_tags: set[str] = field(default_factory=set)
    distance: int = 0


class CompressionStrategy(BaseModel):
    """One transformation step of a tier, optionally restricted to a segment kind."""

    kind: StrategyKind = Field(..., description="Transformation to apply")
    target_kind: SegmentKind | None = Field(default=None, description="Segment kind it applies to (None = all)")
    parameters: dict[str, float] = Field(default_factory=dict, description="Strategy parameters")

    model_config = ConfigDict(frozen=True)

    def applies_to(self, kind: SegmentKind) -> bool:
        return self.target_kind is None or self.target_kind == kind


class CompressionTier(BaseModel):
    """Named compression configuration; tiers are totally ordered by level."""

    level: int = Field(..., ge=0, description="Ordinal, 0 = no lossy compression")
    name: str = Field(..., description="Human readable tier name")
    description: str = Field(default="", description="What the tier does")
    target_ratio: float = Field(..., gt=0.0, le=1.0, description="Fraction of original size to retain")
    quality_loss: float = Field(..., ge=0.0, le=1.0, description="Expected fidelity cost")
    strategies: list[CompressionStrategy] = Field(default_factory=list, description="Ordered strategies")

    model_config = ConfigDict(frozen=True)

    def strategies_for(self, kind: SegmentKind) -> list[CompressionStrategy]:
        return [s for s in self.strategies if s.applies_to(kind)]


class OptimizationStats(BaseModel):
    """Run statistics attached to every OptimizedContext."""

    segments_processed: int = Field(default=0, ge=0, description="Segments produced by the segmenter")
    redundancy_removed: int = Field(default=0, ge=0, description="Segments elided as near-duplicates")
    decay_applied: bool = Field(default=False, description="Whether attention decay ran")
    strategies_used: list[CompressionStrategy] = Field(default_factory=list, description="Strategies applied")
    segments_kept: int = Field(default=0, ge=0, description="Segments emitted verbatim or compressed")
    segments_compressed: int = Field(default=0, ge=0, description="Segments emitted in compressed form")
    segments_discarded: int = Field(default=0, ge=0, description="Surviving segments not emitted")
    budget_infeasible: bool = Field(default=False, description="No configured tier reaches the needed ratio")
    budget_exceeded: bool = Field(default=False, description="final_size is larger than budget")

    model_config = ConfigDict(frozen=True)


class OptimizedContext(BaseModel):
    """The engine's sole output. Immutable once constructed."""

    content: str = Field(..., description="Final assembled text")
    original_size: int = Field(..., ge=0, description="Estimated size of the full input")
    final_size: int = Field(..., ge=0, description="Estimated size of content")
    budget: int = Field(..., ge=0, description="Budget requested by the caller")
    compression_ratio: float = Field(..., ge=0.0, description="final_size / original_size")
    tier_used: int = Field(..., ge=0, description="Level of the selected tier")
    quality_score: float = Field(..., ge=0.0, le=1.0, description="Quality score (0-1)")
    preserved_elements: list[str] = Field(default_factory=list, description="Tags carried by kept segments")
    lost_elements: list[str] = Field(default_factory=list, description="Tags only carried by dropped segments")
    kept_positions: list[int] = Field(default_factory=list, description="Positions emitted, ascending")
    suggestions: list[str] = Field(default_factory=list, description="Advice for the caller")
    stats: OptimizationStats = Field(default_factory=OptimizationStats, description="Run statistics")

    model_config = ConfigDict(frozen=True)

    @property
    def within_budget(self) -> bool:
        return self.final_size <= self.budget

    def raise_for_budget(self) -> OptimizedContext:
        """
        Raise BudgetInfeasibleError when the result overran its budget.

        Returns:
            self, so calls can be chained

        Raises:
            BudgetInfeasibleError: If the final size exceeds the budget
        """
        if self.stats.budget_exceeded:
            raise BudgetInfeasibleError(self.budget, self.final_size, self.tier_used)
        return self

    def summary(self) -> dict[str, Any]:
        return {
            "original_size": self.original_size,
            "final_size": self.final_size,
            "budget": self.budget,
            "compression_ratio": round(self.compression_ratio, 4),
            "tier_used": self.tier_used,
            "quality_score": round(self.quality_score, 4),
            "segments_kept": self.stats.segments_kept,
            "budget_exceeded": self.stats.budget_exceeded,
        }


class OptimizeRequest(BaseModel):
    """Input of a single optimization call."""

    raw_text: str = Field(..., description="Assembled narrative text to compact")
    focus_characters: frozenset[str] = Field(default_factory=frozenset, description="Characters to favor")
    cursor_position: int | None = Field(default=None, ge=0, description="Active writing position (None = end)")
    cursor_unit: str = Field(default="segment", pattern="^(segment|char)$", description="Unit of cursor_position")
    budget: int = Field(..., description="Maximum size of the output in size units")
    force_tier: int | None = Field(default=None, ge=0, description="Pin a tier level instead of selecting one")

    model_config = ConfigDict(frozen=True)
