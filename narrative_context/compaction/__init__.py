"""
Context Compaction Module

Relevance-ranked compaction of narrative text into a fixed size budget.

Pipeline:
1. Segmenter: blank-line paragraphs, typed as dialogue/action/description/thought
2. Scorer: weighted, pluggable importance features
3. RedundancyFilter: tag-overlap near-duplicate elision
4. AttentionWeighter: exponential decay by distance from the writing cursor
5. TierSelector + BudgetedCompactor: greedy selection with compression fallback
6. ReportBuilder: the immutable OptimizedContext
"""

from .attention import AttentionWeighter
from .compactor import BudgetedCompactor, CompactionResult
from .compressor import SegmentCompressor
from .config import (
    AttentionConfig,
    CompactionConfig,
    EngineConfig,
    RedundancyConfig,
    ScorerConfig,
    ScoringWeights,
    SegmenterConfig,
)
from .engine import ContextEngine, optimize_context
from .features import DEFAULT_FEATURES, FeatureFn, constant_feature
from .models import (
    CompressionStrategy,
    CompressionTier,
    ContentSegment,
    OptimizationStats,
    OptimizedContext,
    OptimizeRequest,
    SegmentKind,
    StrategyKind,
)
from .redundancy import RedundancyFilter, RedundancyResult
from .report import ReportBuilder
from .scorer import Scorer
from .segmenter import Segmenter
from .sources import ContextSources
from .tiers import TierSelection, TierSelector, default_tiers

__all__ = [
    # Engine
    "ContextEngine",
    "optimize_context",
    # Models
    "ContentSegment",
    "CompressionStrategy",
    "CompressionTier",
    "OptimizationStats",
    "OptimizedContext",
    "OptimizeRequest",
    "SegmentKind",
    "StrategyKind",
    # Config
    "AttentionConfig",
    "CompactionConfig",
    "EngineConfig",
    "RedundancyConfig",
    "ScorerConfig",
    "ScoringWeights",
    "SegmenterConfig",
    # Stages
    "Segmenter",
    "Scorer",
    "RedundancyFilter",
    "RedundancyResult",
    "AttentionWeighter",
    "TierSelector",
    "TierSelection",
    "default_tiers",
    "SegmentCompressor",
    "BudgetedCompactor",
    "CompactionResult",
    "ReportBuilder",
    # Features and sources
    "DEFAULT_FEATURES",
    "FeatureFn",
    "constant_feature",
    "ContextSources",
]
