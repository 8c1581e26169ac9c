"""
Narrative Context - Context Budgeting Engine

Relevance-ranked compaction of narrative text (scenes, character notes, plot
points, world notes, chapter summaries) into a fixed size budget.
"""

__version__ = "1.0.0"

from .compaction import (
    CompressionTier,
    ContextEngine,
    ContextSources,
    EngineConfig,
    OptimizedContext,
    OptimizeRequest,
    optimize_context,
)
from .errors import BudgetInfeasibleError, InvalidBudgetError, NarrativeContextError

__all__ = [
    "ContextEngine",
    "ContextSources",
    "CompressionTier",
    "EngineConfig",
    "OptimizeRequest",
    "OptimizedContext",
    "optimize_context",
    "NarrativeContextError",
    "InvalidBudgetError",
    "BudgetInfeasibleError",
]
