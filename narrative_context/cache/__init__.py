"""
Narrative Context - Result Memo

Optional content-hash memo for OptimizedContext results.
"""

from .memory import ContextMemo, make_key

__all__ = ["ContextMemo", "make_key"]
