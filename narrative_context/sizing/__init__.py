"""
Size estimation for context budgets.
"""

from .estimators import (
    ESTIMATORS,
    HeuristicEstimator,
    SizeEstimator,
    TiktokenEstimator,
    WordEstimator,
    estimator_name,
    get_estimator,
)

__all__ = [
    "ESTIMATORS",
    "HeuristicEstimator",
    "SizeEstimator",
    "TiktokenEstimator",
    "WordEstimator",
    "estimator_name",
    "get_estimator",
]
