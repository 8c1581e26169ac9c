"""
Narrative Context - Configuration Module

Provides typed configuration loading and validation.
"""

from .loader import get_config, load_config, reload_config
from .schemas import (
    CacheConfig,
    EstimatorKind,
    Environment,
    LogLevel,
    NarrativeContextConfig,
    ObservabilityConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "get_config",
    "reload_config",
    # Main config
    "NarrativeContextConfig",
    # Enums
    "Environment",
    "EstimatorKind",
    "LogLevel",
    # Config sections
    "CacheConfig",
    "ObservabilityConfig",
]
