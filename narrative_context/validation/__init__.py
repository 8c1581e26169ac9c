"""
Narrative Context - Input Validation Module

Provides Pydantic-based validation for all MCP tool inputs.
"""

from .decorators import validate_input
from .tool_schemas import (
    EstimateSizeInput,
    GetOptimizationSettingsInput,
    OptimizeContextInput,
)

__all__ = [
    # Decorator
    "validate_input",
    # Tool input schemas
    "OptimizeContextInput",
    "EstimateSizeInput",
    "GetOptimizationSettingsInput",
]
