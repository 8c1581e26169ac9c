"""
Narrative Context - Core Error Types

Defines the exception hierarchy for the context budgeting engine.
All exceptions inherit from NarrativeContextError for consistent error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Standard error codes for tool responses.

    Returned in the error_code field of tool responses so clients can branch on them.
    """

    # Input validation errors
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_BUDGET = "INVALID_BUDGET"

    # Budget outcome
    BUDGET_INFEASIBLE = "BUDGET_INFEASIBLE"

    # Configuration
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Cache errors
    CACHE_FAILURE = "CACHE_FAILURE"

    # Internal errors
    COMPRESSION_FAILED = "COMPRESSION_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class NarrativeContextError(Exception):
    """Base exception for all narrative context errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(NarrativeContextError):
    """Raised for invalid settings: bad environment values, unknown estimators or tiers."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=500)


class ValidationError(NarrativeContextError):
    """Raised when a request or tool input is malformed."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=400)


class InvalidBudgetError(ValidationError):
    """Raised when the size budget is not a positive integer."""

    def __init__(self, budget: int):
        super().__init__(f"Budget must be a positive integer, got {budget}", {"budget": budget})
        self.budget = budget


class BudgetInfeasibleError(NarrativeContextError):
    """Raised on request when even the most aggressive tier could not fit the budget."""

    def __init__(self, budget: int, final_size: int, tier: int):
        message = f"Budget of {budget} could not be met (final size {final_size}, tier {tier})"
        super().__init__(
            message,
            {"budget": budget, "final_size": final_size, "tier": tier},
            status_code=422,
        )
        self.budget = budget
        self.final_size = final_size
        self.tier = tier


class CompressionError(NarrativeContextError):
    """Raised when a compression strategy cannot be applied to a segment."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=500)


class CacheError(NarrativeContextError):
    """Raised when the optional result memo misbehaves."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=500)


def make_error_response(
    error_code: ErrorCode,
    message: str,
    context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Create a standardized error response for tools.

    Args:
        error_code: Standard error code
        message: Human-readable error message
        context: Additional context/details

    Returns:
        Standardized error response dictionary

    Example:
        >>> make_error_response(
        ...     ErrorCode.INVALID_BUDGET,
        ...     "Budget must be a positive integer, got 0",
        ...     {"budget": 0}
        ... )
        {
            "success": False,
            "error_code": "INVALID_BUDGET",
            "message": "Budget must be a positive integer, got 0",
            "details": {"budget": 0}
        }
    """
    return {
        "success": False,
        "error_code": error_code.value,
        "message": message,
        "details": context or {},
    }


def extract_error_code(error: Exception) -> ErrorCode:
    """
    Extract appropriate ErrorCode from an exception.

    Args:
        error: Exception to categorize

    Returns:
        Appropriate ErrorCode for the exception
    """
    if isinstance(error, InvalidBudgetError):
        return ErrorCode.INVALID_BUDGET

    if isinstance(error, BudgetInfeasibleError):
        return ErrorCode.BUDGET_INFEASIBLE

    if isinstance(error, ValidationError):
        return ErrorCode.INVALID_INPUT

    if isinstance(error, ConfigurationError):
        return ErrorCode.CONFIGURATION_ERROR

    if isinstance(error, CacheError):
        return ErrorCode.CACHE_FAILURE

    if isinstance(error, CompressionError):
        return ErrorCode.COMPRESSION_FAILED

    return ErrorCode.INTERNAL_ERROR
