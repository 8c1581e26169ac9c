"""
Narrative Context - Validation Decorators

Provides decorators for applying Pydantic validation to MCP tools.

- validate_input decorator for automatic input validation
- Structured error responses with ErrorCode
"""

import functools
import inspect
import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ValidationError

from ..errors import ErrorCode, NarrativeContextError, extract_error_code, make_error_response

logger = logging.getLogger(__name__)


def _validation_errors(error: ValidationError) -> list[dict[str, str]]:
    return [
        {
            "field": " -> ".join(str(loc) for loc in item["loc"]),
            "message": item["msg"],
            "type": item["type"],
        }
        for item in error.errors()
    ]


def _invalid_input_response(func_name: str, error: ValidationError, kwargs: dict[str, Any]) -> dict[str, Any]:
    validation_errors = _validation_errors(error)
    logger.warning(
        f"Input validation failed for {func_name}",
        extra={
            "function": func_name,
            "validation_errors": validation_errors,
            "input_keys": sorted(kwargs),
        },
    )
    return make_error_response(
        error_code=ErrorCode.INVALID_INPUT,
        message="Input validation failed",
        context={
            "validation_errors": validation_errors,
            "function": func_name,
        },
    )


def _failure_response(func_name: str, error: Exception) -> dict[str, Any]:
    if isinstance(error, NarrativeContextError):
        logger.warning(
            f"{func_name} failed: {error.message}",
            extra={"function": func_name, "error_type": type(error).__name__},
        )
        return make_error_response(extract_error_code(error), error.message, error.details)

    logger.error(
        f"Unexpected error in {func_name}: {error}",
        extra={
            "function": func_name,
            "error": str(error),
            "error_type": type(error).__name__,
        },
        exc_info=True,
    )
    return make_error_response(
        error_code=ErrorCode.INTERNAL_ERROR,
        message=f"Unexpected error: {error}",
        context={"function": func_name},
    )


def validate_input(schema: type[BaseModel]) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator to validate tool inputs using Pydantic schema.

    Args:
        schema: Pydantic model class for input validation

    Returns:
        Decorated function with automatic validation

    Example:
        >>> @validate_input(EstimateSizeInput)
        ... async def estimate_size(content: str, estimator: str = "heuristic"):
        ...     # Function receives validated inputs
        ...     pass

    Error Response:
        {
            "success": False,
            "error_code": "INVALID_INPUT",
            "message": "Input validation failed",
            "details": {
                "validation_errors": [
                    {
                        "field": "budget",
                        "message": "Input should be a valid integer",
                        "type": "int_parsing"
                    }
                ]
            }
        }

    Library errors raised by the wrapped function are turned into error
    responses with the matching ErrorCode; tools never raise to the client.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                validated = schema(**kwargs)
            except ValidationError as e:
                return _invalid_input_response(func.__name__, e, kwargs)

            try:
                return await func(*args, **validated.model_dump(exclude_unset=False))
            except Exception as e:
                return _failure_response(func.__name__, e)

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                validated = schema(**kwargs)
            except ValidationError as e:
                return _invalid_input_response(func.__name__, e, kwargs)

            try:
                return func(*args, **validated.model_dump(exclude_unset=False))
            except Exception as e:
                return _failure_response(func.__name__, e)

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
