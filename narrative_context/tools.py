"""
Narrative Context - Tool Handlers

Async handlers behind the MCP tools. They are plain functions so they can be
called and tested without a running server; server.py only registers them.

Each handler validates its input through validate_input and never raises: library
errors come back as make_error_response dictionaries.
"""

import asyncio
import logging
import threading
from typing import Any

from .compaction import ContextEngine, OptimizeRequest
from .config import get_config
from .errors import ErrorCode, make_error_response
from .sizing import SizeEstimator, estimator_name, get_estimator
from .validation import (
    EstimateSizeInput,
    GetOptimizationSettingsInput,
    OptimizeContextInput,
    validate_input,
)

logger = logging.getLogger(__name__)

# Engines keyed by estimator name, sharing one result memo
_engines: dict[str, ContextEngine] = {}
_engines_lock = threading.Lock()


def _resolve_estimator(name: str | None) -> SizeEstimator:
    config = get_config()
    if name is None or name == config.estimator:
        return config.build_estimator()
    if name == "tiktoken":
        return get_estimator(name, encoding_name=config.tiktoken_encoding)
    return get_estimator(name)


def get_engine(estimator: str | None = None) -> ContextEngine:
    """
    Return the engine for an estimator, creating it on first use.

    Raises:
        ConfigurationError: If the estimator name is unknown
    """
    config = get_config()
    key = estimator or str(config.estimator)
    with _engines_lock:
        engine = _engines.get(key)
        if engine is None:
            shared_cache = next((e.cache for e in _engines.values()), None) or config.build_cache()
            engine = ContextEngine(
                config=config.engine,
                estimator=_resolve_estimator(estimator),
                cache=shared_cache,
            )
            _engines[key] = engine
            logger.info(
                f"Created context engine with estimator {estimator_name(engine.estimator)}",
                extra={"estimator": key, "cache_enabled": shared_cache is not None},
            )
        return engine


def reset_engines() -> None:
    """Drop cached engines so the next call picks up reloaded configuration."""
    with _engines_lock:
        _engines.clear()


@validate_input(OptimizeContextInput)
async def optimize_context(
    content: str,
    budget: int,
    focus_characters: list[str] | None = None,
    cursor_position: int | None = None,
    cursor_unit: str = "segment",
    force_tier: int | None = None,
    estimator: str | None = None,
) -> dict[str, Any]:
    """
    Compact narrative text into a size budget, keeping the most relevant passages.

    Args:
        content: Assembled narrative text (scene, notes, summaries)
        budget: Maximum size of the result in size units
        focus_characters: Characters whose passages should be favored
        cursor_position: Active writing position (None = end of text)
        cursor_unit: 'segment' (paragraph ordinal) or 'char' (character offset)
        force_tier: Pin a compression tier level instead of selecting one
        estimator: Size estimator override

    Returns:
        The optimized context and its report
    """
    engine = get_engine(estimator)

    if force_tier is not None:
        levels = [tier.level for tier in engine.tier_selector.tiers]
        if force_tier not in levels:
            return make_error_response(
                ErrorCode.INVALID_INPUT,
                f"Unknown compression tier {force_tier}",
                {"force_tier": force_tier, "available": levels},
            )

    request = OptimizeRequest(
        raw_text=content,
        focus_characters=frozenset(focus_characters or ()),
        cursor_position=cursor_position,
        cursor_unit=cursor_unit,
        budget=budget,
        force_tier=force_tier,
    )

    # CPU-bound; keep the event loop responsive
    result = await asyncio.to_thread(engine.optimize, request)

    return {
        "success": True,
        "within_budget": result.within_budget,
        **result.model_dump(mode="json"),
    }


@validate_input(EstimateSizeInput)
async def estimate_size(content: str, estimator: str | None = None) -> dict[str, Any]:
    """
    Estimate the size of a text in budget units.

    Args:
        content: Text to measure
        estimator: Size estimator override

    Returns:
        Estimated size and the estimator used
    """
    est = get_engine(estimator).estimator
    return {
        "success": True,
        "size": est(content),
        "estimator": estimator_name(est),
        "characters": len(content),
    }


@validate_input(GetOptimizationSettingsInput)
async def get_optimization_settings() -> dict[str, Any]:
    """
    Get current context optimization settings.

    Returns:
        Engine configuration, estimator and memo statistics
    """
    config = get_config()
    engine = get_engine()
    return {
        "success": True,
        "estimator": estimator_name(engine.estimator),
        "engine": config.engine.model_dump(mode="json"),
        "cache": engine.cache.get_stats() if engine.cache is not None else {"enabled": False},
    }
