"""
Narrative Context — Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and end-to-end tests.
"""

import logging
import os
from collections.abc import Callable, Generator

import pytest

from narrative_context.compaction import ContextEngine, EngineConfig
from narrative_context.sizing import WordEstimator

# Set test environment
os.environ["NARRATIVE_CONTEXT_ENVIRONMENT"] = "test"
os.environ["NARRATIVE_CONTEXT_LOG_LEVEL"] = "DEBUG"


SAMPLE_NARRATIVE = """The harbor town of Velmire slept under a thin winter fog.

Mara grabbed the lantern and ran down to the docks.

"They took the ledger," Mara said. "We must get it back before dawn."

Tomas wondered whether the smugglers already knew about the plan.

Suddenly a ship appeared out of the fog, its sails black as ink.

The harbor town of Velmire slept under a thin winter fog.

Mara realized for the first time that she could no longer trust him."""


FIVE_DESCRIPTIONS = "\n\n".join(
    [
        "The valley lay quiet beneath fresh snow and pale light.",
        "Old stone towers lined the northern ridge like broken teeth.",
        "A narrow river curled through reeds toward the distant harbor.",
        "Market stalls offered copper lanterns, dried figs and woolen cloaks.",
        "Clouds gathered over the mountains as evening bells rang faintly.",
    ]
)


class BlockEstimator:
    """Every non-blank text costs the same number of units; separators are free."""

    name = "block"

    def __init__(self, units: int = 100):
        self.units = units

    def __call__(self, text: str) -> int:
        return self.units if text.strip() else 0


@pytest.fixture
def sample_narrative() -> str:
    """Seven paragraphs of mixed kinds; paragraphs 0 and 5 are identical."""
    return SAMPLE_NARRATIVE


@pytest.fixture
def five_descriptions() -> str:
    """Five unrelated description paragraphs."""
    return FIVE_DESCRIPTIONS


@pytest.fixture
def word_estimator() -> WordEstimator:
    return WordEstimator()


@pytest.fixture
def block_estimator() -> BlockEstimator:
    return BlockEstimator(100)


@pytest.fixture
def make_engine() -> Callable[..., ContextEngine]:
    """Factory for engines with an explicit estimator and optional config."""

    def factory(estimator: Callable[[str], int] | None = None, config: EngineConfig | None = None, **kwargs):
        return ContextEngine(config=config, estimator=estimator or WordEstimator(), **kwargs)

    return factory


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Generator[None, None, None]:
    """setup_logging() replaces handlers on the package logger; undo it after each test."""
    logger = logging.getLogger("narrative_context")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
