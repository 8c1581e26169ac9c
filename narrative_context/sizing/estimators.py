"""
Size Estimators

Pure text -> int functions measuring text in size units (estimated tokens).
The engine takes any callable with that shape; the two here are the defaults:

- HeuristicEstimator: CJK ideographs cost half a unit, everything else a quarter
- TiktokenEstimator: exact BPE token count via tiktoken
"""

import logging
import math
from collections.abc import Callable
from typing import Any, Protocol

import tiktoken

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


class SizeEstimator(Protocol):
    def __call__(self, text: str) -> int: ...


def _is_cjk(ch: str) -> bool:
    return 0x4E00 <= ord(ch) <= 0x9FFF


class HeuristicEstimator:
    """Character-class estimate: about 2 CJK characters or 4 other characters per unit."""

    name = "heuristic"

    def __init__(self, cjk_chars_per_unit: float = 2.0, other_chars_per_unit: float = 4.0):
        if cjk_chars_per_unit <= 0 or other_chars_per_unit <= 0:
            raise ConfigurationError(
                "Characters per unit must be positive",
                details={"cjk": cjk_chars_per_unit, "other": other_chars_per_unit},
            )
        self.cjk_chars_per_unit = cjk_chars_per_unit
        self.other_chars_per_unit = other_chars_per_unit

    def __call__(self, text: str) -> int:
        if not text:
            return 0
        cjk = sum(1 for ch in text if _is_cjk(ch))
        other = len(text) - cjk
        return math.ceil(cjk / self.cjk_chars_per_unit + other / self.other_chars_per_unit)


class TiktokenEstimator:
    """
    Token count with a tiktoken encoding.

    The encoding is loaded lazily on first use and cached on the instance.
    """

    def __init__(self, encoding_name: str = "cl100k_base"):
        self.encoding_name = encoding_name
        self.name = f"tiktoken:{encoding_name}"
        self._encoding: Any = None

    def _get_encoding(self) -> Any:
        if self._encoding is None:
            try:
                self._encoding = tiktoken.get_encoding(self.encoding_name)
            except ValueError as e:
                raise ConfigurationError(
                    f"Unknown tiktoken encoding '{self.encoding_name}'",
                    details={"encoding": self.encoding_name, "error": str(e)},
                ) from e
            logger.debug(f"Loaded tiktoken encoding {self.encoding_name}")
        return self._encoding

    def __call__(self, text: str) -> int:
        if not text:
            return 0
        return len(self._get_encoding().encode(text, disallowed_special=()))


class WordEstimator:
    """One unit per whitespace-separated word. Handy for tests and plain-text budgets."""

    name = "words"

    def __call__(self, text: str) -> int:
        return len(text.split())


ESTIMATORS: dict[str, Callable[..., SizeEstimator]] = {
    "heuristic": HeuristicEstimator,
    "tiktoken": TiktokenEstimator,
    "words": WordEstimator,
}


def get_estimator(name: str = "heuristic", **kwargs: Any) -> SizeEstimator:
    """
    Build a size estimator by name.

    Args:
        name: 'heuristic', 'tiktoken' or 'words'
        **kwargs: Constructor arguments (e.g. encoding_name for tiktoken)

    Raises:
        ConfigurationError: If the name is unknown
    """
    factory = ESTIMATORS.get(name.lower())
    if factory is None:
        raise ConfigurationError(
            f"Unknown size estimator '{name}'",
            details={"estimator": name, "available": sorted(ESTIMATORS)},
        )
    return factory(**kwargs)


def estimator_name(estimator: Callable[[str], int]) -> str:
    name = getattr(estimator, "name", None)
    if isinstance(name, str):
        return name
    return getattr(estimator, "__name__", type(estimator).__name__)
