"""
Narrative Context — Size Estimator Tests
"""

import pytest

from narrative_context.errors import ConfigurationError
from narrative_context.sizing import (
    HeuristicEstimator,
    TiktokenEstimator,
    WordEstimator,
    estimator_name,
    get_estimator,
)


class TestHeuristicEstimator:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("", 0),
            ("abcd", 1),
            ("abcde", 2),
            ("你好", 1),
            ("你好abcd", 2),
        ],
    )
    def test_estimates(self, text: str, expected: int) -> None:
        assert HeuristicEstimator()(text) == expected

    def test_invalid_rates(self) -> None:
        with pytest.raises(ConfigurationError):
            HeuristicEstimator(other_chars_per_unit=0)

    def test_name(self) -> None:
        assert estimator_name(HeuristicEstimator()) == "heuristic"


class TestWordEstimator:
    def test_counts_words(self) -> None:
        assert WordEstimator()("one two\n\nthree") == 3
        assert WordEstimator()("\n\n") == 0


class TestTiktokenEstimator:
    def test_unknown_encoding(self) -> None:
        with pytest.raises(ConfigurationError):
            TiktokenEstimator("no_such_encoding")("hello")

    def test_counts_tokens(self) -> None:
        estimator = TiktokenEstimator()
        try:
            count = estimator("Hello world, this is a test.")
        except ConfigurationError:
            raise
        except Exception as e:
            pytest.skip(f"tiktoken encoding not available offline: {e}")
        assert count > 0
        assert estimator("") == 0
        assert estimator_name(estimator) == "tiktoken:cl100k_base"

    def test_special_tokens_are_plain_text(self) -> None:
        estimator = TiktokenEstimator()
        try:
            count = estimator("<|endoftext|>")
        except ConfigurationError:
            raise
        except Exception as e:
            pytest.skip(f"tiktoken encoding not available offline: {e}")
        assert count > 0


class TestFactory:
    def test_known_names(self) -> None:
        assert isinstance(get_estimator("heuristic"), HeuristicEstimator)
        assert isinstance(get_estimator("WORDS"), WordEstimator)
        assert isinstance(get_estimator("tiktoken", encoding_name="o200k_base"), TiktokenEstimator)

    def test_unknown_name(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            get_estimator("bogus")
        assert "heuristic" in exc_info.value.details["available"]

    def test_name_of_plain_callable(self) -> None:
        assert estimator_name(len) == "len"
