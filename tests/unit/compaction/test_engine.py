"""
Narrative Context — Context Engine Tests

End-to-end behavior of a single optimization call: budget validation, cursor
resolution, forced tiers, memoization and best-effort results.
"""

import pytest

from narrative_context.cache import ContextMemo
from narrative_context.compaction import ContextEngine, OptimizeRequest, optimize_context
from narrative_context.errors import BudgetInfeasibleError, CacheError, InvalidBudgetError

TWO_COURTYARDS = "Mara crossed the empty courtyard at dawn.\n\nTomas crossed the empty courtyard at noon."


class TestBudgetValidation:
    @pytest.mark.parametrize("budget", [0, -5])
    def test_non_positive_budget_rejected(self, make_engine, budget: int) -> None:
        with pytest.raises(InvalidBudgetError) as exc_info:
            make_engine().optimize_text("Some text.", budget)
        assert exc_info.value.budget == budget

    def test_request_budget_rejected_before_work(self, make_engine) -> None:
        request = OptimizeRequest(raw_text="", budget=0)
        with pytest.raises(InvalidBudgetError):
            make_engine().optimize(request)


class TestEmptyInput:
    @pytest.mark.parametrize("text", ["", "  \n\n  "])
    def test_empty_result(self, make_engine, text: str) -> None:
        result = make_engine().optimize_text(text, 100)
        assert result.content == ""
        assert result.original_size == 0
        assert result.final_size == 0
        assert result.compression_ratio == 1.0
        assert result.tier_used == 0


class TestSelection:
    def test_generous_budget_keeps_everything(self, make_engine, sample_narrative: str) -> None:
        result = make_engine().optimize_text(sample_narrative, 10_000)

        assert result.tier_used == 0
        # The repeated opening paragraph is elided as redundant
        assert result.kept_positions == [0, 1, 2, 3, 4, 6]
        assert result.stats.redundancy_removed == 1
        assert result.stats.decay_applied is True
        assert result.lost_elements == []

    def test_focus_character_wins_the_budget(self, make_engine, block_estimator) -> None:
        engine = make_engine(block_estimator)

        unfocused = engine.optimize_text(TWO_COURTYARDS, 100)
        focused = engine.optimize_text(TWO_COURTYARDS, 100, focus_characters=["Mara"])

        # Without focus the passage nearer the cursor wins
        assert unfocused.kept_positions == [1]
        assert focused.kept_positions == [0]
        assert focused.content.startswith("Mara")

    def test_segment_cursor(self, make_engine, block_estimator, five_descriptions: str) -> None:
        result = make_engine(block_estimator).optimize_text(five_descriptions, 100, cursor_position=2)
        assert result.kept_positions == [2]

    def test_char_cursor(self, make_engine, block_estimator, five_descriptions: str) -> None:
        engine = make_engine(block_estimator)
        offset = five_descriptions.index("Market stalls") + 3

        result = engine.optimize_text(five_descriptions, 100, cursor_position=offset, cursor_unit="char")

        assert result.kept_positions == [3]

    def test_resolve_cursor_defaults_to_end(self, make_engine, five_descriptions: str) -> None:
        engine = make_engine()
        segments = engine.segmenter.segment(five_descriptions)
        request = OptimizeRequest(raw_text=five_descriptions, budget=10)
        assert engine.resolve_cursor(segments, request) == 5


class TestForcedTier:
    def test_forced_tier_is_reported(self, make_engine, sample_narrative: str) -> None:
        result = make_engine().optimize_text(sample_narrative, 10_000, force_tier=2)
        assert result.tier_used == 2
        assert result.quality_score == pytest.approx(0.85)

    def test_unknown_tier(self, make_engine, sample_narrative: str) -> None:
        with pytest.raises(KeyError):
            make_engine().optimize_text(sample_narrative, 100, force_tier=9)

    def test_forced_tier_on_empty_input(self, make_engine) -> None:
        assert make_engine().optimize_text("", 100, force_tier=3).tier_used == 3


class TestInfeasibleBudget:
    TEXT = " ".join(f"stone{i}" for i in range(30))

    def test_best_effort_result(self, make_engine) -> None:
        result = make_engine().optimize_text(self.TEXT, 1)

        assert result.stats.budget_infeasible is True
        assert result.stats.budget_exceeded is True
        assert result.final_size == 12
        assert result.within_budget is False
        assert result.suggestions

    def test_raise_for_budget(self, make_engine) -> None:
        result = make_engine().optimize_text(self.TEXT, 1)
        with pytest.raises(BudgetInfeasibleError) as exc_info:
            result.raise_for_budget()
        assert exc_info.value.final_size == 12

    def test_raise_for_budget_passes_through(self, make_engine, sample_narrative: str) -> None:
        result = make_engine().optimize_text(sample_narrative, 10_000)
        assert result.raise_for_budget() is result


class TestMemo:
    def test_repeated_call_hits_memo(self, block_estimator, five_descriptions: str) -> None:
        memo = ContextMemo(max_size=10)
        engine = ContextEngine(estimator=block_estimator, cache=memo)

        first = engine.optimize_text(five_descriptions, 1000)
        second = engine.optimize_text(five_descriptions, 1000)
        other = engine.optimize_text(five_descriptions, 300)

        assert second is first
        assert other is not first
        stats = memo.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 2

    def test_memo_does_not_change_results(self, block_estimator, sample_narrative: str) -> None:
        plain = ContextEngine(estimator=block_estimator).optimize_text(sample_narrative, 300)
        memoized = ContextEngine(estimator=block_estimator, cache=ContextMemo()).optimize_text(sample_narrative, 300)
        assert plain == memoized


def test_optimize_context_function(word_estimator, sample_narrative: str) -> None:
    result = optimize_context(sample_narrative, 40, focus_characters={"Mara"}, estimator=word_estimator)
    assert result.final_size <= 40
    assert result.original_size == word_estimator(sample_narrative)


def test_failing_memo_does_not_change_results(block_estimator, five_descriptions: str) -> None:
    class BrokenMemo(ContextMemo):
        def get(self, key):
            raise CacheError("memo offline")

        def set(self, key, value, ttl=None):
            raise CacheError("memo offline")

    plain = ContextEngine(estimator=block_estimator).optimize_text(five_descriptions, 300)
    broken = ContextEngine(estimator=block_estimator, cache=BrokenMemo()).optimize_text(five_descriptions, 300)

    assert broken == plain


class TestQualityCeiling:
    @pytest.mark.parametrize("budget", [20, 25])
    def test_aggressive_tier_never_outscores_gentler_tier(self, make_engine, sample_narrative: str, budget: int) -> None:
        engine = make_engine()

        gentler = engine.optimize_text(sample_narrative, budget, force_tier=2)
        harsher = engine.optimize_text(sample_narrative, budget, force_tier=3)
        harshest = engine.optimize_text(sample_narrative, budget, force_tier=4)

        assert harsher.quality_score <= gentler.quality_score
        assert harshest.quality_score <= harsher.quality_score

    def test_tier_zero_has_no_ceiling(self, make_engine, sample_narrative: str) -> None:
        engine = make_engine()
        segments = engine.segmenter.segment(sample_narrative)
        selection = engine.select_tier(10, 100, force_tier=0)

        assert engine.quality_ceiling(segments, {}, selection, 100) == 1.0


def test_memo_accepts_lone_surrogates(word_estimator) -> None:
    text = "Mara ran.\n\nThe fog \ud800 rolled in."

    plain = ContextEngine(estimator=word_estimator).optimize_text(text, 100)
    memoized = ContextEngine(estimator=word_estimator, cache=ContextMemo()).optimize_text(text, 100)

    assert memoized == plain
    assert memoized.final_size == 7
