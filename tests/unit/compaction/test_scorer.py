"""
Narrative Context — Scorer Tests

Weighted feature sums, clamping, neutral values for failing features and
thread-parallel scoring.
"""

import pytest

from narrative_context.compaction import (
    ContentSegment,
    Scorer,
    ScorerConfig,
    ScoringWeights,
    Segmenter,
    SegmentKind,
    constant_feature,
)


def make_segment(text: str, kind: SegmentKind = SegmentKind.DESCRIPTION, position: int = 0) -> ContentSegment:
    return ContentSegment(id=position, text=text, kind=kind, position=position)


def only(name: str) -> ScorerConfig:
    """Config weighting a single feature at 1.0."""
    weights = {field: 0.0 for field in ScoringWeights.model_fields}
    weights[name] = 1.0
    return ScorerConfig(weights=ScoringWeights(**weights))


def test_default_weights_sum_to_one() -> None:
    assert ScoringWeights().total() == pytest.approx(1.0)


def test_dialogue_with_focus_character() -> None:
    segment = make_segment('"Run," Mara said.', SegmentKind.DIALOGUE)
    Scorer().score_segment(segment, frozenset({"Mara"}))

    # 0.25 * 0.5 (one mention) + 0.15 * 1.0 (dialogue)
    assert segment.importance == pytest.approx(0.275)
    assert segment.character_relevance == {"Mara": 0.5}


def test_plot_signal_contributes() -> None:
    segment = make_segment("Suddenly the truth was revealed.")
    Scorer().score_segment(segment, frozenset())
    assert segment.importance == pytest.approx(0.2)


def test_failing_feature_is_neutral() -> None:
    def boom(segment: ContentSegment, focus: frozenset[str]) -> float:
        raise RuntimeError("heuristic exploded")

    segment = make_segment("Suddenly the truth was revealed.")
    Scorer(features={"plot_advancement": boom}).score_segment(segment, frozenset())
    assert segment.importance == 0.0


def test_non_finite_feature_is_neutral() -> None:
    segment = make_segment("Suddenly the truth was revealed.")
    Scorer(features={"plot_advancement": lambda s, f: float("nan")}).score_segment(segment, frozenset())
    assert segment.importance == 0.0


def test_feature_values_are_clamped() -> None:
    segment = make_segment("anything")
    Scorer(only("plot_advancement"), features={"plot_advancement": lambda s, f: 5.0}).score_segment(
        segment, frozenset()
    )
    assert segment.importance == 1.0


def test_weighted_sum_is_clamped() -> None:
    weights = ScoringWeights(
        character_mention=1.0,
        dialogue=1.0,
        plot_advancement=1.0,
        foreshadowing=1.0,
        character_development=1.0,
        emotional_beat=1.0,
    )
    features = {name: constant_feature(1.0) for name in weights.as_dict()}
    segment = make_segment("anything")
    Scorer(ScorerConfig(weights=weights), features=features).score_segment(segment, frozenset())
    assert segment.importance == 1.0


def test_negative_weight_rejected() -> None:
    with pytest.raises(ValueError):
        ScoringWeights(dialogue=-1.0)


def test_parallel_scoring_matches_serial(sample_narrative: str) -> None:
    focus = {"Mara"}
    serial = Segmenter().segment(sample_narrative)
    parallel = Segmenter().segment(sample_narrative)

    Scorer().score(serial, focus)
    Scorer(ScorerConfig(max_workers=4)).score(parallel, focus)

    assert [s.importance for s in serial] == [s.importance for s in parallel]
    assert all(0.0 <= s.importance <= 1.0 for s in serial)


def test_score_empty_list() -> None:
    assert Scorer().score([], ()) == []
