"""
Narrative Context — Report Builder Tests

Coverage, quality score, preserved/lost tags and run statistics.
"""

import pytest

from narrative_context.compaction import (
    CompactionResult,
    ContentSegment,
    ReportBuilder,
    SegmentKind,
    TierSelection,
    default_tiers,
)
from narrative_context.compaction.compactor import AcceptedSegment

TIERS = {t.level: t for t in default_tiers()}


def make_segment(position: int, importance: float, tags: set[str] | None = None) -> ContentSegment:
    return ContentSegment(
        id=position,
        text=f"passage {position}",
        kind=SegmentKind.DESCRIPTION,
        position=position,
        importance=importance,
        semantic_tags=tags or set(),
    )


@pytest.fixture
def builder() -> ReportBuilder:
    return ReportBuilder(joiner="\n\n", high_importance_threshold=0.5)


def test_empty_report(builder: ReportBuilder) -> None:
    report = builder.empty(50, TIERS[0])
    assert report.content == ""
    assert report.original_size == 0
    assert report.final_size == 0
    assert report.compression_ratio == 1.0
    assert report.quality_score == 1.0
    assert report.budget == 50


def test_coverage(builder: ReportBuilder) -> None:
    surviving = [make_segment(0, 1.0), make_segment(1, 0.6), make_segment(2, 0.1)]
    assert builder.coverage(surviving, {0}) == pytest.approx(0.5)
    assert builder.coverage(surviving, {0, 1}) == 1.0
    assert builder.coverage([], set()) == 1.0


def test_quality_score_charges_compression(builder: ReportBuilder) -> None:
    seg0, seg1 = make_segment(0, 1.0), make_segment(1, 0.6)
    compaction = CompactionResult(
        accepted=[AcceptedSegment(segment=seg0, text="short", size=1, compressed=True)],
        discarded=[seg1],
        total_size=1,
    )
    # coverage 0.5, loss 0.3 on the only kept segment
    assert builder.quality_score([seg0, seg1], compaction, TIERS[3]) == pytest.approx(0.35)


def test_quality_score_capped_by_tier(builder: ReportBuilder) -> None:
    seg0 = make_segment(0, 1.0)
    compaction = CompactionResult(accepted=[AcceptedSegment(seg0, seg0.text, 5)], discarded=[], total_size=5)
    assert builder.quality_score([seg0], compaction, TIERS[0]) == 1.0
    assert builder.quality_score([seg0], compaction, TIERS[2]) == pytest.approx(0.85)


def test_build(builder: ReportBuilder) -> None:
    kept = make_segment(0, 0.9, {"a", "b"})
    dropped = make_segment(1, 0.8, {"b", "c"})
    redundant = make_segment(2, 0.1, {"d"})
    compaction = CompactionResult(
        accepted=[AcceptedSegment(kept, kept.text, 10)],
        discarded=[dropped],
        total_size=10,
    )
    selection = TierSelection(tier=TIERS[0], total_size=20, needed_ratio=0.5)

    report = builder.build(
        segments=[kept, dropped, redundant],
        surviving=[kept, dropped],
        redundant=[redundant],
        compaction=compaction,
        selection=selection,
        budget=10,
        original_size=20,
        decay_applied=True,
    )

    assert report.content == "passage 0"
    assert report.compression_ratio == pytest.approx(0.5)
    assert report.preserved_elements == ["a", "b"]
    assert report.lost_elements == ["c", "d"]
    assert report.kept_positions == [0]
    assert report.quality_score == pytest.approx(0.5)
    assert report.stats.segments_processed == 3
    assert report.stats.redundancy_removed == 1
    assert report.stats.segments_discarded == 1
    assert report.stats.decay_applied is True
    assert report.stats.budget_exceeded is False
    assert any("Quality score" in s for s in report.suggestions)
    assert any("concepts were dropped" in s for s in report.suggestions)


def test_report_is_immutable(builder: ReportBuilder) -> None:
    report = builder.empty(10, TIERS[0])
    with pytest.raises(Exception):
        report.content = "changed"  # type: ignore[misc]
