"""
Importance Features

Independently swappable sub-scores used by the Scorer. Each feature takes a
segment and the caller's focus-character set and returns a value in [0, 1].
Features are lexical heuristics: replace any of them by registering a different
callable under the same name.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping

from .models import ContentSegment, SegmentKind
from .text import count_markers

FeatureFn = Callable[[ContentSegment, frozenset[str]], float]

PLOT_MARKERS: tuple[str, ...] = (
    "suddenly",
    "finally",
    "decided",
    "discovered",
    "revealed",
    "arrived",
    "attacked",
    "escaped",
    "betrayed",
    "killed",
    "died",
    "captured",
    "stolen",
    "secret",
    "truth",
    "must",
    "plan",
    "war",
    "deal",
    "agreed",
    "refused",
    "突然",
    "終於",
    "發現",
    "決定",
)

FORESHADOWING_MARKERS: tuple[str, ...] = (
    "someday",
    "one day",
    "little did",
    "would later",
    "would never",
    "omen",
    "ominous",
    "prophecy",
    "foretold",
    "strange",
    "unaware",
    "shadow",
    "warning",
    "had no idea",
    "伏筆",
    "預兆",
)

DEVELOPMENT_MARKERS: tuple[str, ...] = (
    "changed",
    "realized",
    "learned",
    "understood",
    "promised",
    "vowed",
    "regret",
    "regretted",
    "forgave",
    "for the first time",
    "no longer",
    "never again",
    "admitted",
    "confessed",
    "成長",
    "明白",
)

EMOTION_MARKERS: tuple[str, ...] = (
    "love",
    "loved",
    "hate",
    "hated",
    "anger",
    "angry",
    "rage",
    "fear",
    "afraid",
    "terrified",
    "tears",
    "wept",
    "cried",
    "joy",
    "grief",
    "sorrow",
    "despair",
    "trembled",
    "愛",
    "恨",
    "怒",
    "喜",
    "悲",
    "恐",
)

IMPORTANCE_MARKERS: tuple[str, ...] = (
    "important",
    "remember",
    "never forget",
    "crucial",
    "⚠",
    "重要",
)


def mention_count(text: str, name: str) -> int:
    if not name:
        return 0
    if name.isascii():
        return len(re.findall(rf"\b{re.escape(name)}\b", text))
    return text.count(name)


def character_relevance(segment: ContentSegment, focus_characters: frozenset[str]) -> dict[str, float]:
    """Per-character relevance: 0.5 per mention, capped at 1.0. Unmentioned characters are omitted."""
    relevance: dict[str, float] = {}
    for name in sorted(focus_characters):
        mentions = mention_count(segment.text, name)
        if mentions:
            relevance[name] = min(1.0, 0.5 * mentions)
    return relevance


def character_mention(segment: ContentSegment, focus_characters: frozenset[str]) -> float:
    if not focus_characters:
        return 0.0
    return min(1.0, sum(character_relevance(segment, focus_characters).values()))


def dialogue_bonus(segment: ContentSegment, focus_characters: frozenset[str]) -> float:
    return 1.0 if segment.kind == SegmentKind.DIALOGUE else 0.0


def _saturating(hits: int, saturation: int) -> float:
    return min(1.0, hits / saturation)


def plot_advancement(segment: ContentSegment, focus_characters: frozenset[str]) -> float:
    return _saturating(count_markers(segment.text, PLOT_MARKERS), 3)


def foreshadowing(segment: ContentSegment, focus_characters: frozenset[str]) -> float:
    return _saturating(count_markers(segment.text, FORESHADOWING_MARKERS), 2)


def character_development(segment: ContentSegment, focus_characters: frozenset[str]) -> float:
    return _saturating(count_markers(segment.text, DEVELOPMENT_MARKERS), 2)


def emotional_beat(segment: ContentSegment, focus_characters: frozenset[str]) -> float:
    hits = count_markers(segment.text, EMOTION_MARKERS)
    hits += min(2, segment.text.count("!") + segment.text.count("！"))
    return _saturating(hits, 3)


DEFAULT_FEATURES: Mapping[str, FeatureFn] = {
    "character_mention": character_mention,
    "dialogue": dialogue_bonus,
    "plot_advancement": plot_advancement,
    "foreshadowing": foreshadowing,
    "character_development": character_development,
    "emotional_beat": emotional_beat,
}


def constant_feature(value: float) -> FeatureFn:
    """Feature returning a fixed value, for callers that want a stub in place of a heuristic."""
    clamped = min(1.0, max(0.0, value))

    def feature(segment: ContentSegment, focus_characters: frozenset[str]) -> float:
        return clamped

    feature.__name__ = f"constant_{clamped:g}"
    return feature
