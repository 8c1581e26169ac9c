"""
Scorer

importance = sum(weight_i * feature_i(segment, focus)), clamped to [0, 1].

Feature functions are looked up by the same names as the ScoringWeights fields.
A feature that raises or returns a non-finite value contributes the neutral value 0
so one weak heuristic never aborts the pipeline.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor

from .config import ScorerConfig
from .features import DEFAULT_FEATURES, FeatureFn, character_relevance
from .models import ContentSegment

logger = logging.getLogger(__name__)


class Scorer:
    def __init__(
        self,
        config: ScorerConfig | None = None,
        features: Mapping[str, FeatureFn] | None = None,
    ):
        self.config = config or ScorerConfig()
        self.features: dict[str, FeatureFn] = dict(DEFAULT_FEATURES)
        if features:
            self.features.update(features)

        weights = self.config.weights.as_dict()
        missing = sorted(name for name in weights if name not in self.features)
        if missing:
            raise ValueError(f"No feature function registered for weights: {', '.join(missing)}")
        self._weighted = [(name, weights[name], self.features[name]) for name in weights]

    def _feature_value(self, name: str, fn: FeatureFn, segment: ContentSegment, focus: frozenset[str]) -> float:
        try:
            value = float(fn(segment, focus))
        except Exception as e:
            logger.warning(
                f"Feature '{name}' failed on segment {segment.id}, using neutral value: {e}",
                extra={"feature": name, "segment_id": segment.id, "error": str(e)},
            )
            return 0.0
        if not math.isfinite(value):
            logger.warning(
                f"Feature '{name}' returned non-finite value on segment {segment.id}",
                extra={"feature": name, "segment_id": segment.id},
            )
            return 0.0
        return min(1.0, max(0.0, value))

    def score_segment(self, segment: ContentSegment, focus_characters: frozenset[str]) -> ContentSegment:
        total = 0.0
        for name, weight, fn in self._weighted:
            if weight == 0.0:
                continue
            total += weight * self._feature_value(name, fn, segment, focus_characters)

        segment.importance = min(1.0, max(0.0, total))
        segment.character_relevance = character_relevance(segment, focus_characters)
        return segment

    def score(self, segments: list[ContentSegment], focus_characters: Iterable[str] = ()) -> list[ContentSegment]:
        """
        Score every segment in place.

        With max_workers > 1 segments are scored on a thread pool; each worker writes
        only its own segment and the call returns after all of them finished.
        """
        focus = frozenset(focus_characters)
        workers = self.config.max_workers

        if workers > 1 and len(segments) > 1:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="scorer") as pool:
                list(pool.map(lambda seg: self.score_segment(seg, focus), segments))
        else:
            for seg in segments:
                self.score_segment(seg, focus)

        if segments:
            logger.debug(
                f"Scored {len(segments)} segments",
                extra={
                    "segments": len(segments),
                    "max_importance": max(s.importance for s in segments),
                    "workers": workers,
                },
            )
        return segments
