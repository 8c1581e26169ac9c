"""
AttentionWeighter

Refines importance by narrative distance from the writing cursor:

    weight = exp(-distance * temporal_decay)
    weight *= importance_boost        if importance > importance_boost_threshold
    importance = clamp(importance * weight, 0, 1)
"""

from __future__ import annotations

import logging
import math

from .config import AttentionConfig
from .models import ContentSegment

logger = logging.getLogger(__name__)


class AttentionWeighter:
    def __init__(self, config: AttentionConfig | None = None):
        self.config = config or AttentionConfig()

    def weight_for(self, segment: ContentSegment, cursor: int) -> float:
        distance = abs(segment.position - cursor)
        weight = math.exp(-distance * self.config.temporal_decay)
        if segment.importance > self.config.importance_boost_threshold:
            weight *= self.config.importance_boost
        return weight

    def apply(self, segments: list[ContentSegment], cursor: int) -> list[ContentSegment]:
        for seg in segments:
            seg.distance = abs(seg.position - cursor)
            seg.importance = min(1.0, max(0.0, seg.importance * self.weight_for(seg, cursor)))

        if segments:
            logger.debug(
                f"Applied attention decay around position {cursor}",
                extra={"cursor": cursor, "segments": len(segments), "decay": self.config.temporal_decay},
            )
        return segments
