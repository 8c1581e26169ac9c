"""
RedundancyFilter

Elides near-duplicate segments by semantic tag overlap. Two segments are redundant
when their tag-set Jaccard similarity exceeds the threshold and neither resists
compression above the ceiling. Exactly one member of a redundant group survives:
the more important one, earlier position on ties.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .config import RedundancyConfig
from .models import ContentSegment
from .text import extract_tags, jaccard

logger = logging.getLogger(__name__)


@dataclass
class RedundancyResult:
    kept: list[ContentSegment]
    removed: list[ContentSegment] = field(default_factory=list)

    @property
    def removed_count(self) -> int:
        return len(self.removed)


class RedundancyFilter:
    def __init__(self, config: RedundancyConfig | None = None, max_tags: int = 8):
        self.config = config or RedundancyConfig()
        self.max_tags = max_tags

    def tag(self, segments: list[ContentSegment]) -> None:
        """Fill in semantic tags for segments that have none yet."""
        for seg in segments:
            if not seg.semantic_tags:
                seg.semantic_tags = extract_tags(seg.text, self.max_tags)

    def is_redundant(self, a: ContentSegment, b: ContentSegment) -> bool:
        ceiling = self.config.resistance_ceiling
        if a.compression_resistance > ceiling or b.compression_resistance > ceiling:
            return False
        return jaccard(a.semantic_tags, b.semantic_tags) > self.config.similarity_threshold

    @staticmethod
    def _outranks(candidate: ContentSegment, incumbent: ContentSegment) -> bool:
        if candidate.importance != incumbent.importance:
            return candidate.importance > incumbent.importance
        return candidate.position < incumbent.position

    def filter(self, segments: list[ContentSegment]) -> RedundancyResult:
        """
        Walk segments in position order against the current representatives.

        A segment with no redundant representative is kept. Otherwise it is kept only
        if it outranks every representative it duplicates, which are then removed.
        The kept set is pairwise non-redundant, so filtering it again removes nothing.
        """
        self.tag(segments)
        ordered = sorted(segments, key=lambda s: s.position)

        kept: list[ContentSegment] = []
        removed: list[ContentSegment] = []
        for seg in ordered:
            duplicates = [rep for rep in kept if self.is_redundant(seg, rep)]
            if not duplicates:
                kept.append(seg)
                continue
            if all(self._outranks(seg, rep) for rep in duplicates):
                dup_ids = {rep.id for rep in duplicates}
                kept = [rep for rep in kept if rep.id not in dup_ids]
                removed.extend(duplicates)
                kept.append(seg)
            else:
                removed.append(seg)

        if removed:
            logger.debug(
                f"Removed {len(removed)} redundant segments",
                extra={"removed": len(removed), "kept": len(kept), "threshold": self.config.similarity_threshold},
            )
        return RedundancyResult(kept=kept, removed=sorted(removed, key=lambda s: s.position))
