"""
Segmenter

Splits raw narrative text on blank-line boundaries into ordered, typed
ContentSegments. Classification is a pure function of the segment text.
"""

from __future__ import annotations

import logging
import re

from .config import SegmenterConfig
from .features import EMOTION_MARKERS, IMPORTANCE_MARKERS
from .models import ContentSegment, SegmentKind
from .text import contains_marker, has_quote_pair, proper_names

logger = logging.getLogger(__name__)


class Segmenter:
    def __init__(self, config: SegmenterConfig | None = None):
        self.config = config or SegmenterConfig()
        self._delimiter = re.compile(self.config.paragraph_delimiter)

    def classify(self, text: str) -> SegmentKind:
        """
        Assign a kind using the fixed precedence:
        dialogue quotation > interiority marker > action marker > description.
        """
        if has_quote_pair(text, self.config.quote_pairs):
            return SegmentKind.DIALOGUE
        if contains_marker(text, self.config.interiority_markers):
            return SegmentKind.INTERNAL_THOUGHT
        if contains_marker(text, self.config.action_markers):
            return SegmentKind.ACTION
        return SegmentKind.DESCRIPTION

    def compression_resistance(self, text: str) -> float:
        resistance = 0.0
        if has_quote_pair(text, self.config.quote_pairs):
            resistance += 0.3
        if proper_names(text):
            resistance += 0.2
        if contains_marker(text, EMOTION_MARKERS):
            resistance += 0.1
        if contains_marker(text, IMPORTANCE_MARKERS):
            resistance += 0.2
        return min(1.0, resistance)

    def paragraphs(self, text: str) -> list[tuple[int, str]]:
        """Non-empty paragraphs with the character offset where each begins."""
        out: list[tuple[int, str]] = []
        start = 0
        for match in self._delimiter.finditer(text):
            self._append_paragraph(out, text, start, match.start())
            start = match.end()
        self._append_paragraph(out, text, start, len(text))
        return out

    @staticmethod
    def _append_paragraph(out: list[tuple[int, str]], text: str, start: int, end: int) -> None:
        chunk = text[start:end]
        stripped = chunk.strip()
        if not stripped:
            return
        lead = len(chunk) - len(chunk.lstrip())
        out.append((start + lead, stripped))

    def segment(self, text: str) -> list[ContentSegment]:
        if not text or not text.strip():
            return []

        segments = [
            ContentSegment(
                id=position,
                text=paragraph,
                kind=self.classify(paragraph),
                position=position,
                offset=offset,
                compression_resistance=self.compression_resistance(paragraph),
            )
            for position, (offset, paragraph) in enumerate(self.paragraphs(text))
        ]

        logger.debug(
            f"Segmented text into {len(segments)} segments",
            extra={"segments": len(segments), "chars": len(text)},
        )
        return segments


def position_for_offset(segments: list[ContentSegment], offset: int) -> int:
    """
    Ordinal of the segment containing a character offset.

    Offsets before the first segment map to its position; offsets past the end map
    to one past the last position (writing after the text).
    """
    if not segments:
        return 0
    position = segments[0].position
    for seg in segments:
        if seg.offset > offset:
            return position
        position = seg.position
        if offset < seg.offset + len(seg.text):
            return position
    return segments[-1].position + 1
