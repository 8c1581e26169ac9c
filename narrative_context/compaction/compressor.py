"""
Segment Compressor

Deterministic, extractive transformations applied by a compression tier:

- elimination: drop low-importance segments of a kind outright
- summarization: keep the most salient fraction of sentences, in order
- abstraction: lead sentence truncated to a few words
- dialogue_condense: keep quoted utterances, drop the narration around them
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence

from ..errors import CompressionError
from .models import CompressionStrategy, ContentSegment, StrategyKind
from .text import quoted_spans, simple_tokens, split_sentences, truncate_words

logger = logging.getLogger(__name__)


class SegmentCompressor:
    def __init__(self, quote_pairs: Iterable[tuple[str, str]]):
        self.quote_pairs = list(quote_pairs)

    def compress(self, segment: ContentSegment, strategies: Sequence[CompressionStrategy]) -> str | None:
        """
        Apply every strategy targeting the segment's kind, in tier order.

        Returns:
            The compressed text, the original text if no strategy applies, or None
            when the segment is eliminated
        """
        text: str | None = segment.text
        for strategy in strategies:
            if text is None:
                break
            if not strategy.applies_to(segment.kind):
                continue
            text = self._apply(strategy, segment, text)
        if text is not None and not text.strip():
            return None
        return text

    def _apply(self, strategy: CompressionStrategy, segment: ContentSegment, text: str) -> str | None:
        params = strategy.parameters
        if strategy.kind == StrategyKind.ELIMINATION:
            return None if segment.importance < params.get("max_importance", 1.0) else text
        if strategy.kind == StrategyKind.SUMMARIZATION:
            return self.summarize(segment, text, params.get("keep_ratio", 0.5))
        if strategy.kind == StrategyKind.ABSTRACTION:
            return self.abstract(text, int(params.get("max_words", 16)))
        if strategy.kind == StrategyKind.DIALOGUE_CONDENSE:
            return self.condense_dialogue(text, int(params.get("max_utterances", 2)))
        raise CompressionError(f"Unknown compression strategy: {strategy.kind}", {"strategy": str(strategy.kind)})

    def _sentence_salience(self, segment: ContentSegment, sentence: str, index: int) -> float:
        tokens = set(simple_tokens(sentence))
        score = float(len(tokens & segment.semantic_tags))
        score += 2.0 * sum(1 for name in segment.character_relevance if name in sentence)
        if quoted_spans(sentence, self.quote_pairs):
            score += 1.0
        if index == 0:
            score += 0.5
        return score

    def summarize(self, segment: ContentSegment, text: str, keep_ratio: float) -> str:
        sentences = split_sentences(text)
        keep_ratio = min(1.0, max(0.0, keep_ratio))
        if len(sentences) >= 2:
            keep = max(1, math.ceil(len(sentences) * keep_ratio))
            if keep < len(sentences):
                ranked = sorted(
                    range(len(sentences)),
                    key=lambda i: (-self._sentence_salience(segment, sentences[i], i), i),
                )
                chosen = sorted(ranked[:keep])
                return " ".join(sentences[i] for i in chosen)
        words = len(text.split())
        return truncate_words(text, max(1, math.floor(words * keep_ratio)))

    def abstract(self, text: str, max_words: int) -> str:
        sentences = split_sentences(text)
        lead = sentences[0] if sentences else text
        return truncate_words(lead, max(1, max_words))

    def condense_dialogue(self, text: str, max_utterances: int) -> str:
        spans = quoted_spans(text, self.quote_pairs)
        if not spans:
            return text
        utterances = [text[start:end] for start, end in spans[: max(1, max_utterances)]]
        return " ".join(utterances)
