"""
Text utilities shared by the compaction stages: tokenization, sentence splitting,
marker matching and tag extraction. All functions are pure.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable
from functools import lru_cache

_WORD_RE = re.compile(r"[A-Za-z0-9_]+(?:['\-][A-Za-z0-9_]+)?|[一-鿿]+")
_LATIN_WORD_RE = re.compile(r"[A-Za-z][A-Za-z'\-]*")
_SENTENCE_RE = re.compile(
    r"(?<=[.!?…。！？])\s+"
    r"|(?<=[.!?][\"'”」』])\s+"
    r"|(?<=[。！？])(?![」』”\s])"
    r"|(?<=[。！？][」』”])(?!\s)"
)
_CJK_RE = re.compile(r"[一-鿿]")

STOPWORDS: frozenset[str] = frozenset(
    """
    a about above after again against all also am an and any are as at be because been
    before being below between both but by can could did do does doing down during each
    few for from further had has have having he her here hers herself him himself his how
    i if in into is it its itself just like me more most my myself no nor not now of off
    on once only or other our ours ourselves out over own same she should so some such
    than that the their theirs them themselves then there these they this those through
    to too under until up very was we were what when where which while who whom why will
    with would you your yours yourself yourselves said says say one two back still even
    again away much many upon yet
    """.split()
)


def simple_tokens(text: str) -> list[str]:
    return [t.lower() for t in _WORD_RE.findall(text)]


def split_sentences(text: str) -> list[str]:
    parts = _SENTENCE_RE.split(text.strip())
    return [p.strip() for p in parts if p and p.strip()]


def has_cjk(text: str) -> bool:
    return bool(_CJK_RE.search(text))


@lru_cache(maxsize=256)
def _marker_pattern(markers: tuple[str, ...]) -> re.Pattern[str] | None:
    alternatives = []
    for marker in markers:
        if not marker:
            continue
        escaped = re.escape(marker.lower())
        # Latin markers match on word boundaries, CJK markers as plain substrings
        if marker.isascii():
            alternatives.append(rf"\b{escaped}\b")
        else:
            alternatives.append(escaped)
    if not alternatives:
        return None
    return re.compile("|".join(alternatives))


def count_markers(text: str, markers: Iterable[str]) -> int:
    """Number of marker occurrences in text (case-insensitive, word-bounded for Latin)."""
    pattern = _marker_pattern(tuple(markers))
    if pattern is None:
        return 0
    return len(pattern.findall(text.lower()))


def contains_marker(text: str, markers: Iterable[str]) -> bool:
    return count_markers(text, markers) > 0


def has_quote_pair(text: str, quote_pairs: Iterable[tuple[str, str]]) -> bool:
    """True when an opening quote is followed later in the text by its closing quote."""
    for opening, closing in quote_pairs:
        start = text.find(opening)
        if start == -1:
            continue
        if text.find(closing, start + len(opening)) != -1:
            return True
    return False


def quoted_spans(text: str, quote_pairs: Iterable[tuple[str, str]]) -> list[tuple[int, int]]:
    """(start, end) spans of quoted utterances including their quotes, in text order."""
    spans: list[tuple[int, int]] = []
    for opening, closing in quote_pairs:
        cursor = 0
        while True:
            start = text.find(opening, cursor)
            if start == -1:
                break
            end = text.find(closing, start + len(opening))
            if end == -1:
                break
            spans.append((start, end + len(closing)))
            cursor = end + len(closing)
    spans.sort()
    # Straight quotes may be matched by several pairs; drop overlaps
    merged: list[tuple[int, int]] = []
    for span in spans:
        if merged and span[0] < merged[-1][1]:
            continue
        merged.append(span)
    return merged


def proper_names(text: str) -> list[str]:
    """Capitalized words that do not start a sentence."""
    names: list[str] = []
    for sentence in split_sentences(text):
        words = _LATIN_WORD_RE.findall(sentence)
        for word in words[1:]:
            if len(word) >= 3 and word[0].isupper() and word.lower() not in STOPWORDS:
                names.append(word)
    return names


def extract_tags(text: str, max_tags: int = 8) -> set[str]:
    """
    Key nouns/concepts of a passage.

    Ranks non-stopword tokens of length >= 3 by frequency, with proper names counted
    twice; ties resolve toward first occurrence so the result is deterministic.
    """
    tokens = [t for t in simple_tokens(text) if len(t) >= 3 and t not in STOPWORDS and not t.isdigit()]
    if not tokens:
        return set()

    counts: Counter[str] = Counter(tokens)
    for name in proper_names(text):
        lowered = name.lower()
        if lowered in counts:
            counts[lowered] += 1

    first_seen: dict[str, int] = {}
    for i, tok in enumerate(tokens):
        first_seen.setdefault(tok, i)

    ranked = sorted(counts, key=lambda t: (-counts[t], first_seen[t]))
    return set(ranked[:max_tags])


def jaccard(a: set[str], b: set[str]) -> float:
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def truncate_words(text: str, max_words: int) -> str:
    if has_cjk(text) and " " not in text.strip():
        # Unspaced CJK text: two characters stand in for one word
        limit = max(1, max_words * 2)
        return text if len(text) <= limit else text[:limit] + "…"
    words = text.split()
    if len(words) <= max_words:
        return text.strip()
    return " ".join(words[: max(1, max_words)]) + "…"
