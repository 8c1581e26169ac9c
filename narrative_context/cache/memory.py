"""
Narrative Context - Result Memo

In-memory content-hash -> OptimizedContext memo with LRU eviction and TTL support.
Thread-safe, single process. The engine never depends on it for correctness: a
miss, an expired entry or a failing memo all mean "compute again".
"""

import json
import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Iterable
from typing import Any

import blake3

from ..compaction.models import OptimizedContext
from ..errors import CacheError

logger = logging.getLogger(__name__)


def make_key(
    raw_text: str,
    focus_characters: Iterable[str],
    cursor: int | None,
    budget: int,
    config_json: str = "",
    estimator: str = "",
    force_tier: int | None = None,
    cursor_unit: str = "segment",
) -> str:
    """Content hash of everything that determines an optimization result."""
    params = json.dumps(
        {
            "focus": sorted(focus_characters),
            "cursor": cursor,
            "cursor_unit": cursor_unit,
            "budget": budget,
            "estimator": estimator,
            "force_tier": force_tier,
        },
        sort_keys=True,
    )
    hasher = blake3.blake3()
    hasher.update(raw_text.encode("utf-8", errors="surrogatepass"))
    hasher.update(b"\x00")
    hasher.update(params.encode("utf-8"))
    hasher.update(b"\x00")
    hasher.update(config_json.encode("utf-8"))
    return hasher.hexdigest()


class ContextMemo:
    """
    LRU memo for optimization results.

    Features:
    - LRU eviction when max_size is reached
    - Optional per-entry TTL (0 = no expiry)
    - Hit/miss/set/eviction counters
    """

    make_key = staticmethod(make_key)

    def __init__(
        self,
        max_size: int = 100,
        default_ttl: int = 0,
        namespace: str = "narrative",
    ):
        """
        Initialize the memo.

        Args:
            max_size: Maximum number of entries (LRU eviction when exceeded)
            default_ttl: Default TTL in seconds (0 = no expiry)
            namespace: Key namespace/prefix
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self.default_ttl = default_ttl
        self.namespace = namespace

        # key -> (value, expiry_time)
        self._entries: OrderedDict[str, tuple[OptimizedContext, float | None]] = OrderedDict()

        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._evictions = 0

        self._lock = threading.Lock()

    def _make_key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def _is_expired(self, expiry: float | None) -> bool:
        if expiry is None:
            return False
        return time.time() > expiry

    def get(self, key: str) -> OptimizedContext | None:
        if not key:
            logger.warning("Attempted to get memo entry with empty key")
            return None

        with self._lock:
            memo_key = self._make_key(key)
            entry = self._entries.get(memo_key)
            if entry is None:
                self._misses += 1
                return None

            value, expiry = entry
            if self._is_expired(expiry):
                del self._entries[memo_key]
                self._misses += 1
                return None

            self._entries.move_to_end(memo_key)
            self._hits += 1
            return value

    def set(self, key: str, value: OptimizedContext, ttl: int | None = None) -> bool:
        if not key:
            logger.warning("Attempted to set memo entry with empty key")
            return False
        if not isinstance(value, OptimizedContext):
            raise CacheError(
                "Context memo only stores OptimizedContext values",
                details={"key": key, "type": type(value).__name__},
            )

        effective_ttl = self.default_ttl if ttl is None else ttl
        expiry = time.time() + effective_ttl if effective_ttl > 0 else None

        with self._lock:
            memo_key = self._make_key(key)
            if memo_key in self._entries:
                self._entries.move_to_end(memo_key)
            self._entries[memo_key] = (value, expiry)
            self._sets += 1

            while len(self._entries) > self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                self._evictions += 1
                logger.debug(f"Evicted memo entry {evicted}", extra={"key": evicted})
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(self._make_key(key), None) is not None

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            lookups = self._hits + self._misses
            return {
                "namespace": self.namespace,
                "size": len(self._entries),
                "max_size": self.max_size,
                "hits": self._hits,
                "misses": self._misses,
                "sets": self._sets,
                "evictions": self._evictions,
                "hit_rate": (self._hits / lookups) if lookups else 0.0,
            }
