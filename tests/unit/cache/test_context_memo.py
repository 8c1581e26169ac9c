"""
Narrative Context — Result Memo Tests

LRU eviction, TTL support, statistics and key derivation.
"""

import pytest

from narrative_context.cache import ContextMemo, make_key
from narrative_context.cache import memory as memory_module
from narrative_context.compaction import OptimizedContext
from narrative_context.errors import CacheError


def make_result(budget: int = 10) -> OptimizedContext:
    return OptimizedContext(
        content="text",
        original_size=4,
        final_size=4,
        budget=budget,
        compression_ratio=1.0,
        tier_used=0,
        quality_score=1.0,
    )


@pytest.fixture
def memo() -> ContextMemo:
    return ContextMemo(max_size=2, default_ttl=0, namespace="test")


class TestContextMemo:
    def test_initialization(self) -> None:
        memo = ContextMemo()
        assert memo.max_size == 100
        assert memo.default_ttl == 0
        stats = memo.get_stats()
        assert stats["hits"] == 0
        assert stats["misses"] == 0
        assert stats["size"] == 0

    def test_invalid_size(self) -> None:
        with pytest.raises(ValueError):
            ContextMemo(max_size=0)

    def test_set_and_get(self, memo: ContextMemo) -> None:
        result = make_result()
        assert memo.set("k1", result) is True
        assert memo.get("k1") is result

        stats = memo.get_stats()
        assert stats["hits"] == 1
        assert stats["sets"] == 1
        assert stats["hit_rate"] == 1.0

    def test_miss(self, memo: ContextMemo) -> None:
        assert memo.get("missing") is None
        assert memo.get_stats()["misses"] == 1

    def test_empty_key(self, memo: ContextMemo) -> None:
        assert memo.set("", make_result()) is False
        assert memo.get("") is None

    def test_lru_eviction(self, memo: ContextMemo) -> None:
        memo.set("a", make_result(1))
        memo.set("b", make_result(2))
        memo.get("a")  # a becomes most recently used
        memo.set("c", make_result(3))

        assert memo.get("b") is None
        assert memo.get("a") is not None
        assert memo.get("c") is not None
        assert memo.get_stats()["evictions"] == 1
        assert len(memo) == 2

    def test_ttl_expiry(self, memo: ContextMemo, monkeypatch: pytest.MonkeyPatch) -> None:
        now = [1000.0]
        monkeypatch.setattr(memory_module.time, "time", lambda: now[0])

        memo.set("k", make_result(), ttl=10)
        assert memo.get("k") is not None

        now[0] += 11
        assert memo.get("k") is None
        assert len(memo) == 0

    def test_delete_and_clear(self, memo: ContextMemo) -> None:
        memo.set("a", make_result())
        memo.set("b", make_result())
        assert memo.delete("a") is True
        assert memo.delete("a") is False
        assert memo.clear() == 1
        assert len(memo) == 0


class TestMakeKey:
    def test_deterministic_and_focus_order_insensitive(self) -> None:
        k1 = make_key("text", ["Mara", "Tomas"], None, 100)
        k2 = make_key("text", ("Tomas", "Mara"), None, 100)
        assert k1 == k2
        assert len(k1) == 64

    @pytest.mark.parametrize(
        "changes",
        [
            {"raw_text": "other"},
            {"focus_characters": ["Mara"]},
            {"cursor": 3},
            {"budget": 99},
            {"config_json": "{}"},
            {"estimator": "words"},
            {"force_tier": 2},
            {"cursor_unit": "char"},
        ],
    )
    def test_every_input_changes_the_key(self, changes: dict) -> None:
        base = {"raw_text": "text", "focus_characters": [], "cursor": None, "budget": 100}
        assert make_key(**base) != make_key(**{**base, **changes})

    def test_memo_exposes_make_key(self) -> None:
        assert ContextMemo.make_key("t", [], None, 5) == make_key("t", [], None, 5)


def test_rejects_foreign_values(memo: ContextMemo) -> None:
    with pytest.raises(CacheError) as exc_info:
        memo.set("k", {"content": "text"})
    assert exc_info.value.details["type"] == "dict"
    assert len(memo) == 0


def test_key_for_text_with_lone_surrogate() -> None:
    key = make_key("The fog \ud800 rolled in.", ["Mara"], None, 100)

    assert len(key) == 64
    assert key != make_key("The fog  rolled in.", ["Mara"], None, 100)
