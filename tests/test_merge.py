"""Tests for unifeed.feed.merge — deduplication, ordering, and source stats."""

from __future__ import annotations

import random

from unifeed.feed.merge import SourceStats, dedupe_items, merge_items, source_stats
from unifeed.models import Item


def _item(item_id: str, ts: int, title: str | None = None) -> Item:
    return Item(
        id=item_id,
        source=item_id.split(":")[0],
        title=title or item_id,
        author="someone",
        timestamp=ts,
    )


def test_first_occurrence_wins():
    first = _item("reddit:1", 100, title="first")
    second = _item("reddit:1", 300, title="second")
    result = dedupe_items([first, _item("reddit:2", 200), second])
    assert [i.title for i in result] == ["first", "reddit:2"]


def test_merge_sorts_newest_first():
    items = [_item("a:1", 100), _item("b:1", 300), _item("c:1", 200)]
    assert [i.id for i in merge_items(items)] == ["b:1", "c:1", "a:1"]


def test_equal_timestamps_keep_input_order():
    items = [_item("a:1", 100), _item("b:1", 500), _item("c:1", 100), _item("d:1", 100)]
    assert [i.id for i in merge_items(items)] == ["b:1", "a:1", "c:1", "d:1"]


def test_merge_does_not_modify_input():
    items = [_item("a:1", 1), _item("a:2", 2)]
    merge_items(items)
    assert [i.id for i in items] == ["a:1", "a:2"]


def test_merge_properties_on_random_batches():
    rng = random.Random(7)
    for _ in range(50):
        items = [
            _item(f"s{rng.randint(0, 2)}:{rng.randint(0, 15)}", rng.randint(0, 5))
            for _ in range(rng.randint(0, 40))
        ]
        merged = merge_items(items)

        ids = [i.id for i in merged]
        assert len(ids) == len(set(ids))
        assert set(ids) == {i.id for i in items}
        assert all(a.timestamp >= b.timestamp for a, b in zip(merged, merged[1:]))

        first_pos = {}
        for pos, item in enumerate(items):
            first_pos.setdefault(item.id, pos)
        for a, b in zip(merged, merged[1:]):
            if a.timestamp == b.timestamp:
                assert first_pos[a.id] < first_pos[b.id]


def test_source_stats():
    items = [_item("reddit:1", 100), _item("reddit:2", 400), _item("twitter:1", 250)]
    assert source_stats(items) == {
        "reddit": SourceStats(count=2, latest=400),
        "twitter": SourceStats(count=1, latest=250),
    }


def test_source_stats_empty():
    assert source_stats([]) == {}
