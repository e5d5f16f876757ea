"""Tests for unifeed.ingestion.hn_adapter — Hacker News adapter."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import httpx

from unifeed.ingestion.hn_adapter import HNAdapter
from unifeed.models import HackerNewsEmbed, SourceConfig


def _make_hn_item(item_id, title="Test Story", score=150, item_type="story", time=1700000000):
    return {
        "id": item_id,
        "type": item_type,
        "title": title,
        "score": score,
        "url": f"https://example.com/{item_id}",
        "by": "testuser",
        "time": time,
        "descendants": 12,
    }


def _mock_get(top_ids, items_by_id):
    """Build a side_effect for httpx.get that routes by URL."""
    def side_effect(url, **kwargs):
        resp = MagicMock()
        resp.raise_for_status = MagicMock()
        if "topstories" in url:
            resp.json.return_value = top_ids
        else:
            item_id = int(url.rsplit("/", 1)[-1].split(".")[0])
            resp.json.return_value = items_by_id.get(item_id)
        return resp
    return side_effect


class TestHNAdapter:
    def test_converts_stories(self):
        items_by_id = {1: _make_hn_item(1, "Show HN: Thing", score=42)}

        with patch("unifeed.ingestion.hn_adapter.httpx.get", side_effect=_mock_get([1], items_by_id)):
            result = HNAdapter().fetch(SourceConfig("hackernews"))

        assert len(result) == 1
        item = result[0]
        assert item.id == "hackernews:1"
        assert item.source == "hackernews"
        assert item.title == "Show HN: Thing"
        assert item.author == "testuser"
        assert item.timestamp == 1700000000 * 1000
        assert item.score == 42
        assert item.comment_count == 12
        assert item.comments_url == "https://news.ycombinator.com/item?id=1"
        assert item.embed == HackerNewsEmbed(story_id="1")

    def test_skips_non_stories_and_untitled(self):
        items_by_id = {
            1: _make_hn_item(1, "A Story"),
            2: _make_hn_item(2, "A Job", item_type="job"),
            3: _make_hn_item(3, ""),
        }

        with patch("unifeed.ingestion.hn_adapter.httpx.get", side_effect=_mock_get([1, 2, 3], items_by_id)):
            result = HNAdapter().fetch(SourceConfig("hackernews"))

        assert [i.title for i in result] == ["A Story"]

    def test_respects_max_stories_option(self):
        items_by_id = {i: _make_hn_item(i, f"Story {i}") for i in range(1, 6)}

        with patch("unifeed.ingestion.hn_adapter.httpx.get", side_effect=_mock_get([1, 2, 3, 4, 5], items_by_id)):
            result = HNAdapter(max_stories=50).fetch(
                SourceConfig("hackernews", options={"max_stories": 2})
            )

        assert [i.id for i in result] == ["hackernews:1", "hackernews:2"]

    def test_handles_top_stories_http_error(self):
        with patch("unifeed.ingestion.hn_adapter.httpx.get", side_effect=httpx.ConnectError("fail")):
            result = HNAdapter().fetch(SourceConfig("hackernews"))

        assert result == []

    def test_handles_individual_item_fetch_failure(self):
        def side_effect(url, **kwargs):
            resp = MagicMock()
            resp.raise_for_status = MagicMock()
            if "topstories" in url:
                resp.json.return_value = [1, 2]
                return resp
            if url.endswith("/1.json"):
                raise httpx.ConnectError("fail")
            resp.json.return_value = _make_hn_item(2, "Story Two")
            return resp

        with patch("unifeed.ingestion.hn_adapter.httpx.get", side_effect=side_effect):
            result = HNAdapter().fetch(SourceConfig("hackernews"))

        assert [i.title for i in result] == ["Story Two"]
