"""Tests for unifeed.ingestion.reddit_adapter — Reddit adapter."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import httpx

from unifeed.ingestion.reddit_adapter import RedditAdapter
from unifeed.models import RedditEmbed, SourceConfig


def _make_post(post_id, title="Test Post", subreddit="python", is_self=False,
               selftext="", thumbnail="https://img.example/t.jpg", created_utc=1700000000):
    return {
        "data": {
            "id": post_id,
            "title": title,
            "url": f"https://example.com/{post_id}",
            "author": "redditor",
            "created_utc": created_utc,
            "score": 321,
            "num_comments": 45,
            "subreddit": subreddit,
            "permalink": f"/r/{subreddit}/comments/{post_id}/",
            "thumbnail": thumbnail,
            "is_self": is_self,
            "selftext": selftext,
        }
    }


def _make_response(posts):
    return {"data": {"children": posts}}


def _token_response(token="tok-123"):
    resp = MagicMock()
    resp.raise_for_status = MagicMock()
    resp.json.return_value = {"access_token": token}
    return resp


def _mock_get(responses_by_subreddit):
    """Build a side_effect for httpx.get that routes by subreddit in URL."""
    def side_effect(url, **kwargs):
        resp = MagicMock()
        resp.raise_for_status = MagicMock()
        for sub_name, response_data in responses_by_subreddit.items():
            if f"/r/{sub_name}/" in url:
                resp.json.return_value = response_data
                return resp
        resp.json.return_value = _make_response([])
        return resp
    return side_effect


def _adapter(**overrides):
    kwargs = {
        "client_id": "id",
        "client_secret": "secret",
        "username": "user",
        "password": "pass",
        "subreddits": ["python"],
    }
    kwargs.update(overrides)
    return RedditAdapter(**kwargs)


class TestRedditAdapter:
    def test_converts_link_posts(self):
        responses = {"python": _make_response([_make_post("a1", "Link Post")])}

        with patch("unifeed.ingestion.reddit_adapter.httpx.post", return_value=_token_response()), \
                patch("unifeed.ingestion.reddit_adapter.httpx.get", side_effect=_mock_get(responses)) as get:
            result = _adapter().fetch(SourceConfig("reddit"))

        assert len(result) == 1
        item = result[0]
        assert item.id == "reddit:a1"
        assert item.url == "https://example.com/a1"
        assert item.content is None
        assert item.timestamp == 1700000000 * 1000
        assert item.comment_count == 45
        assert item.comments_url == "https://www.reddit.com/r/python/comments/a1/"
        assert item.thumbnail == "https://img.example/t.jpg"
        assert item.embed == RedditEmbed(post_id="a1", subreddit="python")
        assert get.call_args.kwargs["headers"]["Authorization"] == "Bearer tok-123"

    def test_self_posts_carry_text_not_url(self):
        post = _make_post("s1", is_self=True, selftext="body text", thumbnail="self")
        responses = {"python": _make_response([post])}

        with patch("unifeed.ingestion.reddit_adapter.httpx.post", return_value=_token_response()), \
                patch("unifeed.ingestion.reddit_adapter.httpx.get", side_effect=_mock_get(responses)):
            result = _adapter().fetch(SourceConfig("reddit"))

        assert result[0].url is None
        assert result[0].content == "body text"
        assert result[0].thumbnail is None

    def test_options_override_subreddits(self):
        responses = {
            "python": _make_response([_make_post("p1")]),
            "rust": _make_response([_make_post("r1", subreddit="rust")]),
        }

        with patch("unifeed.ingestion.reddit_adapter.httpx.post", return_value=_token_response()), \
                patch("unifeed.ingestion.reddit_adapter.httpx.get", side_effect=_mock_get(responses)):
            result = _adapter().fetch(SourceConfig("reddit", options={"subreddits": ["rust"]}))

        assert [i.id for i in result] == ["reddit:r1"]

    def test_missing_credentials_returns_empty(self):
        with patch("unifeed.ingestion.reddit_adapter.httpx.post") as post:
            result = _adapter(password=None).fetch(SourceConfig("reddit"))

        assert result == []
        post.assert_not_called()

    def test_token_failure_returns_empty(self):
        with patch("unifeed.ingestion.reddit_adapter.httpx.post", side_effect=httpx.ConnectError("fail")):
            result = _adapter().fetch(SourceConfig("reddit"))

        assert result == []

    def test_one_failing_subreddit_keeps_the_others(self):
        def side_effect(url, **kwargs):
            if "/r/broken/" in url:
                raise httpx.ConnectError("fail")
            return _mock_get({"python": _make_response([_make_post("p1")])})(url, **kwargs)

        with patch("unifeed.ingestion.reddit_adapter.httpx.post", return_value=_token_response()), \
                patch("unifeed.ingestion.reddit_adapter.httpx.get", side_effect=side_effect):
            result = _adapter(subreddits=["broken", "python"]).fetch(SourceConfig("reddit"))

        assert [i.id for i in result] == ["reddit:p1"]

    def test_single_subreddit_string_option(self):
        responses = {"rust": _make_response([_make_post("r1", subreddit="rust")])}

        with patch("unifeed.ingestion.reddit_adapter.httpx.post", return_value=_token_response()), \
                patch("unifeed.ingestion.reddit_adapter.httpx.get", side_effect=_mock_get(responses)) as get:
            result = _adapter().fetch(SourceConfig("reddit", options={"subreddits": "rust"}))

        assert [i.id for i in result] == ["reddit:r1"]
        assert get.call_count == 1
        assert "/r/rust/" in get.call_args.args[0]
