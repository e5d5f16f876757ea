"""Tests for unifeed.models — item identifiers and embed descriptors."""

from __future__ import annotations

import pytest

from unifeed.models import (
    HackerNewsEmbed,
    Item,
    RedditEmbed,
    SourceConfig,
    TweetEmbed,
    embed_to_dict,
    make_item_id,
    split_item_id,
)


def test_make_and_split_item_id():
    item_id = make_item_id("reddit", "abc123")
    assert item_id == "reddit:abc123"
    assert split_item_id(item_id) == ("reddit", "abc123")


def test_split_keeps_colons_in_native_id():
    assert split_item_id("youtube:a:b") == ("youtube", "a:b")


@pytest.mark.parametrize("bad", ["noprefix", ":123", "reddit:"])
def test_split_rejects_malformed_ids(bad):
    with pytest.raises(ValueError):
        split_item_id(bad)


def test_native_id():
    item = Item(id="hackernews:42", source="hackernews", title="t", author="a", timestamp=1)
    assert item.native_id == "42"


def test_negative_timestamp_rejected():
    with pytest.raises(ValueError, match="negative timestamp"):
        Item(id="x:1", source="x", title="t", author="a", timestamp=-1)


def test_items_are_immutable():
    item = Item(id="x:1", source="x", title="t", author="a", timestamp=1)
    with pytest.raises(AttributeError):
        item.title = "changed"


def test_embed_to_dict_carries_only_kind_fields():
    assert embed_to_dict(RedditEmbed(post_id="p1", subreddit="python")) == {
        "type": "reddit", "post_id": "p1", "subreddit": "python",
    }
    assert embed_to_dict(TweetEmbed(tweet_id="9")) == {"type": "twitter", "tweet_id": "9"}
    assert embed_to_dict(None) is None


def test_item_to_dict():
    item = Item(
        id="hackernews:1", source="hackernews", title="Show HN", author="pg",
        timestamp=1000, score=10, embed=HackerNewsEmbed(story_id="1"),
    )
    data = item.to_dict()
    assert data["id"] == "hackernews:1"
    assert data["score"] == 10
    assert data["url"] is None
    assert data["embed"] == {"type": "hackernews", "story_id": "1"}


@pytest.mark.parametrize(
    ("options", "expected"),
    [
        ({"subs": ["python", " rust "]}, ["python", "rust"]),
        ({"subs": "python"}, ["python"]),
        ({"subs": "python, rust,"}, ["python", "rust"]),
        ({"subs": [123]}, ["123"]),
        ({}, ["fallback"]),
        ({"subs": ""}, ["fallback"]),
    ],
)
def test_list_option(options, expected):
    assert SourceConfig("x", options=options).list_option("subs", ("fallback",)) == expected
