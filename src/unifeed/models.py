"""Canonical item and source configuration types shared by every component."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

KNOWN_SOURCES = frozenset({
    "hackernews", "reddit", "twitter", "youtube", "arxiv", "github",
})

ID_SEPARATOR = ":"


def make_item_id(source: str, native_id: str | int) -> str:
    """Build a globally unique item identifier namespaced by source."""
    return f"{source}{ID_SEPARATOR}{native_id}"


def split_item_id(item_id: str) -> tuple[str, str]:
    """Split a namespaced identifier into (source, native_id).

    Raises ValueError if the identifier carries no source prefix.
    """
    source, sep, native_id = item_id.partition(ID_SEPARATOR)
    if not sep or not source or not native_id:
        raise ValueError(f"Item id '{item_id}' is not of the form '<source>:<native-id>'")
    return source, native_id


# ---------------------------------------------------------------------------
# Embed descriptors — one variant per embed kind
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class RedditEmbed:
    post_id: str
    subreddit: str
    kind: str = field(default="reddit", init=False)


@dataclass(frozen=True)
class TweetEmbed:
    tweet_id: str
    kind: str = field(default="twitter", init=False)


@dataclass(frozen=True)
class HackerNewsEmbed:
    story_id: str
    kind: str = field(default="hackernews", init=False)


@dataclass(frozen=True)
class YouTubeEmbed:
    video_id: str
    embed_url: str | None = None
    kind: str = field(default="youtube", init=False)


Embed = Union[RedditEmbed, TweetEmbed, HackerNewsEmbed, YouTubeEmbed]


def embed_to_dict(embed: Embed | None) -> dict | None:
    """Serialize an embed descriptor as a tagged dict (``type`` + fields)."""
    if embed is None:
        return None
    data = {"type": embed.kind}
    for name, value in vars(embed).items():
        if name != "kind" and value is not None:
            data[name] = value
    return data


# ---------------------------------------------------------------------------
# Items and configuration
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Item:
    """Canonical post produced by a source adapter. Never mutated."""

    id: str
    source: str
    title: str
    author: str
    timestamp: int  # milliseconds since epoch
    url: str | None = None
    content: str | None = None
    score: int | None = None
    comment_count: int | None = None
    comments_url: str | None = None
    thumbnail: str | None = None
    embed: Embed | None = None

    def __post_init__(self) -> None:
        if self.timestamp < 0:
            raise ValueError(f"Item {self.id} has a negative timestamp")

    @property
    def native_id(self) -> str:
        """The source-native part of the identifier."""
        try:
            return split_item_id(self.id)[1]
        except ValueError:
            return self.id

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "source": self.source,
            "title": self.title,
            "url": self.url,
            "content": self.content,
            "author": self.author,
            "timestamp": self.timestamp,
            "score": self.score,
            "comment_count": self.comment_count,
            "comments_url": self.comments_url,
            "thumbnail": self.thumbnail,
            "embed": embed_to_dict(self.embed),
        }


@dataclass(frozen=True)
class SourceConfig:
    """Per-source request configuration. ``options`` is read only by the adapter."""

    source: str
    enabled: bool = True
    options: dict = field(default_factory=dict)

    def list_option(self, key: str, default=()) -> list[str]:
        """Read a list option. A bare string is split on commas, like the env lists."""
        value = self.options.get(key)
        if not value:
            value = default
        if isinstance(value, str):
            value = value.split(",")
        return [str(part).strip() for part in value if str(part).strip()]
