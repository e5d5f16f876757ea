"""Hacker News source adapter — fetches current top stories."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

import httpx

from unifeed.ingestion.adapter import SourceAdapter
from unifeed.models import HackerNewsEmbed, Item, SourceConfig, make_item_id

logger = logging.getLogger(__name__)

_HN_TOP_URL = "https://hacker-news.firebaseio.com/v0/topstories.json"
_HN_ITEM_URL = "https://hacker-news.firebaseio.com/v0/item/{}.json"
_HN_DISCUSSION_URL = "https://news.ycombinator.com/item?id={}"
_ITEM_WORKERS = 10


class HNAdapter(SourceAdapter):
    """Adapter for Hacker News top stories."""

    def __init__(self, max_stories: int = 50, timeout: float = 30.0) -> None:
        self._max_stories = max_stories
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "hackernews"

    def fetch(self, config: SourceConfig) -> list[Item]:
        max_stories = int(config.options.get("max_stories", self._max_stories))

        try:
            resp = httpx.get(_HN_TOP_URL, timeout=self._timeout)
            resp.raise_for_status()
            story_ids = resp.json()
        except (httpx.HTTPError, ValueError):
            logger.exception("Failed to fetch HN top stories")
            return []

        story_ids = list(story_ids or [])[:max_stories]
        with ThreadPoolExecutor(max_workers=_ITEM_WORKERS, thread_name_prefix="hn") as executor:
            stories = list(executor.map(self._fetch_story, story_ids))

        items = [
            self._to_item(story)
            for story in stories
            if story and story.get("type") == "story" and story.get("title")
        ]
        logger.info("Fetched %d items from Hacker News", len(items))
        return items

    def _fetch_story(self, story_id: int) -> dict | None:
        try:
            resp = httpx.get(_HN_ITEM_URL.format(story_id), timeout=self._timeout)
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError):
            logger.warning("Failed to fetch HN item %s", story_id)
            return None

    @staticmethod
    def _to_item(story: dict) -> Item:
        story_id = story["id"]
        return Item(
            id=make_item_id("hackernews", story_id),
            source="hackernews",
            title=story["title"].strip(),
            url=story.get("url"),
            author=story.get("by", ""),
            timestamp=int(story.get("time", 0)) * 1000,
            score=story.get("score"),
            comment_count=story.get("descendants"),
            comments_url=_HN_DISCUSSION_URL.format(story_id),
            embed=HackerNewsEmbed(story_id=str(story_id)),
        )
