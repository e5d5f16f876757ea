"""Twitter (X) source adapter — fetches tweets from configured lists.

The list-tweets endpoint has a tight monthly request budget, so every
list is probed for its newest tweet before a full page is requested.
"""

from __future__ import annotations

import logging
from datetime import datetime

import httpx

from unifeed.ingestion.adapter import SourceAdapter
from unifeed.ingestion.probe import ProbeStrategy
from unifeed.models import Item, SourceConfig, TweetEmbed, make_item_id

logger = logging.getLogger(__name__)

_LIST_TWEETS_URL = "https://api.twitter.com/2/lists/{}/tweets"
_STATUS_URL = "https://twitter.com/i/status/{}"
_USER_AGENT = "Unifeed/0.1 (feed-aggregator)"
_TITLE_MAX = 100


class TwitterAdapter(SourceAdapter):
    """Adapter for Twitter list timelines (API v2, app bearer token)."""

    def __init__(
        self,
        bearer_token: str | None,
        list_ids: tuple[str, ...] | list[str] = (),
        page_size: int = 25,
        probe: ProbeStrategy | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._bearer_token = bearer_token
        self._list_ids = list(list_ids)
        self._page_size = page_size
        self._probe = probe
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "twitter"

    def fetch(self, config: SourceConfig) -> list[Item]:
        if not self._bearer_token:
            logger.error("Missing Twitter bearer token")
            return []
        list_ids = config.list_option("list_ids", self._list_ids)
        page_size = int(config.options.get("page_size", self._page_size))
        if not list_ids:
            logger.warning("No Twitter lists configured")
            return []

        all_items: list[Item] = []
        for list_id in list_ids:
            if self._probe is None:
                all_items.extend(self._fetch_list(list_id, page_size))
                continue
            all_items.extend(
                self._probe.fetch(
                    f"twitter list {list_id}",
                    probe=lambda lid=list_id: self._fetch_list(lid, 1),
                    full_fetch=lambda lid=list_id: self._fetch_list(lid, page_size),
                )
            )
        logger.info("Fetched %d items from Twitter", len(all_items))
        return all_items

    def _fetch_list(self, list_id: str, max_results: int) -> list[Item]:
        try:
            resp = httpx.get(
                _LIST_TWEETS_URL.format(list_id),
                params={
                    "tweet.fields": "created_at,author_id,public_metrics,attachments",
                    "expansions": "author_id",
                    "user.fields": "username,name",
                    "max_results": max_results,
                },
                headers={
                    "Authorization": f"Bearer {self._bearer_token}",
                    "User-Agent": _USER_AGENT,
                },
                timeout=self._timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError):
            logger.exception("Failed to fetch tweets from list %s", list_id)
            return []

        users = {
            user["id"]: user
            for user in (data.get("includes") or {}).get("users") or []
            if "id" in user
        }
        items: list[Item] = []
        for tweet in data.get("data") or []:
            try:
                items.append(self._to_item(tweet, users))
            except (KeyError, ValueError):
                logger.warning("Skipping malformed tweet in list %s", list_id)
        return items

    @staticmethod
    def _to_item(tweet: dict, users: dict[str, dict]) -> Item:
        text = tweet["text"]
        author = users.get(tweet.get("author_id"))
        metrics = tweet.get("public_metrics") or {}
        created = datetime.fromisoformat(tweet["created_at"].replace("Z", "+00:00"))
        return Item(
            id=make_item_id("twitter", tweet["id"]),
            source="twitter",
            title=text if len(text) <= _TITLE_MAX else f"{text[:_TITLE_MAX - 3]}...",
            content=text,
            author=f"@{author['username']}" if author else tweet.get("author_id", ""),
            timestamp=int(created.timestamp() * 1000),
            score=metrics.get("like_count"),
            comment_count=metrics.get("reply_count"),
            comments_url=_STATUS_URL.format(tweet["id"]),
            embed=TweetEmbed(tweet_id=tweet["id"]),
        )
