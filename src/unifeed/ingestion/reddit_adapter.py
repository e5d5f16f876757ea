"""Reddit source adapter — fetches newest posts from configured subreddits."""

from __future__ import annotations

import logging

import httpx

from unifeed.ingestion.adapter import SourceAdapter
from unifeed.models import Item, RedditEmbed, SourceConfig, make_item_id

logger = logging.getLogger(__name__)

_TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
_SUBREDDIT_NEW_URL = "https://oauth.reddit.com/r/{}/new"
_PERMALINK_BASE = "https://www.reddit.com"
_USER_AGENT = "Unifeed/0.1 (feed-aggregator)"
_PLACEHOLDER_THUMBNAILS = frozenset({"", "self", "default", "nsfw", "spoiler", "image"})


class RedditAdapter(SourceAdapter):
    """Adapter for Reddit, authenticated with a script-app password grant."""

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        username: str | None,
        password: str | None,
        subreddits: tuple[str, ...] | list[str] = (),
        limit: int = 25,
        timeout: float = 30.0,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._username = username
        self._password = password
        self._subreddits = list(subreddits)
        self._limit = limit
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "reddit"

    def fetch(self, config: SourceConfig) -> list[Item]:
        subreddits = config.list_option("subreddits", self._subreddits)
        limit = int(config.options.get("limit", self._limit))
        if not subreddits:
            logger.warning("No Reddit subreddits configured")
            return []

        token = self._get_access_token()
        if token is None:
            return []

        all_items: list[Item] = []
        for subreddit in subreddits:
            all_items.extend(self._fetch_subreddit(subreddit, token, limit))
        logger.info("Fetched %d items from Reddit", len(all_items))
        return all_items

    def _get_access_token(self) -> str | None:
        if not all((self._client_id, self._client_secret, self._username, self._password)):
            logger.error("Missing Reddit API credentials")
            return None
        try:
            resp = httpx.post(
                _TOKEN_URL,
                auth=(self._client_id, self._client_secret),
                data={
                    "grant_type": "password",
                    "username": self._username,
                    "password": self._password,
                },
                headers={"User-Agent": _USER_AGENT},
                timeout=self._timeout,
            )
            resp.raise_for_status()
            token = resp.json().get("access_token")
        except (httpx.HTTPError, ValueError):
            logger.exception("Failed to obtain Reddit access token")
            return None
        if not token:
            logger.error("Reddit token response carried no access_token")
            return None
        return token

    def _fetch_subreddit(self, subreddit: str, token: str, limit: int) -> list[Item]:
        try:
            resp = httpx.get(
                _SUBREDDIT_NEW_URL.format(subreddit),
                params={"limit": limit},
                headers={
                    "Authorization": f"Bearer {token}",
                    "User-Agent": _USER_AGENT,
                },
                timeout=self._timeout,
                follow_redirects=True,
            )
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError):
            logger.exception("Failed to fetch Reddit r/%s", subreddit)
            return []

        posts = (data.get("data") or {}).get("children") or []
        items: list[Item] = []
        for wrapper in posts:
            post = wrapper.get("data") or {}
            if not post.get("id") or not post.get("title"):
                continue
            items.append(self._to_item(post))
        logger.debug("Fetched %d posts from r/%s", len(items), subreddit)
        return items

    @staticmethod
    def _to_item(post: dict) -> Item:
        is_self = bool(post.get("is_self"))
        thumbnail = post.get("thumbnail") or ""
        return Item(
            id=make_item_id("reddit", post["id"]),
            source="reddit",
            title=post["title"],
            url=None if is_self else post.get("url"),
            content=post.get("selftext") if is_self else None,
            author=post.get("author", ""),
            timestamp=int(float(post.get("created_utc", 0)) * 1000),
            score=post.get("score"),
            comment_count=post.get("num_comments"),
            comments_url=f"{_PERMALINK_BASE}{post.get('permalink', '')}",
            thumbnail=None if thumbnail in _PLACEHOLDER_THUMBNAILS else thumbnail,
            embed=RedditEmbed(post_id=post["id"], subreddit=post.get("subreddit", "")),
        )
