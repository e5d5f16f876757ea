"""Ingestion — source adapters, the adapter registry, and concurrent fetching."""

from __future__ import annotations

from typing import TYPE_CHECKING

from unifeed.ingestion.hn_adapter import HNAdapter
from unifeed.ingestion.probe import ProbeStrategy
from unifeed.ingestion.reddit_adapter import RedditAdapter
from unifeed.ingestion.registry import AdapterRegistry
from unifeed.ingestion.twitter_adapter import TwitterAdapter

if TYPE_CHECKING:
    from unifeed.config import Config
    from unifeed.feed.ledger import SeenLedger


def build_registry(config: Config, ledger: SeenLedger) -> AdapterRegistry:
    """Construct the registry with every built-in adapter."""
    registry = AdapterRegistry()
    registry.register(
        HNAdapter(max_stories=config.hn_max_stories, timeout=config.http_timeout_seconds)
    )
    registry.register(
        RedditAdapter(
            client_id=config.reddit_client_id,
            client_secret=config.reddit_client_secret,
            username=config.reddit_username,
            password=config.reddit_password,
            subreddits=config.reddit_subreddits,
            limit=config.reddit_limit,
            timeout=config.http_timeout_seconds,
        )
    )
    registry.register(
        TwitterAdapter(
            bearer_token=config.twitter_bearer_token,
            list_ids=config.twitter_list_ids,
            page_size=config.twitter_page_size,
            probe=ProbeStrategy(ledger),
            timeout=config.http_timeout_seconds,
        )
    )
    return registry
