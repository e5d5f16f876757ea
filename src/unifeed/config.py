"""Configuration loading and validation."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from unifeed.models import SourceConfig


@dataclass(frozen=True)
class Config:
    """Application configuration. All values sourced from environment variables."""

    # Required
    database_path: str

    # Optional — Fetching
    sources_config_path: str = "./config/sources.json"
    fetch_max_workers: int = 8
    http_timeout_seconds: float = 30.0

    # Optional — Hacker News
    hn_max_stories: int = 50

    # Optional — Reddit
    reddit_client_id: str | None = None
    reddit_client_secret: str | None = None
    reddit_username: str | None = None
    reddit_password: str | None = None
    reddit_subreddits: tuple[str, ...] = ()
    reddit_limit: int = 25

    # Optional — Twitter
    twitter_bearer_token: str | None = None
    twitter_list_ids: tuple[str, ...] = ()
    twitter_page_size: int = 25

    # Optional — Seen ledger
    seen_capacity: int = 1000
    seen_trim_to: int = 500
    watermark_sources: frozenset[str] = field(default_factory=frozenset)

    # Optional — Application
    log_level: str = "INFO"
    log_format: str = "json"
    app_env: str = "production"
    web_host: str = "0.0.0.0"
    web_port: int = 8080


_REQUIRED_VARS = [
    "DATABASE_PATH",
]


def _split_list(value: str | None) -> tuple[str, ...]:
    """Parse a comma-separated env value into a tuple of non-empty, stripped parts."""
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def load_config(env_path: str | Path | None = None) -> Config:
    """Load configuration from environment variables.

    Loads a .env file if present (for local development), then validates
    that all required variables are set. Raises ValueError listing any
    missing variables, or if the seen-ledger truncation size is not below
    its capacity.
    """
    load_dotenv(dotenv_path=env_path)

    missing = [var for var in _REQUIRED_VARS if not os.environ.get(var)]
    if missing:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    seen_capacity = int(os.environ.get("SEEN_CAPACITY", "1000"))
    seen_trim_to = int(os.environ.get("SEEN_TRIM_TO", "500"))
    if not 0 < seen_trim_to < seen_capacity:
        raise ValueError(
            f"SEEN_TRIM_TO ({seen_trim_to}) must be positive and below "
            f"SEEN_CAPACITY ({seen_capacity})"
        )

    return Config(
        # Required
        database_path=os.environ["DATABASE_PATH"],
        # Optional — Fetching
        sources_config_path=os.environ.get("SOURCES_CONFIG_PATH", "./config/sources.json"),
        fetch_max_workers=int(os.environ.get("FETCH_MAX_WORKERS", "8")),
        http_timeout_seconds=float(os.environ.get("HTTP_TIMEOUT_SECONDS", "30")),
        # Optional — Hacker News
        hn_max_stories=int(os.environ.get("HN_MAX_STORIES", "50")),
        # Optional — Reddit
        reddit_client_id=os.environ.get("REDDIT_CLIENT_ID") or None,
        reddit_client_secret=os.environ.get("REDDIT_CLIENT_SECRET") or None,
        reddit_username=os.environ.get("REDDIT_USERNAME") or None,
        reddit_password=os.environ.get("REDDIT_PASSWORD") or None,
        reddit_subreddits=_split_list(os.environ.get("REDDIT_SUBREDDITS")),
        reddit_limit=int(os.environ.get("REDDIT_LIMIT", "25")),
        # Optional — Twitter
        twitter_bearer_token=os.environ.get("TWITTER_BEARER_TOKEN") or None,
        twitter_list_ids=_split_list(os.environ.get("TWITTER_LIST_IDS")),
        twitter_page_size=int(os.environ.get("TWITTER_PAGE_SIZE", "25")),
        # Optional — Seen ledger
        seen_capacity=seen_capacity,
        seen_trim_to=seen_trim_to,
        watermark_sources=frozenset(_split_list(os.environ.get("WATERMARK_SOURCES"))),
        # Optional — Application
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        log_format=os.environ.get("LOG_FORMAT", "json"),
        app_env=os.environ.get("APP_ENV", "production"),
        web_host=os.environ.get("WEB_HOST", "0.0.0.0"),
        web_port=int(os.environ.get("WEB_PORT", "8080")),
    )


def load_source_configs(path: str | Path, default_sources: list[str]) -> list[SourceConfig]:
    """Load per-source configuration from a JSON file.

    The file holds ``{"sources": [{"source": ..., "enabled": ..., "options": {...}}]}``.
    A missing file yields an enabled, option-less config for every name in
    ``default_sources``. Raises ValueError on malformed content.
    """
    path = Path(path)
    if not path.exists():
        return [SourceConfig(source=name) for name in default_sources]

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Sources config {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Sources config {path} must be a JSON object")

    configs: list[SourceConfig] = []
    for i, entry in enumerate(data.get("sources", [])):
        source = entry.get("source")
        if not source or not isinstance(source, str):
            raise ValueError(f"Sources config entry {i} is missing a 'source' name")
        options = entry.get("options", {})
        if not isinstance(options, dict):
            raise ValueError(f"Sources config entry {i} has non-object 'options'")
        configs.append(
            SourceConfig(
                source=source,
                enabled=bool(entry.get("enabled", True)),
                options=options,
            )
        )
    return configs
