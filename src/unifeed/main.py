"""Application entry point — builds the feed service and serves the web API."""

from __future__ import annotations

import json
import logging
import sys

import uvicorn

from unifeed.config import Config, load_config, load_source_configs
from unifeed.feed.ledger import SeenLedger
from unifeed.ingestion import build_registry
from unifeed.ingestion.health import SourceHealth
from unifeed.service import FeedService
from unifeed.storage import init_db
from unifeed.web.app import create_app

logger = logging.getLogger("unifeed")


def _setup_logging(log_level: str, log_format: str) -> None:
    """Configure root logger based on config."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps(
                {
                    "time": "%(asctime)s",
                    "level": "%(levelname)s",
                    "logger": "%(name)s",
                    "thread": "%(threadName)s",
                    "message": "%(message)s",
                }
            )
        )
    else:
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def build_service(config: Config) -> FeedService:
    """Wire the ledger, registry, and source configs into a FeedService."""
    ledger = SeenLedger(
        config.database_path,
        capacity=config.seen_capacity,
        trim_to=config.seen_trim_to,
        watermark_sources=config.watermark_sources,
    )
    registry = build_registry(config, ledger)
    source_configs = load_source_configs(
        config.sources_config_path, sorted(registry.registered())
    )
    return FeedService(
        registry,
        ledger,
        source_configs,
        max_workers=config.fetch_max_workers,
        health=SourceHealth(config.database_path),
    )


def main() -> None:
    """Load config, set up logging, and start the web server."""
    config = load_config()

    _setup_logging(config.log_level, config.log_format)

    logger.info(
        "Unifeed starting (env=%s, db=%s)",
        config.app_env,
        config.database_path,
    )

    init_db(config.database_path)
    service = build_service(config)
    logger.info(
        "Registered sources: %s", ", ".join(sorted(service.registry.registered()))
    )

    app = create_app(service, config.database_path)

    uvicorn.run(app, host=config.web_host, port=config.web_port)


if __name__ == "__main__":
    main()
