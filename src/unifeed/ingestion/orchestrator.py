"""Concurrent fan-out/fan-in over all enabled source adapters."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field

from unifeed.ingestion.health import SourceHealth
from unifeed.ingestion.registry import AdapterRegistry
from unifeed.models import Item, SourceConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


@dataclass
class FetchReport:
    """Outcome of one fan-out: collected items plus what went wrong."""

    items: list[Item] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)
    unknown_sources: list[str] = field(default_factory=list)


def fetch_report(
    registry: AdapterRegistry,
    configs: list[SourceConfig],
    max_workers: int = DEFAULT_MAX_WORKERS,
    health: SourceHealth | None = None,
) -> FetchReport:
    """Fetch every enabled source concurrently and wait for all of them.

    A source with no registered adapter contributes nothing. An adapter that
    raises contributes nothing; its failure is logged and recorded in
    ``health`` but never propagated, and never cancels the other fetches.
    """
    report = FetchReport()
    jobs: list[tuple[SourceConfig, Future]] = []

    enabled = [config for config in configs if config.enabled]
    if not enabled:
        return report

    with ThreadPoolExecutor(
        max_workers=max(1, min(max_workers, len(enabled))),
        thread_name_prefix="fetch",
    ) as executor:
        for config in enabled:
            adapter = registry.resolve(config.source)
            if adapter is None:
                logger.warning("No adapter registered for source '%s', skipping", config.source)
                report.unknown_sources.append(config.source)
                continue
            jobs.append((config, executor.submit(adapter.fetch, config)))

        wait([future for _, future in jobs])

    # Results are collected in config order, independent of completion order.
    for config, future in jobs:
        try:
            items = future.result()
        except Exception as exc:
            logger.exception("Adapter '%s' fetch failed", config.source)
            report.failures[config.source] = f"{type(exc).__name__}: {exc}"
            report.counts[config.source] = 0
            if health is not None:
                consecutive = health.record_failure(config.source, str(exc))
                if consecutive > 1:
                    logger.warning(
                        "Source '%s' has failed %d consecutive time(s)",
                        config.source, consecutive,
                    )
            continue

        items = list(items or [])
        report.items.extend(items)
        report.counts[config.source] = report.counts.get(config.source, 0) + len(items)
        if health is not None:
            health.record_success(config.source)

    logger.info(
        "Fetched %d item(s) from %d source(s) (%d failed, %d unknown)",
        len(report.items), len(jobs), len(report.failures), len(report.unknown_sources),
    )
    return report


def fetch_all(
    registry: AdapterRegistry,
    configs: list[SourceConfig],
    max_workers: int = DEFAULT_MAX_WORKERS,
    health: SourceHealth | None = None,
) -> list[Item]:
    """Fetch all enabled sources and flatten the successful results."""
    return fetch_report(registry, configs, max_workers=max_workers, health=health).items
