"""Aggregate feed surface — refresh across sources, then acknowledge what was shown."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from unifeed.feed.ledger import SeenLedger
from unifeed.feed.merge import merge_items, source_stats
from unifeed.ingestion.health import SourceHealth
from unifeed.ingestion.orchestrator import DEFAULT_MAX_WORKERS, fetch_report
from unifeed.ingestion.registry import AdapterRegistry
from unifeed.models import Item, SourceConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceSummary:
    new: int
    total: int
    latest: int | None = None


@dataclass(frozen=True)
class FeedSnapshot:
    """Result of one refresh: the new items plus per-source counts."""

    items: list[Item]
    total_fetched: int
    sources: dict[str, SourceSummary]
    has_new_content: bool
    sources_with_new: list[str]
    failed_sources: list[str] = field(default_factory=list)
    unknown_sources: list[str] = field(default_factory=list)


class FeedService:
    """Runs fetch → merge → partition, and forwards acknowledgements to the ledger."""

    def __init__(
        self,
        registry: AdapterRegistry,
        ledger: SeenLedger,
        source_configs: list[SourceConfig],
        max_workers: int = DEFAULT_MAX_WORKERS,
        health: SourceHealth | None = None,
    ) -> None:
        self.registry = registry
        self.ledger = ledger
        self.health = health
        self._source_configs = list(source_configs)
        self._max_workers = max_workers
        self._last_batch: dict[str, Item] = {}
        self._batch_lock = threading.Lock()

    def _select_configs(self, sources: list[str] | None) -> list[SourceConfig]:
        if sources is None:
            return list(self._source_configs)
        configured = {config.source: config for config in self._source_configs}
        # An explicitly requested source is enabled for this request.
        return [
            SourceConfig(
                source=name,
                enabled=True,
                options=configured[name].options if name in configured else {},
            )
            for name in dict.fromkeys(sources)
        ]

    def refresh(self, sources: list[str] | None = None) -> FeedSnapshot:
        """Fetch the requested (or all configured) sources and report what is new."""
        report = fetch_report(
            self.registry,
            self._select_configs(sources),
            max_workers=self._max_workers,
            health=self.health,
        )
        merged = merge_items(report.items)
        partition = self.ledger.partition(merged)
        stats = source_stats(merged)

        with self._batch_lock:
            self._last_batch = {item.id: item for item in merged}

        summaries = {
            source: SourceSummary(
                new=partition.new_counts.get(source, 0),
                total=partition.total_counts.get(source, 0),
                latest=stats[source].latest if source in stats else None,
            )
            for source in report.counts
        }
        for source in partition.total_counts:
            summaries.setdefault(
                source,
                SourceSummary(
                    new=partition.new_counts.get(source, 0),
                    total=partition.total_counts[source],
                    latest=stats[source].latest,
                ),
            )

        return FeedSnapshot(
            items=partition.new_items,
            total_fetched=len(merged),
            sources=summaries,
            has_new_content=partition.has_new_content,
            sources_with_new=partition.sources_with_new,
            failed_sources=sorted(report.failures),
            unknown_sources=report.unknown_sources,
        )

    def acknowledge(self, item_ids: list[str]) -> int:
        """Mark the given item ids as seen. Returns the number recorded."""
        with self._batch_lock:
            known = [self._last_batch[i] for i in dict.fromkeys(item_ids) if i in self._last_batch]
        known_ids = {item.id for item in known}
        unknown = [i for i in dict.fromkeys(item_ids) if i not in known_ids]

        recorded = self.ledger.acknowledge(known) if known else 0
        if unknown:
            recorded += self.ledger.acknowledge_ids(unknown)
        return recorded

    def acknowledge_items(self, items: list[Item]) -> int:
        return self.ledger.acknowledge(items)
