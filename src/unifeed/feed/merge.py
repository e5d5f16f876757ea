"""Merging fetched items into a single deduplicated, newest-first feed."""

from __future__ import annotations

from dataclasses import dataclass

from unifeed.models import Item


@dataclass(frozen=True)
class SourceStats:
    count: int
    latest: int  # newest timestamp (ms) seen for the source


def dedupe_items(items: list[Item]) -> list[Item]:
    """Drop repeated identifiers, keeping the first occurrence in input order."""
    seen: set[str] = set()
    unique: list[Item] = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


def sort_newest_first(items: list[Item]) -> list[Item]:
    """Sort by timestamp descending. Equal timestamps keep their input order."""
    return sorted(items, key=lambda item: item.timestamp, reverse=True)


def merge_items(items: list[Item]) -> list[Item]:
    """Deduplicate then order newest first. The input list is not modified."""
    return sort_newest_first(dedupe_items(items))


def source_stats(items: list[Item]) -> dict[str, SourceStats]:
    """Per-source item count and newest timestamp, for summaries."""
    counts: dict[str, int] = {}
    latest: dict[str, int] = {}
    for item in items:
        counts[item.source] = counts.get(item.source, 0) + 1
        latest[item.source] = max(latest.get(item.source, 0), item.timestamp)
    return {source: SourceStats(counts[source], latest[source]) for source in counts}
