"""Seen-state ledger — which items each source has already surfaced.

Two per-source strategies share one interface:

- ``SeenIdSet`` (default): a bounded, insertion-ordered set of native
  identifiers. An item is new iff its identifier is absent. On overflow
  the set is cut back to the most recent ``trim_to`` identifiers.
- ``Watermark`` (fallback for sources without stable identifiers): the
  newest acknowledged timestamp. An item is new iff it is strictly newer.
  Items that resurface with an older timestamp are never reported again,
  which is why it is opt-in only.

The ledger is read from SQLite once, mutated in memory and flushed on
every acknowledgement. Writers are serialized by a single lock.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Union

from unifeed.models import Item, split_item_id
from unifeed.storage.ledger_store import load_ledger_rows, save_ledger_rows

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 1000
DEFAULT_TRIM_TO = 500

STRATEGY_IDS = "ids"
STRATEGY_WATERMARK = "watermark"


class SeenIdSet:
    """Bounded, ordered set of native identifiers (oldest first)."""

    strategy = STRATEGY_IDS

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        trim_to: int = DEFAULT_TRIM_TO,
        ids: Iterable[str] = (),
    ) -> None:
        if not 0 < trim_to < capacity:
            raise ValueError(
                f"trim_to ({trim_to}) must be positive and below capacity ({capacity})"
            )
        self.capacity = capacity
        self.trim_to = trim_to
        self._ids: OrderedDict[str, None] = OrderedDict()
        for native_id in ids:
            self._add(str(native_id))
        self._evict()

    def __contains__(self, native_id: object) -> bool:
        return native_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def ids(self) -> list[str]:
        return list(self._ids)

    def is_new(self, item: Item) -> bool:
        return item.native_id not in self._ids

    def record(self, items: list[Item]) -> int:
        # Oldest first, so the newest item of the batch ends up most recent.
        for item in sorted(items, key=lambda i: i.timestamp):
            self._add(item.native_id)
        self._evict()
        return len(items)

    def record_ids(self, native_ids: list[str]) -> int:
        for native_id in native_ids:
            self._add(native_id)
        self._evict()
        return len(native_ids)

    def _add(self, native_id: str) -> None:
        if native_id in self._ids:
            self._ids.move_to_end(native_id)
        else:
            self._ids[native_id] = None

    def _evict(self) -> None:
        if len(self._ids) <= self.capacity:
            return
        dropped = len(self._ids) - self.trim_to
        while len(self._ids) > self.trim_to:
            self._ids.popitem(last=False)
        logger.debug("Seen set exceeded %d ids; dropped %d oldest", self.capacity, dropped)

    def absorb(self, other: SeenIdSet) -> None:
        """Append ``other``'s ids after this set's, keeping their order."""
        self.record_ids(other.ids())

    def to_state(self) -> dict:
        return {"strategy": self.strategy, "ids": list(self._ids)}

    @classmethod
    def from_state(cls, state: dict, capacity: int, trim_to: int) -> SeenIdSet:
        return cls(capacity, trim_to, ids=state.get("ids", []))


class Watermark:
    """Newest acknowledged (timestamp, id) for a source."""

    strategy = STRATEGY_WATERMARK

    def __init__(self, timestamp: int = 0, last_id: str | None = None) -> None:
        self.timestamp = timestamp
        self.last_id = last_id

    def __len__(self) -> int:
        return 0 if self.last_id is None else 1

    def is_new(self, item: Item) -> bool:
        return item.timestamp > self.timestamp

    def record(self, items: list[Item]) -> int:
        if not items:
            return 0
        latest = max(items, key=lambda i: i.timestamp)
        # Acknowledging an older batch never moves the watermark back.
        if latest.timestamp > self.timestamp or self.last_id is None:
            self.timestamp = max(self.timestamp, latest.timestamp)
            self.last_id = latest.id
        return len(items)

    def record_ids(self, native_ids: list[str]) -> int:
        return 0

    def absorb(self, other: Watermark) -> None:
        if other.last_id is not None and (other.timestamp > self.timestamp or self.last_id is None):
            self.timestamp = max(self.timestamp, other.timestamp)
            self.last_id = other.last_id

    def to_state(self) -> dict:
        return {"strategy": self.strategy, "timestamp": self.timestamp, "id": self.last_id}

    @classmethod
    def from_state(cls, state: dict) -> Watermark:
        return cls(int(state.get("timestamp", 0)), state.get("id"))


LedgerEntry = Union[SeenIdSet, Watermark]


@dataclass(frozen=True)
class Partition:
    """Result of splitting a batch into new and already-seen items."""

    new_items: list[Item] = field(default_factory=list)
    seen_items: list[Item] = field(default_factory=list)
    new_counts: dict[str, int] = field(default_factory=dict)
    total_counts: dict[str, int] = field(default_factory=dict)

    @property
    def sources_with_new(self) -> list[str]:
        return sorted(source for source, count in self.new_counts.items() if count > 0)

    @property
    def has_new_content(self) -> bool:
        return bool(self.new_items)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SeenLedger:
    """Per-source seen state, persisted to the ``seen_ledger`` table."""

    def __init__(
        self,
        database_path: str,
        capacity: int = DEFAULT_CAPACITY,
        trim_to: int = DEFAULT_TRIM_TO,
        watermark_sources: Iterable[str] = (),
    ) -> None:
        if not 0 < trim_to < capacity:
            raise ValueError(
                f"trim_to ({trim_to}) must be positive and below capacity ({capacity})"
            )
        self._database_path = database_path
        self._capacity = capacity
        self._trim_to = trim_to
        self._watermark_sources = frozenset(watermark_sources)
        self._entries: dict[str, LedgerEntry] = {}
        self._updated_at: dict[str, str] = {}
        self._dirty: set[str] = set()
        self._loaded = False
        self._lock = threading.Lock()

    # -- loading ----------------------------------------------------------

    def load(self) -> None:
        """Read the durable ledger into memory. Safe to call more than once."""
        with self._lock:
            self._load_locked()

    def _load_locked(self) -> bool:
        if self._loaded:
            return True
        try:
            rows = load_ledger_rows(self._database_path)
        except (sqlite3.Error, OSError):
            # Left unloaded so the next call reads again.
            logger.exception(
                "Failed to read seen ledger from %s; treating unrecorded items as new",
                self._database_path,
            )
            return False
        self._loaded = True

        for source, (state, updated_at) in rows.items():
            try:
                entry = self._entry_from_state(source, state)
            except (TypeError, ValueError):
                logger.warning("Discarding unreadable seen-ledger entry for '%s'", source)
                continue
            if entry is None:
                continue
            # Anything recorded while the store was unreadable is newer.
            pending = self._entries.get(source)
            if pending is not None:
                entry.absorb(pending)
            self._entries[source] = entry
            self._updated_at.setdefault(source, updated_at)
        logger.info("Loaded seen ledger with %d source(s)", len(self._entries))
        return True

    def _entry_from_state(self, source: str, state: dict) -> LedgerEntry | None:
        expected = self._strategy_for(source)
        stored = state.get("strategy", STRATEGY_IDS)
        if stored != expected:
            logger.warning(
                "Seen-ledger entry for '%s' uses strategy '%s' but '%s' is configured; resetting",
                source, stored, expected,
            )
            return None
        if expected == STRATEGY_WATERMARK:
            return Watermark.from_state(state)
        return SeenIdSet.from_state(state, self._capacity, self._trim_to)

    def _strategy_for(self, source: str) -> str:
        return STRATEGY_WATERMARK if source in self._watermark_sources else STRATEGY_IDS

    def _entry(self, source: str) -> LedgerEntry:
        entry = self._entries.get(source)
        if entry is None:
            if self._strategy_for(source) == STRATEGY_WATERMARK:
                entry = Watermark()
            else:
                entry = SeenIdSet(self._capacity, self._trim_to)
            self._entries[source] = entry
        return entry

    # -- reads ------------------------------------------------------------

    def partition(self, items: list[Item]) -> Partition:
        """Split ``items`` into new and seen, preserving input order."""
        new_items: list[Item] = []
        seen_items: list[Item] = []
        new_counts: dict[str, int] = {}
        total_counts: dict[str, int] = {}

        with self._lock:
            self._load_locked()
            for item in items:
                total_counts[item.source] = total_counts.get(item.source, 0) + 1
                new_counts.setdefault(item.source, 0)
                entry = self._entries.get(item.source)
                if entry is None or entry.is_new(item):
                    new_items.append(item)
                    new_counts[item.source] += 1
                else:
                    seen_items.append(item)

        partition = Partition(new_items, seen_items, new_counts, total_counts)
        logger.info(
            "Partitioned %d item(s): %d new, sources with new content: %s",
            len(items), len(new_items), ", ".join(partition.sources_with_new) or "none",
        )
        return partition

    def has_seen(self, item: Item) -> bool:
        with self._lock:
            self._load_locked()
            entry = self._entries.get(item.source)
            return entry is not None and not entry.is_new(item)

    def is_seen(self, source: str, native_id: str) -> bool:
        """Identifier lookup. Always False for watermark sources."""
        with self._lock:
            self._load_locked()
            entry = self._entries.get(source)
            return isinstance(entry, SeenIdSet) and native_id in entry

    def stats(self) -> dict[str, dict]:
        with self._lock:
            self._load_locked()
            return {
                source: {
                    "strategy": entry.strategy,
                    "size": len(entry),
                    "updated_at": self._updated_at.get(source),
                }
                for source, entry in self._entries.items()
            }

    # -- writes -----------------------------------------------------------

    def acknowledge(self, items: list[Item]) -> int:
        """Record ``items`` as seen and flush. Returns the number recorded."""
        by_source: dict[str, list[Item]] = {}
        for item in items:
            by_source.setdefault(item.source, []).append(item)

        recorded = 0
        with self._lock:
            self._load_locked()
            now = _now()
            for source, source_items in by_source.items():
                recorded += self._entry(source).record(source_items)
                self._updated_at[source] = now
                self._dirty.add(source)
            self._flush_locked()
        logger.info("Marked %d item(s) as seen", recorded)
        return recorded

    def acknowledge_ids(self, item_ids: list[str]) -> int:
        """Record namespaced identifiers (``"<source>:<native>"``) as seen.

        Watermark sources need timestamps and are skipped; malformed ids
        are skipped. Returns the number recorded.
        """
        by_source: dict[str, list[str]] = {}
        for item_id in item_ids:
            try:
                source, native_id = split_item_id(item_id)
            except ValueError:
                logger.warning("Ignoring malformed item id '%s'", item_id)
                continue
            by_source.setdefault(source, []).append(native_id)

        recorded = 0
        with self._lock:
            self._load_locked()
            now = _now()
            for source, native_ids in by_source.items():
                if self._strategy_for(source) == STRATEGY_WATERMARK:
                    logger.warning(
                        "Cannot acknowledge %d id(s) for watermark source '%s' without timestamps",
                        len(native_ids), source,
                    )
                    continue
                recorded += self._entry(source).record_ids(native_ids)
                self._updated_at[source] = now
                self._dirty.add(source)
            self._flush_locked()
        logger.info("Marked %d item id(s) as seen", recorded)
        return recorded

    def flush(self) -> bool:
        """Write any entries not yet persisted. Returns True when nothing is pending."""
        with self._lock:
            return self._flush_locked()

    def _flush_locked(self) -> bool:
        if not self._dirty:
            return True
        # Writing before the stored rows were read would replace them.
        if not self._load_locked():
            logger.warning(
                "Seen ledger not yet read; holding %d source(s) in memory",
                len(self._dirty),
            )
            return False
        pending = {
            source: (self._entries[source].to_state(), self._updated_at[source])
            for source in self._dirty
        }
        try:
            save_ledger_rows(self._database_path, pending)
        except (sqlite3.Error, OSError):
            logger.exception(
                "Failed to persist seen ledger for %s; will retry on next write",
                ", ".join(sorted(pending)),
            )
            return False
        self._dirty.clear()
        return True
