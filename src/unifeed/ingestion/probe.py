"""Probe-before-fetch for sources with a scarce request budget.

A probe asks the upstream for its single most recent item. If the ledger
already holds that item, nothing newer can exist and the full page fetch
is skipped for this cycle.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable

from unifeed.feed.ledger import SeenLedger
from unifeed.models import Item

logger = logging.getLogger(__name__)


@dataclass
class ProbeStats:
    probes: int = 0
    skipped: int = 0
    full_fetches: int = 0


class ProbeStrategy:
    """Wraps an expensive fetch with a cheap single-item probe."""

    def __init__(self, ledger: SeenLedger) -> None:
        self._ledger = ledger
        self.stats = ProbeStats()
        self._stats_lock = threading.Lock()

    def fetch(
        self,
        label: str,
        probe: Callable[[], list[Item]],
        full_fetch: Callable[[], list[Item]],
    ) -> list[Item]:
        """Run ``probe``; call ``full_fetch`` only if the newest item is unseen.

        A probe that raises or returns nothing counts as inconclusive and
        falls through to the full fetch.
        """
        self._count("probes")
        try:
            probe_items = probe()
        except Exception:
            logger.warning("Probe for %s failed; falling back to full fetch", label, exc_info=True)
            probe_items = []

        if probe_items:
            newest = probe_items[0]
            if self._ledger.is_seen(newest.source, newest.native_id):
                self._count("skipped")
                logger.info("Probe for %s: newest item %s already seen, skipping fetch", label, newest.id)
                return []

        self._count("full_fetches")
        return full_fetch()

    def _count(self, counter: str) -> None:
        # Overlapping refreshes call fetch from several pool threads.
        with self._stats_lock:
            setattr(self.stats, counter, getattr(self.stats, counter) + 1)
