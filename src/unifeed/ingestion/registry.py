"""Adapter registry — maps source identifiers to adapter instances."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from unifeed.ingestion.adapter import SourceAdapter

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Source identifier → adapter mapping.

    Built once at startup and passed explicitly to whatever needs it.
    """

    def __init__(self) -> None:
        self._adapters: dict[str, SourceAdapter] = {}

    def register(self, adapter: SourceAdapter) -> None:
        """Register an adapter under the source name it reports. Replaces any previous one."""
        if adapter.name in self._adapters:
            logger.info("Replacing adapter registered for '%s'", adapter.name)
        self._adapters[adapter.name] = adapter

    def resolve(self, source: str) -> SourceAdapter | None:
        """Look up the adapter for a source. Returns None if not found."""
        return self._adapters.get(source)

    def registered(self) -> set[str]:
        """Return the set of all registered source identifiers."""
        return set(self._adapters)

    def __contains__(self, source: object) -> bool:
        return source in self._adapters

    def __len__(self) -> int:
        return len(self._adapters)
