"""Source adapter interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from unifeed.models import Item, SourceConfig


class SourceAdapter(ABC):
    """Abstract base class for source adapters.

    Every adapter knows how to fetch items from one upstream source and
    convert them to canonical ``Item`` values. The rest of the system is
    source-agnostic.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Source identifier this adapter serves, e.g. ``"reddit"``."""

    @abstractmethod
    def fetch(self, config: SourceConfig) -> list[Item]:
        """Fetch the current items for this source.

        Adapters should catch their own transport and payload errors, log
        them, and return an empty list rather than raise.
        """
