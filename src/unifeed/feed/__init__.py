"""Feed assembly — merging fetched items and tracking what has been seen."""

from unifeed.feed.ledger import Partition, SeenLedger
from unifeed.feed.merge import merge_items, source_stats

__all__ = ["Partition", "SeenLedger", "merge_items", "source_stats"]
