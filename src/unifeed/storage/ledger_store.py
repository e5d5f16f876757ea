"""Durable storage for seen-ledger entries (``seen_ledger`` table)."""

from __future__ import annotations

import json
import logging

from unifeed.storage.connection import get_connection

logger = logging.getLogger(__name__)


def load_ledger_rows(database_path: str) -> dict[str, tuple[dict, str]]:
    """Return ``{source: (state_data, updated_at)}`` for every stored entry.

    Rows whose JSON cannot be decoded are logged and left out, so that one
    corrupt entry only resets its own source. Raises sqlite3.Error if the
    table cannot be read at all.
    """
    with get_connection(database_path) as conn:
        rows = conn.execute(
            "SELECT source, state_data, updated_at FROM seen_ledger"
        ).fetchall()

    entries: dict[str, tuple[dict, str]] = {}
    for row in rows:
        try:
            state = json.loads(row["state_data"])
        except ValueError:
            logger.warning("Discarding corrupt seen-ledger entry for '%s'", row["source"])
            continue
        if not isinstance(state, dict):
            logger.warning("Discarding malformed seen-ledger entry for '%s'", row["source"])
            continue
        entries[row["source"]] = (state, row["updated_at"])
    return entries


def save_ledger_rows(database_path: str, entries: dict[str, tuple[dict, str]]) -> None:
    """Upsert the given ``{source: (state_data, updated_at)}`` entries in one transaction."""
    if not entries:
        return
    with get_connection(database_path) as conn:
        conn.executemany(
            "INSERT INTO seen_ledger (source, state_data, updated_at) "
            "VALUES (?, ?, ?) "
            "ON CONFLICT(source) DO UPDATE SET "
            "state_data = excluded.state_data, updated_at = excluded.updated_at",
            [
                (source, json.dumps(state), updated_at)
                for source, (state, updated_at) in entries.items()
            ],
        )
