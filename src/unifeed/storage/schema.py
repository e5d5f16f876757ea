"""Database schema definition and initialization."""

from __future__ import annotations

import logging

from unifeed.storage.connection import get_connection

logger = logging.getLogger(__name__)

_SCHEMA_SQL = """\
-- Seen-state ledger, one JSON document per source
CREATE TABLE IF NOT EXISTS seen_ledger (
    source          TEXT PRIMARY KEY,
    state_data      TEXT NOT NULL,          -- JSON object
    updated_at      TEXT NOT NULL
);

-- Source adapter failure tracking
CREATE TABLE IF NOT EXISTS source_errors (
    adapter_name            TEXT PRIMARY KEY,
    consecutive_failures    INTEGER NOT NULL DEFAULT 0,
    last_error              TEXT,
    last_failed_at          TEXT,
    last_succeeded_at       TEXT
);

CREATE INDEX IF NOT EXISTS idx_seen_ledger_updated_at ON seen_ledger(updated_at);
"""


def init_db(database_path: str) -> None:
    """Create all tables and indexes if they do not already exist."""
    with get_connection(database_path) as conn:
        conn.executescript(_SCHEMA_SQL)
    logger.info("Database initialized at %s", database_path)
