"""Per-source fetch health, recorded in the ``source_errors`` table."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone

from unifeed.storage.connection import get_connection

logger = logging.getLogger(__name__)


class SourceHealth:
    """Tracks consecutive failures per adapter. Never raises."""

    def __init__(self, database_path: str) -> None:
        self._database_path = database_path

    def record_failure(self, adapter_name: str, error_msg: str) -> int:
        """Record a fetch failure. Returns the updated consecutive_failures count."""
        now = datetime.now(timezone.utc).isoformat()
        try:
            with get_connection(self._database_path) as conn:
                conn.execute(
                    "INSERT INTO source_errors "
                    "(adapter_name, consecutive_failures, last_error, last_failed_at) "
                    "VALUES (?, 1, ?, ?) "
                    "ON CONFLICT(adapter_name) DO UPDATE SET "
                    "consecutive_failures = consecutive_failures + 1, "
                    "last_error = excluded.last_error, last_failed_at = excluded.last_failed_at",
                    (adapter_name, error_msg, now),
                )
                row = conn.execute(
                    "SELECT consecutive_failures FROM source_errors WHERE adapter_name = ?",
                    (adapter_name,),
                ).fetchone()
        except sqlite3.Error:
            logger.exception("Failed to record failure for source '%s'", adapter_name)
            return 0
        return row["consecutive_failures"] if row else 1

    def record_success(self, adapter_name: str) -> None:
        """Reset the consecutive failure count after a successful fetch."""
        now = datetime.now(timezone.utc).isoformat()
        try:
            with get_connection(self._database_path) as conn:
                conn.execute(
                    "INSERT INTO source_errors "
                    "(adapter_name, consecutive_failures, last_succeeded_at) "
                    "VALUES (?, 0, ?) "
                    "ON CONFLICT(adapter_name) DO UPDATE SET "
                    "consecutive_failures = 0, last_succeeded_at = excluded.last_succeeded_at",
                    (adapter_name, now),
                )
        except sqlite3.Error:
            logger.exception("Failed to record success for source '%s'", adapter_name)

    def snapshot(self) -> dict[str, dict]:
        """Return every health row keyed by adapter name."""
        try:
            with get_connection(self._database_path) as conn:
                rows = conn.execute(
                    "SELECT adapter_name, consecutive_failures, last_error, "
                    "last_failed_at, last_succeeded_at FROM source_errors"
                ).fetchall()
        except sqlite3.Error:
            logger.exception("Failed to read source health")
            return {}
        return {
            row["adapter_name"]: {
                "consecutive_failures": row["consecutive_failures"],
                "last_error": row["last_error"],
                "last_failed_at": row["last_failed_at"],
                "last_succeeded_at": row["last_succeeded_at"],
            }
            for row in rows
        }
