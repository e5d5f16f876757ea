"""Storage layer — SQLite database access and schema management."""

from unifeed.storage.connection import get_connection
from unifeed.storage.schema import init_db

__all__ = ["get_connection", "init_db"]
