#!/usr/bin/env python3
"""
SQLite-backed key-value substrate for the overlay store.

Every overlay collection is one named record holding a JSON document. A write
replaces the whole record in a single statement, so a failed write leaves the
previous value of that record intact and never touches other records.

Usage:
    from Rituals.overlay_store.kv import KVStore

    kv = KVStore(Path("State/rituals.db"))
    kv.put_json("favorites_v1", [3, 7])
    favorites = kv.get_json("favorites_v1", [])
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Union

from Rituals.error_logger import log_error, log_warning
from Rituals.overlay_store.errors import PersistenceFailure

logger = logging.getLogger(__name__)

MEMORY = ":memory:"


class KVStore:
    """Local key-value persistence handle."""

    SCHEMA_VERSION = 1

    def __init__(self, db_path: Union[Path, str] = MEMORY):
        """Open (and create if needed) the record table.

        Args:
            db_path: Path to the SQLite file, or ":memory:" for a
                     process-local store.
        """
        if str(db_path) == MEMORY:
            self.db_path: Union[Path, str] = MEMORY
        else:
            self.db_path = Path(db_path)
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn: Optional[sqlite3.Connection] = None
        self._init_database()

    def _get_pooled_connection(self) -> sqlite3.Connection:
        """Return the persistent connection, opening it on first use."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
            if self.db_path != MEMORY:
                self._conn.execute("PRAGMA journal_mode = WAL")
        return self._conn

    @contextmanager
    def _transaction(self, key: Optional[str], action: str):
        """Run one statement group, mapping substrate errors to PersistenceFailure."""
        try:
            conn = self._get_pooled_connection()
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise
        except sqlite3.Error as e:
            log_error("kv", e, f"{action} {key or '*'}")
            raise PersistenceFailure(key, e) from e

    def close(self):
        """Close the pooled connection if it is open."""
        if self._conn is not None:
            try:
                self._conn.close()
            finally:
                self._conn = None

    def __del__(self):
        try:
            self.close()
        except sqlite3.Error:
            pass

    def _init_database(self):
        with self._transaction(None, "init") as conn:
            conn.executescript('''
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY,
                    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );

                CREATE TABLE IF NOT EXISTS records (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );

                INSERT OR IGNORE INTO schema_version (version) VALUES (1);
            ''')

    # =========================================================================
    # RAW RECORD ACCESS
    # =========================================================================

    def get_raw(self, key: str) -> Optional[str]:
        """Return the stored text for key, or None if absent."""
        with self._transaction(key, "read") as conn:
            row = conn.execute(
                "SELECT value FROM records WHERE key = ?", (key,)
            ).fetchone()
        return row["value"] if row else None

    def put_raw(self, key: str, value: str) -> None:
        """Replace the stored text for key."""
        with self._transaction(key, "write") as conn:
            conn.execute(
                "INSERT OR REPLACE INTO records (key, value, updated_at) VALUES (?, ?, ?)",
                (key, value, datetime.now().isoformat()),
            )

    def delete(self, key: str) -> bool:
        """Remove a record. Returns True if it existed."""
        with self._transaction(key, "delete") as conn:
            cursor = conn.execute("DELETE FROM records WHERE key = ?", (key,))
            return cursor.rowcount > 0

    def keys(self, prefix: str = "") -> List[str]:
        """List record keys starting with prefix, sorted."""
        with self._transaction(prefix, "list") as conn:
            rows = conn.execute(
                "SELECT key FROM records WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix),
            ).fetchall()
        return [row["key"] for row in rows]

    # =========================================================================
    # JSON RECORDS
    # =========================================================================

    def get_json(self, key: str, default: Any = None) -> Any:
        """Decode a JSON record.

        A record that cannot be decoded is reported and read as default; the
        next write to the key replaces it.
        """
        raw = self.get_raw(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            log_warning("kv", f"Record '{key}' is not valid JSON ({e}); using default")
            return default

    def put_json(self, key: str, value: Any) -> None:
        """Encode value as JSON and replace the record."""
        self.put_raw(key, json.dumps(value, ensure_ascii=False, separators=(",", ":")))
        logger.debug("wrote record %s", key)


# Module-level instance
_kv_instance: Optional[KVStore] = None


def get_kv(db_path: Optional[Path] = None) -> KVStore:
    """Get or create the shared KVStore.

    Without a path the configured database (RITUALS_DB_PATH) is used.
    """
    global _kv_instance

    if _kv_instance is None or db_path is not None:
        if db_path is None:
            from Rituals.config import RitualsConfig
            db_path = RitualsConfig.from_env().db_path
        _kv_instance = KVStore(db_path)

    return _kv_instance
