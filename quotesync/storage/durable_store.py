"""Durable key/value storage for the quote snapshot and filter selection."""

import json
import logging
import sqlite3
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

from ..exceptions import StorageReadError, ValidationError
from ..quotes.models import Quote

logger = logging.getLogger(__name__)

QUOTES_KEY = "quotes"
SELECTED_CATEGORY_KEY = "selectedCategory"

SCHEMA = """
-- Opaque JSON blobs keyed by name
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


class DurableStore:
    """SQLite-backed key/value medium that survives restarts.

    Read failures are logged and reported as an absent value. Write
    failures are logged and never raised to the caller.
    """

    def __init__(self, db_path: str | Path):
        """Initialize the store.

        Args:
            db_path: Path to SQLite database file, or ":memory:".
        """
        self.db_path = db_path if db_path == ":memory:" else Path(db_path).expanduser()
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Initialize database connection and schema."""
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(str(self.db_path))
        self._conn.executescript(SCHEMA)
        self._conn.commit()

        logger.info(f"DurableStore connected to {self.db_path}")

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def _ensure_connected(self) -> sqlite3.Connection:
        """Ensure database connection exists."""
        if self._conn is None:
            self.connect()
        return self._conn

    def _get_raw(self, key: str) -> str | None:
        try:
            conn = self._ensure_connected()
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        except (sqlite3.Error, OSError) as e:
            raise StorageReadError(f"Cannot read {key!r}: {e}") from e
        return row[0] if row else None

    def _set_raw(self, key: str, value: str) -> None:
        try:
            conn = self._ensure_connected()
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, datetime.now().isoformat()),
            )
            conn.commit()
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to save {key!r}: {e}")

    def _read_json(self, key: str) -> Any:
        raw = self._get_raw(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageReadError(f"Stored {key!r} is not valid JSON: {e}") from e

    def load_quotes(self) -> list[Quote] | None:
        """Load the stored quote snapshot.

        Returns:
            List of quotes, or None if nothing usable is stored.
        """
        try:
            data = self._read_json(QUOTES_KEY)
            if data is None:
                return None
            if not isinstance(data, list):
                raise StorageReadError("Stored quotes are not a JSON array")
            try:
                return [Quote.from_dict(item) for item in data]
            except ValidationError as e:
                raise StorageReadError(f"Stored quotes are malformed: {e}") from e
        except StorageReadError as e:
            logger.warning(f"Ignoring stored quotes: {e}")
            return None

    def save_quotes(self, quotes: Iterable[Quote]) -> None:
        """Persist a snapshot of the quotes."""
        payload = json.dumps([q.to_dict() for q in quotes], ensure_ascii=False)
        self._set_raw(QUOTES_KEY, payload)

    def load_selected_category(self) -> str | None:
        """Load the remembered category filter, or None if absent."""
        try:
            data = self._read_json(SELECTED_CATEGORY_KEY)
        except StorageReadError as e:
            logger.warning(f"Ignoring stored category filter: {e}")
            return None

        if data is None:
            return None
        if not isinstance(data, str) or not data:
            logger.warning("Ignoring stored category filter: not a string")
            return None
        return data

    def save_selected_category(self, category_filter: str) -> None:
        """Persist the category filter ("all" or a category name)."""
        self._set_raw(SELECTED_CATEGORY_KEY, json.dumps(category_filter))
