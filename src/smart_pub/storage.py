"""SQLite-backed key-value storage for state that outlives a session.

Values are stored JSON-encoded, one row per key. The TTL cache keeps its
whole snapshot under a single key.
"""

import contextlib
import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class StateStore:
    """Durable key-value store.

    Attributes:
        db_path: Path to the SQLite database file.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize the store.

        Missing parent directories are created. If the database cannot be
        created the failure is logged and later reads and writes raise
        sqlite3.Error, which the cache treats as unavailable storage.

        Args:
            db_path: Path to SQLite database. If None, uses
                ~/.cache/smart_pub/state.db.
        """
        if db_path is None:
            db_path = Path.home() / ".cache" / "smart_pub" / "state.db"

        self.db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_database()
        except (OSError, sqlite3.Error) as e:
            logger.error("Cannot initialize state database %s: %s", self.db_path, e)

    def __enter__(self) -> "StateStore":
        """Enter context manager, keeping connection open."""
        self._conn = sqlite3.connect(self.db_path)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager, closing connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    @contextlib.contextmanager
    def _connect(self):
        """Get a database connection.

        Reuses the open connection inside a ``with`` block, otherwise opens
        a new one and closes it after use.
        """
        if self._conn:
            yield self._conn
        else:
            conn = sqlite3.connect(self.db_path)
            try:
                yield conn
            finally:
                conn.close()

    def _init_database(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.commit()

    def get(self, key: str, default: Any = None) -> Any:
        """Return the decoded value stored under ``key``.

        Raises:
            ValueError: If the stored value is not valid JSON.
        """
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM state WHERE key = ?", (key,)
            ).fetchone()

        if row is None:
            return default

        try:
            return json.loads(row[0])
        except json.JSONDecodeError as e:
            raise ValueError(f"Corrupted state for key {key!r}: {e}") from e

    def update(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        encoded = json.dumps(value)
        with self._connect() as conn:
            conn.execute(
                "REPLACE INTO state (key, value) VALUES (?, ?)",
                (key, encoded),
            )
            conn.commit()

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM state WHERE key = ?", (key,))
            conn.commit()

    def keys(self) -> list[str]:
        with self._connect() as conn:
            rows = conn.execute("SELECT key FROM state ORDER BY key").fetchall()
        return [row[0] for row in rows]
