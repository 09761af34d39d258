"""Key-value stores used to remember values across sessions."""

import sqlite3
from pathlib import Path
from typing import Protocol

import structlog

from hacker_stories.store.errors import StoreConnectionError, StoreError


logger = structlog.get_logger()

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
)
"""


class KeyValueStore(Protocol):
    """Minimal get/set persistence capability."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...


class InMemoryKeyValueStore:
    """Dictionary-backed store for tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self.writes: list[tuple[str, str]] = []

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self.writes.append((key, value))


class SqliteKeyValueStore:
    """SQLite-backed key-value store.

    Uses a single ``kv`` table in WAL mode. Use as a context manager or call
    connect() and close() explicitly.
    """

    def __init__(self, db_path: Path | str) -> None:
        """Initialize the store.

        Args:
            db_path: Path to SQLite database file.
        """
        self._db_path = Path(db_path) if isinstance(db_path, str) else db_path
        self._conn: sqlite3.Connection | None = None
        self._log = logger.bind(component="store", db_path=str(self._db_path))

    @property
    def db_path(self) -> Path:
        """Get the database path."""
        return self._db_path

    @property
    def is_connected(self) -> bool:
        """Check if connected to database."""
        return self._conn is not None

    def connect(self) -> None:
        """Open the database, creating the file and table if needed."""
        if self._conn is not None:
            return

        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = sqlite3.connect(str(self._db_path))
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA synchronous=NORMAL")
            self._conn.execute(_SCHEMA)
            self._conn.commit()
        except sqlite3.Error as e:
            self._conn = None
            msg = f"Cannot open {self._db_path}: {e}"
            raise StoreConnectionError(msg) from e

        self._log.info("database_connected")

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._log.info("database_closed")

    def __enter__(self) -> "SqliteKeyValueStore":
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()

    def _ensure_connected(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreConnectionError("Database not connected. Call connect() first.")
        return self._conn

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if absent.

        Args:
            key: Lookup key.

        Returns:
            Stored value or None.
        """
        conn = self._ensure_connected()
        row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return None if row is None else str(row[0])

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one.

        Args:
            key: Key to write.
            value: Value to store.

        Raises:
            StoreError: If the write fails.
        """
        conn = self._ensure_connected()
        try:
            conn.execute(
                "INSERT INTO kv (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, "
                "updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')",
                (key, value),
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            self._log.error("kv_write_failed", key=key, error=str(e))
            msg = f"Failed to write key {key!r}: {e}"
            raise StoreError(msg) from e
        self._log.debug("kv_written", key=key)
