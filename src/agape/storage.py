"""SQLite-backed key/value storage for client-side state.

Holds small JSON documents that must survive restarts: the persisted auth
session and the sign-in attempt counters.
"""

import sqlite3
from datetime import datetime, timezone
from pathlib import Path


class LocalStorage:
    """String key/value store on top of a single SQLite table."""

    def __init__(self, db_path: str | Path):
        """Initialize storage with database path.

        Args:
            db_path: Path to SQLite database file (``~`` is expanded)
        """
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_db()

    def _initialize_db(self) -> None:
        """Create the table if it doesn't exist."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
            """)
            conn.commit()

    def get_item(self, key: str) -> str | None:
        """Get the value stored under a key, or None."""
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                    updated_at = excluded.updated_at
            """,
                (key, value, datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()

    def remove_item(self, key: str) -> None:
        """Delete a key if present."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()
