"""SQLite key/value store - the client's persistent local storage (auth token, offline data)."""

import sqlite3
from pathlib import Path
from typing import Optional


def _ensure_dir(path: Path):
    path.parent.mkdir(parents=True, exist_ok=True)


class LocalStore:
    """String keys to string values, like browser localStorage."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        if str(db_path) != ":memory:":
            _ensure_dir(self.db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._init_schema()

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_schema(self):
        conn = self._get_conn()
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS local_storage (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at REAL DEFAULT (strftime('%s', 'now'))
            );
        """)
        conn.commit()

    def get_item(self, key: str) -> Optional[str]:
        row = self._get_conn().execute(
            "SELECT value FROM local_storage WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    def set_item(self, key: str, value: str):
        conn = self._get_conn()
        conn.execute("""
            INSERT INTO local_storage (key, value, updated_at)
            VALUES (?, ?, strftime('%s', 'now'))
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """, (key, str(value)))
        conn.commit()

    def remove_item(self, key: str):
        conn = self._get_conn()
        conn.execute("DELETE FROM local_storage WHERE key = ?", (key,))
        conn.commit()

    def keys(self) -> list[str]:
        rows = self._get_conn().execute("SELECT key FROM local_storage ORDER BY key").fetchall()
        return [r["key"] for r in rows]

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None
