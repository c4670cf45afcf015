from __future__ import annotations

import datetime as dt
import sqlite3
from collections.abc import Iterator, MutableMapping
from pathlib import Path

DEFAULT_DB_PATH = Path.home() / ".paperfav.sqlite"


def connect(db_path: Path | str, check_same_thread: bool = True) -> sqlite3.Connection:
    path = Path(db_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path, check_same_thread=check_same_thread)
    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA journal_mode = WAL")
    except sqlite3.OperationalError:
        conn.execute("PRAGMA journal_mode = DELETE")
    conn.execute("PRAGMA synchronous = NORMAL")
    return conn


def initialize_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS kv_state (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
    )
    conn.commit()


class SqliteKeyValue(MutableMapping[str, str]):
    """String key/value mapping persisted in the ``kv_state`` table."""

    def __init__(self, db_path: Path | str = DEFAULT_DB_PATH) -> None:
        self.db_path = Path(db_path).expanduser()
        self.conn = connect(self.db_path)
        initialize_schema(self.conn)

    def close(self) -> None:
        self.conn.close()

    def __getitem__(self, key: str) -> str:
        row = self.conn.execute("SELECT value FROM kv_state WHERE key = ?", (key,)).fetchone()
        if row is None:
            raise KeyError(key)
        return str(row["value"])

    def __setitem__(self, key: str, value: str) -> None:
        now = dt.datetime.now(dt.UTC).isoformat()
        self.conn.execute(
            """
            INSERT INTO kv_state(key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (key, str(value), now),
        )
        self.conn.commit()

    def __delitem__(self, key: str) -> None:
        cur = self.conn.execute("DELETE FROM kv_state WHERE key = ?", (key,))
        self.conn.commit()
        if cur.rowcount == 0:
            raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        rows = self.conn.execute("SELECT key FROM kv_state ORDER BY key").fetchall()
        return iter([str(row["key"]) for row in rows])

    def __len__(self) -> int:
        row = self.conn.execute("SELECT COUNT(*) AS n FROM kv_state").fetchone()
        return int(row["n"])
