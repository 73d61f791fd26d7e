"""SQLite event store for the Data Output Agent."""

import json
import sqlite3
from datetime import datetime, timezone
from typing import Any

from data_output_agent.models import Event

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    payload TEXT NOT NULL,
    dedup_key TEXT UNIQUE,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_events_created_at ON events(created_at);
"""


class EventStore:
    """SQLite storage for received events."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        """Open database connection and initialize schema."""
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(SCHEMA_SQL)
        self._conn.commit()

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._conn

    def add_event(
        self,
        payload: Any,
        created_at: datetime | None = None,
        dedup_key: str | None = None,
    ) -> Event | None:
        """Store an event and return it with its assigned id.

        Returns None when an event with the same dedup_key already exists.
        """
        created_at = created_at or datetime.now(timezone.utc)
        try:
            cursor = self.conn.execute(
                "INSERT INTO events (payload, dedup_key, created_at) VALUES (?, ?, ?)",
                (json.dumps(payload), dedup_key, _dt_to_str(created_at)),
            )
        except sqlite3.IntegrityError:
            # Duplicate dedup_key, already recorded
            return None
        self.conn.commit()
        return Event(id=cursor.lastrowid, created_at=created_at, payload=payload)

    def fetch_recent(self, limit: int) -> list[Event]:
        """Return up to ``limit`` events, most recent first."""
        rows = self.conn.execute(
            "SELECT * FROM events ORDER BY id DESC LIMIT ?", (limit,)
        ).fetchall()
        return [_row_to_event(r) for r in rows]

    def get_event(self, event_id: int) -> Event | None:
        row = self.conn.execute(
            "SELECT * FROM events WHERE id = ?", (event_id,)
        ).fetchone()
        return _row_to_event(row) if row else None

    def count_events(self) -> int:
        row = self.conn.execute("SELECT COUNT(*) as cnt FROM events").fetchone()
        return row["cnt"] if row else 0

    def last_received_at(self) -> datetime | None:
        """Creation time of the newest event, or None if there are none."""
        row = self.conn.execute(
            "SELECT created_at FROM events ORDER BY id DESC LIMIT 1"
        ).fetchone()
        return _str_to_dt(row["created_at"]) if row else None


# --- Helper functions ---


def _dt_to_str(dt: datetime) -> str:
    """Convert datetime to ISO string for storage, assuming UTC when naive."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def _str_to_dt(s: str) -> datetime:
    return datetime.fromisoformat(s)


def _row_to_event(row: sqlite3.Row) -> Event:
    """Convert a database row to an Event."""
    return Event(
        id=row["id"],
        created_at=_str_to_dt(row["created_at"]),
        payload=json.loads(row["payload"]),
    )
