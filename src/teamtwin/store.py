"""Key-value snapshot storage.

Snapshots are stored as UTF-8 JSON text under ``team-setup-<team id>``.
Editors receive a :class:`SnapshotStore` rather than reaching for a global,
so tests run against :class:`InMemorySnapshotStore` and the CLI/dashboard use
:class:`SqliteSnapshotStore` inside ``.teamtwin/``.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Protocol

from teamtwin.core import _now_iso

logger = logging.getLogger(__name__)

KEY_PREFIX = "team-setup-"

SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS snapshots (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
"""


def snapshot_key(team_id: str) -> str:
    return f"{KEY_PREFIX}{team_id}"


class SnapshotStore(Protocol):
    """Minimal persistent key-value interface used by the composition editor."""

    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str) -> None: ...


class InMemorySnapshotStore:
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        self._data[key] = value

    def keys(self) -> list[str]:
        return sorted(self._data)


class SqliteSnapshotStore:
    """SQLite-backed store. One row per key, overwritten on every put."""

    def __init__(self, db_path: str | Path, *, check_same_thread: bool = True) -> None:
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None
        self._check_same_thread = check_same_thread

    def __enter__(self) -> SqliteSnapshotStore:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(
                str(self.db_path),
                isolation_level="DEFERRED",
                check_same_thread=self._check_same_thread,
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA busy_timeout=5000")
        return self._conn

    def initialize(self) -> None:
        """Create the snapshots table if it does not exist yet."""
        self.conn.executescript(SCHEMA_SQL)
        self.conn.commit()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def get(self, key: str) -> str | None:
        row = self.conn.execute("SELECT value FROM snapshots WHERE key = ?", (key,)).fetchone()
        return None if row is None else str(row["value"])

    def put(self, key: str, value: str) -> None:
        self.conn.execute(
            "INSERT INTO snapshots (key, value, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
            (key, value, _now_iso()),
        )
        self.conn.commit()

    def delete(self, key: str) -> bool:
        cursor = self.conn.execute("DELETE FROM snapshots WHERE key = ?", (key,))
        self.conn.commit()
        return cursor.rowcount > 0

    def keys(self) -> list[str]:
        return [str(r["key"]) for r in self.conn.execute("SELECT key FROM snapshots ORDER BY key").fetchall()]
