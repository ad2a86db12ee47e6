"""Key/value persistence for auth session records."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Dict, Optional, Protocol


class SessionStorageError(Exception):
    """Raised when the underlying storage cannot be read or written."""


class SessionStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class SQLiteSessionStorage:
    """Single-writer, best-effort store for serialized sessions.

    Mirrors the browser ``localStorage`` contract: string keys, string values,
    no transactions across keys.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        try:
            if self._db_path.parent and not self._db_path.parent.exists():
                self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._ensure_schema()
        except (OSError, sqlite3.Error) as exc:
            raise SessionStorageError(f"Unable to open session storage at {db_path}") from exc

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS session_records (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

    def get_item(self, key: str) -> Optional[str]:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT value FROM session_records WHERE key = ?",
                    (key,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise SessionStorageError(f"Failed to read {key!r}") from exc
        if not row:
            return None
        return row["value"]

    def set_item(self, key: str, value: str) -> None:
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO session_records (key, value)
                    VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """,
                    (key, value),
                )
        except sqlite3.Error as exc:
            raise SessionStorageError(f"Failed to write {key!r}") from exc

    def remove_item(self, key: str) -> None:
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM session_records WHERE key = ?", (key,))
        except sqlite3.Error as exc:
            raise SessionStorageError(f"Failed to remove {key!r}") from exc


class MemorySessionStorage:
    """Process-local storage; contents vanish with the process."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


__all__ = [
    "MemorySessionStorage",
    "SQLiteSessionStorage",
    "SessionStorage",
    "SessionStorageError",
]
