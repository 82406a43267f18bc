"""
SQLite-backed history store.

Blocking sqlite3 calls run in a worker thread (asyncio.to_thread); one
short-lived connection per operation, so the store is safe to share across
concurrent requests.
"""

from __future__ import annotations

import asyncio
import os
import sqlite3
from dataclasses import replace
from typing import Callable, TypeVar
from uuid import uuid4

from history.base import HistoryEntry, HistoryStore, PersistenceWriteFailed

T = TypeVar("T")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS scan_history (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    user_id TEXT NOT NULL,
    image_url TEXT NOT NULL,
    description TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    location TEXT
)
"""

_INDEX = """
CREATE INDEX IF NOT EXISTS scan_history_user_ts
ON scan_history (user_id, timestamp)
"""


class SqliteHistoryStore(HistoryStore):
    """History rows in a single table keyed by user_id."""

    def __init__(self, *, db_path: str) -> None:
        self._db_path = db_path
        self._initialized = False

    # ------------------------------------------------------------------
    # HistoryStore
    # ------------------------------------------------------------------

    async def append(self, user_id: str, entry: HistoryEntry) -> str:
        entry_id = f"hist_{uuid4().hex[:12]}"
        stored = replace(entry, id=entry_id)

        def _insert(conn: sqlite3.Connection) -> None:
            conn.execute(
                """
                INSERT INTO scan_history (id, user_id, image_url, description, timestamp, location)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    stored.id,
                    user_id,
                    stored.image_url,
                    stored.description,
                    stored.timestamp,
                    stored.location,
                ),
            )

        await self._run(_insert)
        return entry_id

    async def list_recent(self, user_id: str, limit: int) -> list[HistoryEntry]:
        if limit <= 0:
            return []

        def _query(conn: sqlite3.Connection) -> list[HistoryEntry]:
            rows = conn.execute(
                """
                SELECT id, image_url, description, timestamp, location
                FROM scan_history
                WHERE user_id = ?
                ORDER BY timestamp DESC, seq DESC
                LIMIT ?
                """,
                (user_id, limit),
            ).fetchall()
            return [
                HistoryEntry(
                    id=row["id"],
                    image_url=row["image_url"],
                    description=row["description"],
                    timestamp=row["timestamp"],
                    location=row["location"],
                )
                for row in rows
            ]

        return await self._run(_query)

    async def delete(self, user_id: str, entry_id: str) -> bool:
        def _delete(conn: sqlite3.Connection) -> bool:
            cur = conn.execute(
                "DELETE FROM scan_history WHERE user_id = ? AND id = ?",
                (user_id, entry_id),
            )
            return cur.rowcount > 0

        return await self._run(_delete)

    async def clear(self, user_id: str) -> None:
        def _clear(conn: sqlite3.Connection) -> None:
            conn.execute("DELETE FROM scan_history WHERE user_id = ?", (user_id,))

        await self._run(_clear)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _connect(self) -> sqlite3.Connection:
        if not self._initialized:
            parent = os.path.dirname(self._db_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        if not self._initialized:
            conn.execute(_SCHEMA)
            conn.execute(_INDEX)
            conn.commit()
            self._initialized = True
        return conn

    async def _run(self, op: Callable[[sqlite3.Connection], T]) -> T:
        def _call() -> T:
            try:
                conn = self._connect()
            except (sqlite3.Error, OSError) as exc:
                raise PersistenceWriteFailed(f"failed to open history database: {exc}") from exc
            try:
                with conn:
                    return op(conn)
            except sqlite3.Error as exc:
                raise PersistenceWriteFailed(f"history query failed: {exc}") from exc
            finally:
                conn.close()

        return await asyncio.to_thread(_call)
