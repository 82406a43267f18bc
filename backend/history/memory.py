"""In-process history store for development and tests."""

from __future__ import annotations

from dataclasses import replace
from uuid import uuid4

from history.base import HistoryEntry, HistoryStore


def _new_entry_id() -> str:
    return f"hist_{uuid4().hex[:12]}"


class InMemoryHistoryStore(HistoryStore):
    """
    Dict-of-dicts store: user_id -> entry_id -> entry.

    Contents are lost on restart.
    """

    def __init__(self) -> None:
        self._entries: dict[str, dict[str, HistoryEntry]] = {}

    async def append(self, user_id: str, entry: HistoryEntry) -> str:
        entry_id = _new_entry_id()
        self._entries.setdefault(user_id, {})[entry_id] = replace(entry, id=entry_id)
        return entry_id

    async def list_recent(self, user_id: str, limit: int) -> list[HistoryEntry]:
        if limit <= 0:
            return []
        entries = list(self._entries.get(user_id, {}).values())
        # Stable sort keeps insertion order for identical timestamps, newest last,
        # so reverse after sorting ascending.
        entries.sort(key=lambda e: e.timestamp)
        entries.reverse()
        return entries[:limit]

    async def delete(self, user_id: str, entry_id: str) -> bool:
        return self._entries.get(user_id, {}).pop(entry_id, None) is not None

    async def clear(self, user_id: str) -> None:
        self._entries.pop(user_id, None)
