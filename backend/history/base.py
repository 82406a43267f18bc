"""
History store contract (v1).

Purpose:
- Per-user append log of completed scans.
- Keep the scan pipeline free of any particular persistence technology.

Rules:
- append() assigns the entry id; entries are never mutated afterwards.
- list_recent() returns most recent first.
- Last write wins per key; no transactional guarantees.
- Backend failures surface as PersistenceWriteFailed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any


class PersistenceWriteFailed(Exception):
    """A history read or write could not be completed by the backend."""


@dataclass(frozen=True)
class HistoryEntry:
    """
    One saved scan.

    id is empty until the store assigns one.
    """
    image_url: str
    description: str
    timestamp: str  # ISO-8601, UTC
    location: str | None = None
    id: str = ""

    def to_json(self) -> dict[str, Any]:
        """Wire format used by the history panel (camelCase keys)."""
        data = asdict(self)
        out: dict[str, Any] = {
            "id": data["id"],
            "imageUrl": data["image_url"],
            "description": data["description"],
            "timestamp": data["timestamp"],
        }
        if self.location:
            out["location"] = self.location
        return out


class HistoryStore(ABC):
    """
    Abstract keyed append log.

    The store is a *dumb sink*:
    - No retries
    - No knowledge of scans, providers, or HTTP
    """

    @abstractmethod
    async def append(self, user_id: str, entry: HistoryEntry) -> str:
        """
        Persist entry under user_id.

        Returns:
            The id assigned to the stored entry.
        """
        raise NotImplementedError

    @abstractmethod
    async def list_recent(self, user_id: str, limit: int) -> list[HistoryEntry]:
        """
        Return at most `limit` entries, newest timestamp first.

        An unknown user, or limit <= 0, yields [].
        """
        raise NotImplementedError

    @abstractmethod
    async def delete(self, user_id: str, entry_id: str) -> bool:
        """Remove one entry. Returns False if it did not exist."""
        raise NotImplementedError

    @abstractmethod
    async def clear(self, user_id: str) -> None:
        """Remove all entries for user_id. Idempotent."""
        raise NotImplementedError
