"""History repository port (interface)."""

from __future__ import annotations

from typing import List, Protocol

from .models import HistoryItem


class IHistoryRepository(Protocol):
    """
    Interface for evaluation history storage.

    Implementations:
    - InMemoryHistoryRepository (default, transient)
    - MongoHistoryRepository (persistent)

    Ordering is always most-recent first.
    """

    async def prepend(self, item: HistoryItem, max_items: int) -> None:
        """Store ``item`` as the newest record, keeping only ``max_items``."""
        ...

    async def list_recent(self, limit: int) -> List[HistoryItem]:
        """Return up to ``limit`` records, newest first."""
        ...

    async def clear(self) -> None:
        """Remove every record."""
        ...
