"""In-memory history repository.

Process-local list, newest first. Data is lost on restart.
"""

from typing import List

from ....domain.history.models import HistoryItem


class InMemoryHistoryRepository:
    """
    In-memory implementation of IHistoryRepository.

    HistoryItem is frozen, so records are stored and returned without
    copying.

    Example:
        >>> repository = InMemoryHistoryRepository()
        >>> await repository.prepend(item, max_items=7)
        >>> items = await repository.list_recent(limit=7)
    """

    def __init__(self) -> None:
        self._items: List[HistoryItem] = []

    async def prepend(self, item: HistoryItem, max_items: int) -> None:
        self._items.insert(0, item)
        del self._items[max(max_items, 0):]

    async def list_recent(self, limit: int) -> List[HistoryItem]:
        return list(self._items[: max(limit, 0)])

    async def clear(self) -> None:
        self._items.clear()

    def count(self) -> int:
        """Number of stored records (test helper)."""
        return len(self._items)
