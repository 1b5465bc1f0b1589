"""History recorder.

Assigns id and local timestamp to each evaluation result and keeps the
most recent ``max_items`` records (oldest evicted).
"""

from __future__ import annotations

import asyncio
import weakref
from datetime import datetime
from typing import Any, Callable, List, Optional

import structlog

from ...domain.evaluation.models import EvaluationResult
from ...domain.history.models import HistoryItem
from ...domain.history.ports import IHistoryRepository

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ITEMS = 7

# One write lock per repository object: reading the newest id and
# inserting the new record must not interleave across recorders.
_write_locks: "weakref.WeakKeyDictionary[Any, asyncio.Lock]" = weakref.WeakKeyDictionary()


def _write_lock(repository: IHistoryRepository) -> asyncio.Lock:
    lock = _write_locks.get(repository)
    if lock is None:
        lock = asyncio.Lock()
        _write_locks[repository] = lock
    return lock


def format_date(moment: datetime) -> str:
    """``ja-JP`` short date: ``2025/1/5`` (no zero padding)."""
    return f"{moment.year}/{moment.month}/{moment.day}"


def format_time(moment: datetime) -> str:
    return moment.strftime("%H:%M")


class HistoryRecorder:
    """
    Application service owning the evaluation history.

    Ids are millisecond timestamps bumped by one whenever a record would
    not be newer than the last id issued or stored, so they stay unique
    and strictly increasing across recorders sharing a repository. The
    read-newest-then-insert step runs under a per-repository lock, so
    concurrent requests in one process never compute the same id.

    Example:
        >>> recorder = HistoryRecorder(InMemoryHistoryRepository())
        >>> item = await recorder.record(result)
        >>> (await recorder.list())[0].id == item.id
        True
    """

    def __init__(
        self,
        repository: IHistoryRepository,
        max_items: int = DEFAULT_MAX_ITEMS,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if max_items < 1:
            raise ValueError(f"max_items must be positive: {max_items}")
        self.repository = repository
        self.max_items = max_items
        self._clock = clock or datetime.now
        self._last_id = 0

    def _next_id(self, moment: datetime, newest_stored: int = 0) -> int:
        floor = max(self._last_id, newest_stored)
        candidate = int(moment.timestamp() * 1000)
        if candidate <= floor:
            candidate = floor + 1
        self._last_id = candidate
        return candidate

    async def record(self, result: EvaluationResult) -> HistoryItem:
        """Persist ``result`` as the newest history record."""
        async with _write_lock(self.repository):
            moment = self._clock()
            newest = await self.repository.list_recent(limit=1)
            item = HistoryItem(
                id=self._next_id(moment, newest[0].id if newest else 0),
                date=format_date(moment),
                time=format_time(moment),
                score=result.score,
                good_points=list(result.good_points),
                improvements=list(result.improvements),
            )
            await self.repository.prepend(item, max_items=self.max_items)
        logger.info("history.recorded", id=item.id, score=item.score)
        return item

    async def list(self) -> List[HistoryItem]:
        """All kept records, most recent first."""
        return await self.repository.list_recent(limit=self.max_items)

    async def clear(self) -> None:
        await self.repository.clear()
        logger.info("history.cleared")
