import asyncio
from datetime import datetime, timedelta
from typing import List

import pytest

from cookscore.application.history.recorder import (
    HistoryRecorder,
    format_date,
    format_time,
)
from cookscore.domain.evaluation.models import EvaluationResult
from cookscore.domain.history.models import HistoryItem
from cookscore.infrastructure.persistence.in_memory.history_repository import (
    InMemoryHistoryRepository,
)


def _result(score: int) -> EvaluationResult:
    return EvaluationResult(score=score, good_points=[f"good {score}"], improvements=[])


class _Clock:
    def __init__(self, start: datetime, step: timedelta = timedelta(0)) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


def test_date_and_time_formats() -> None:
    moment = datetime(2025, 1, 5, 9, 3, 59)
    assert format_date(moment) == "2025/1/5"
    assert format_time(moment) == "09:03"
    assert format_date(datetime(2025, 12, 31, 23, 59)) == "2025/12/31"


@pytest.mark.asyncio
async def test_record_builds_item() -> None:
    moment = datetime(2025, 10, 19, 14, 5)
    recorder = HistoryRecorder(InMemoryHistoryRepository(), clock=lambda: moment)
    result = EvaluationResult(score=72, good_points=["a", "b"], improvements=["c"])

    item = await recorder.record(result)

    assert item.id == int(moment.timestamp() * 1000)
    assert item.date == "2025/10/19"
    assert item.time == "14:05"
    assert item.score == 72
    assert item.good_points == ["a", "b"]
    assert item.improvements == ["c"]
    assert await recorder.list() == [item]


@pytest.mark.asyncio
async def test_keeps_seven_most_recent_first() -> None:
    clock = _Clock(datetime(2025, 10, 1, 12, 0), step=timedelta(days=1))
    recorder = HistoryRecorder(InMemoryHistoryRepository(), clock=clock)

    for score in range(10, 90, 10):  # 8 results
        await recorder.record(_result(score))

    items = await recorder.list()
    assert len(items) == 7
    assert [i.score for i in items] == [80, 70, 60, 50, 40, 30, 20]
    assert items[0].date == "2025/10/8"
    ids = [i.id for i in items]
    assert ids == sorted(ids, reverse=True)


@pytest.mark.asyncio
async def test_ids_unique_within_same_millisecond() -> None:
    frozen = datetime(2025, 10, 19, 8, 0)
    recorder = HistoryRecorder(InMemoryHistoryRepository(), clock=lambda: frozen)
    first = await recorder.record(_result(50))
    second = await recorder.record(_result(60))
    third = await recorder.record(_result(70))
    assert second.id == first.id + 1
    assert third.id == second.id + 1


@pytest.mark.asyncio
async def test_clock_going_backwards_keeps_ids_increasing() -> None:
    clock = _Clock(datetime(2025, 10, 19, 8, 0), step=timedelta(minutes=-5))
    recorder = HistoryRecorder(InMemoryHistoryRepository(), clock=clock)
    first = await recorder.record(_result(50))
    second = await recorder.record(_result(60))
    assert second.id > first.id
    assert (await recorder.list())[0] == second


@pytest.mark.asyncio
async def test_custom_capacity_and_clear() -> None:
    recorder = HistoryRecorder(InMemoryHistoryRepository(), max_items=2)
    for score in (1, 2, 3):
        await recorder.record(_result(score))
    assert [i.score for i in await recorder.list()] == [3, 2]

    await recorder.clear()
    assert await recorder.list() == []


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        HistoryRecorder(InMemoryHistoryRepository(), max_items=0)


@pytest.mark.asyncio
async def test_recorders_sharing_repository_issue_distinct_ids() -> None:
    frozen = datetime(2025, 10, 19, 8, 0)
    repository = InMemoryHistoryRepository()
    first = await HistoryRecorder(repository, clock=lambda: frozen).record(_result(50))
    second = await HistoryRecorder(repository, clock=lambda: frozen).record(_result(60))
    assert second.id == first.id + 1


class _SlowReadRepository(InMemoryHistoryRepository):
    """Yields to the loop after reading, like a database round trip."""

    async def list_recent(self, limit: int) -> List[HistoryItem]:
        items = await super().list_recent(limit)
        await asyncio.sleep(0)
        return items


@pytest.mark.asyncio
async def test_concurrent_records_get_distinct_ids() -> None:
    frozen = datetime(2026, 1, 1, 12, 0)
    repository = _SlowReadRepository()
    recorders = [HistoryRecorder(repository, clock=lambda: frozen) for _ in range(5)]

    items = await asyncio.gather(*(r.record(_result(50 + i)) for i, r in enumerate(recorders)))

    ids = [item.id for item in items]
    assert len(set(ids)) == 5
    stored = [item.id for item in await repository.list_recent(limit=7)]
    assert stored == sorted(ids, reverse=True)
