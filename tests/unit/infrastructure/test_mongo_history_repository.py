"""MongoHistoryRepository against a mocked motor collection."""

from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from cookscore.domain.history.models import HistoryItem
from cookscore.domain.shared.errors import HistoryStorageError
from cookscore.infrastructure.persistence.mongodb.history_repository import (
    MongoHistoryRepository,
)


def _collection(found: List[Dict[str, Any]]) -> MagicMock:
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=found)

    collection = MagicMock()
    collection.insert_one = AsyncMock()
    collection.delete_many = AsyncMock()
    collection.find.return_value = cursor
    return collection


def _item(item_id: int = 1760850000000) -> HistoryItem:
    return HistoryItem(
        id=item_id,
        date="2025/10/19",
        time="14:05",
        score=72,
        good_points=["基本的な栄養素は含まれています"],
        improvements=["塩分を控えめにしてみましょう"],
    )


@pytest.mark.asyncio
async def test_prepend_inserts_and_trims() -> None:
    collection = _collection(found=[{"_id": 3}, {"_id": 2}])
    repository = MongoHistoryRepository(collection=collection)

    await repository.prepend(_item(3), max_items=2)

    document = collection.insert_one.await_args.args[0]
    assert document["_id"] == 3
    assert document["id"] == 3
    assert document["goodPoints"] == ["基本的な栄養素は含まれています"]
    collection.find.return_value.sort.assert_called_with("_id", DESCENDING)
    collection.find.return_value.limit.assert_called_with(2)
    collection.delete_many.assert_awaited_once_with({"_id": {"$nin": [3, 2]}})


@pytest.mark.asyncio
async def test_list_recent_maps_documents() -> None:
    doc = _item().to_document()
    doc["_id"] = doc["id"]
    collection = _collection(found=[doc])
    repository = MongoHistoryRepository(collection=collection)

    items = await repository.list_recent(limit=7)

    assert items == [_item()]
    collection.find.return_value.limit.assert_called_with(7)


@pytest.mark.asyncio
async def test_list_recent_non_positive_limit() -> None:
    collection = _collection(found=[])
    repository = MongoHistoryRepository(collection=collection)
    assert await repository.list_recent(limit=0) == []
    collection.find.assert_not_called()


@pytest.mark.asyncio
async def test_clear_deletes_everything() -> None:
    collection = _collection(found=[])
    await MongoHistoryRepository(collection=collection).clear()
    collection.delete_many.assert_awaited_once_with({})


@pytest.mark.asyncio
async def test_driver_errors_are_wrapped() -> None:
    collection = _collection(found=[])
    collection.insert_one = AsyncMock(side_effect=PyMongoError("connection lost"))
    repository = MongoHistoryRepository(collection=collection)

    with pytest.raises(HistoryStorageError, match="prepend failed"):
        await repository.prepend(_item(), max_items=7)


def test_requires_uri_without_client() -> None:
    with pytest.raises(ValueError, match="MONGODB_URI"):
        MongoHistoryRepository()


def test_client_selects_database_and_collection(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MONGODB_DATABASE", "testdb")
    client = MagicMock()
    MongoHistoryRepository(client=client)
    client.__getitem__.assert_called_with("testdb")
    client.__getitem__.return_value.__getitem__.assert_called_with("evaluation_history")
