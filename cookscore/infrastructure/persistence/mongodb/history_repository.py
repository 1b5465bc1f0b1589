"""MongoDB history repository (motor).

Document Schema:
{
    "_id": 1760850000000,        # HistoryItem.id
    "id": 1760850000000,
    "date": "2025/10/19",
    "time": "14:05",
    "score": 72,
    "goodPoints": ["..."],
    "improvements": ["..."]
}

Ordering relies on ids being strictly increasing; trimming deletes
everything older than the newest ``max_items`` documents.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from ....domain.history.models import HistoryItem
from ....domain.shared.errors import HistoryStorageError
from ...config import get_mongodb_database, get_mongodb_uri

logger = logging.getLogger(__name__)


class MongoHistoryRepository:
    """
    MongoDB implementation of IHistoryRepository.

    Example:
        >>> repository = MongoHistoryRepository()  # uses MONGODB_URI
        >>> await repository.prepend(item, max_items=7)
    """

    collection_name = "evaluation_history"

    def __init__(
        self,
        client: Optional[AsyncIOMotorClient[Dict[str, Any]]] = None,
        collection: Optional[AsyncIOMotorCollection[Dict[str, Any]]] = None,
    ) -> None:
        """
        Initialize repository.

        Args:
            client: Motor client (if None, creates one from config)
            collection: Pre-built collection (tests); overrides client
        """
        if collection is not None:
            self._collection = collection
            return
        if client is None:
            uri = get_mongodb_uri()
            if not uri:
                raise ValueError(
                    "MONGODB_URI not configured. "
                    "Set MONGODB_URI, MONGODB_USER, "
                    "and MONGODB_PASSWORD environment variables."
                )
            client = AsyncIOMotorClient(uri)
        self._collection = client[get_mongodb_database()][self.collection_name]
        logger.info(f"Initialized MongoHistoryRepository for collection '{self.collection_name}'")

    async def prepend(self, item: HistoryItem, max_items: int) -> None:
        document = item.to_document()
        document["_id"] = item.id
        try:
            await self._collection.insert_one(document)
            keep = (
                await self._collection.find({}, {"_id": 1})
                .sort("_id", DESCENDING)
                .limit(max(max_items, 0))
                .to_list(length=None)
            )
            keep_ids = [doc["_id"] for doc in keep]
            await self._collection.delete_many({"_id": {"$nin": keep_ids}})
        except PyMongoError as e:
            logger.error(f"Error saving history item: collection={self.collection_name}, error={e}")
            raise HistoryStorageError(f"prepend failed: {e}") from e

    async def list_recent(self, limit: int) -> List[HistoryItem]:
        if limit <= 0:
            return []
        try:
            docs = (
                await self._collection.find({})
                .sort("_id", DESCENDING)
                .limit(limit)
                .to_list(length=limit)
            )
        except PyMongoError as e:
            logger.error(f"Error listing history: collection={self.collection_name}, error={e}")
            raise HistoryStorageError(f"list failed: {e}") from e
        return [HistoryItem.from_document(doc) for doc in docs]

    async def clear(self) -> None:
        try:
            await self._collection.delete_many({})
        except PyMongoError as e:
            logger.error(f"Error clearing history: collection={self.collection_name}, error={e}")
            raise HistoryStorageError(f"clear failed: {e}") from e
