"""History repository factory.

Environment-based selection:
- HISTORY_BACKEND=inmemory (default): fast, transient
- HISTORY_BACKEND=mongodb: persistent, requires MONGODB_URI

Usage:
    repo = create_history_repository()  # new instance per call
    repo = get_history_repository()     # process singleton
"""

from typing import Optional

from ...domain.history.ports import IHistoryRepository
from ..config import get_history_backend, get_mongodb_uri
from .in_memory.history_repository import InMemoryHistoryRepository


def create_history_repository() -> IHistoryRepository:
    """Create the history repository selected by HISTORY_BACKEND.

    Raises:
        ValueError: mongodb selected but MONGODB_URI not set, or an
            unknown backend name
    """
    mode = get_history_backend()

    if mode == "mongodb":
        if not get_mongodb_uri():
            raise ValueError(
                "HISTORY_BACKEND=mongodb but MONGODB_URI not set. "
                "Set MONGODB_URI in .env or use HISTORY_BACKEND=inmemory"
            )
        from .mongodb.history_repository import MongoHistoryRepository

        return MongoHistoryRepository()

    if mode != "inmemory":
        raise ValueError(f"Unknown HISTORY_BACKEND '{mode}' (expected inmemory|mongodb)")

    return InMemoryHistoryRepository()


_history_repository: Optional[IHistoryRepository] = None


def get_history_repository() -> IHistoryRepository:
    """Get singleton history repository instance."""
    global _history_repository
    if _history_repository is None:
        _history_repository = create_history_repository()
    return _history_repository


def reset_repository() -> None:
    """Drop the singleton (test utility)."""
    global _history_repository
    _history_repository = None
