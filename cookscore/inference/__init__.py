from .adapter import (
    FallbackCategorySource,
    HeuristicCategorySource,
    RemoteClassifierSource,
    get_active_source,
)

__all__ = [
    "FallbackCategorySource",
    "HeuristicCategorySource",
    "RemoteClassifierSource",
    "get_active_source",
]
