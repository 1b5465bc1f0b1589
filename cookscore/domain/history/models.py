"""
History domain models.

One immutable record per evaluation, shaped like the persisted
``cookHistory`` entries: id, local date/time strings, score, feedback.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class HistoryItem(BaseModel):
    """
    Persisted evaluation record.

    Attributes:
        id: Strictly increasing millisecond-based token
        date: Local date, ``YYYY/M/D``
        time: Local time, ``HH:MM``
        score: Evaluation score
        good_points: Feedback good points (``goodPoints``)
        improvements: Feedback improvements

    Example:
        >>> item = HistoryItem(
        ...     id=1760850000000,
        ...     date="2025/10/19",
        ...     time="14:05",
        ...     score=72,
        ...     goodPoints=["基本的な栄養素は含まれています"],
        ...     improvements=[],
        ... )
        >>> item.to_document()["goodPoints"]
        ['基本的な栄養素は含まれています']
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(..., gt=0)
    date: str = Field(..., min_length=1)
    time: str = Field(..., min_length=1)
    score: int = Field(..., ge=0, le=100)
    good_points: List[str] = Field(default_factory=list, alias="goodPoints")
    improvements: List[str] = Field(default_factory=list)

    def to_document(self) -> Dict[str, Any]:
        """Serialise with the camelCase record keys."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> HistoryItem:
        return cls.model_validate(doc)
