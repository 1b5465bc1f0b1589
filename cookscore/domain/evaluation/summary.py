"""Presentation summary of detected categories (dish name, top items)."""

from __future__ import annotations

from typing import Optional, Sequence

from .models import CategoryGuess, Detection, DishSummary
from .score_calculator import round_half_up

MAX_INGREDIENTS = 5
MAX_DETECTIONS = 3


def summarize(categories: Sequence[CategoryGuess]) -> Optional[DishSummary]:
    """Primary label as dish name, first five labels, first three detections."""
    if not categories:
        return None
    return DishSummary(
        dish_name=categories[0].label,
        ingredients=[c.label for c in categories[:MAX_INGREDIENTS]],
        detections=[
            Detection(label=c.label, confidence_pct=round_half_up(c.score * 100))
            for c in categories[:MAX_DETECTIONS]
        ],
    )
