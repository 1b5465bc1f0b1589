"""Category guesses → bounded 0-100 nutrition score.

Weighted keyword rules over the lowercased label. Groups are checked in
order and a guess contributes through its first matching group only.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

from .models import CategoryGuess

BASE_SCORE = 50.0
MIN_SCORE = 0
MAX_SCORE = 100

# (keywords, weight per unit of confidence)
SCORE_RULES: Tuple[Tuple[Tuple[str, ...], float], ...] = (
    (("vegetable",), 20.0),
    (("meat_or_tomato", "fish", "chicken"), 15.0),
    (("bread_or_meat", "pasta", "rice"), 10.0),
    (("egg_or_cheese",), 12.0),
    (("pizza", "burger", "fried"), -10.0),
)


def round_half_up(value: float) -> int:
    """Round to nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def score_delta(guess: CategoryGuess) -> float:
    label = guess.label.lower()
    for keywords, weight in SCORE_RULES:
        if any(k in label for k in keywords):
            return weight * guess.score
    return 0.0


def calculate_score(categories: Sequence[CategoryGuess]) -> int:
    """Compute the dish score.

    Example:
        >>> calculate_score([CategoryGuess(label="pizza", score=0.9)])
        41
        >>> calculate_score([])
        50
    """
    total = BASE_SCORE + sum(score_delta(g) for g in categories)
    return max(MIN_SCORE, min(MAX_SCORE, round_half_up(total)))
