"""Category guesses + score → five-axis nutrient profile.

Keyword tests are independent: one guess may feed several axes. The
accumulated profile is scaled by ``score / 100`` so a poor dish can
never show high nutrient values.
"""

from __future__ import annotations

from typing import Dict, Sequence, Tuple

from .models import CategoryGuess, NutrientProfile

AXIS_BASE = 50.0
AXIS_MIN = 0.0
AXIS_MAX = 100.0

# axis -> (keywords, weight per unit of confidence)
NUTRIENT_RULES: Dict[str, Tuple[Tuple[str, ...], float]] = {
    "protein": (("meat", "chicken", "fish", "egg"), 20.0),
    "carb": (("bread", "rice", "pasta", "carb"), 20.0),
    "fat": (("fried", "oil", "fat"), 20.0),
    "vitamin": (("vegetable", "fruit", "salad"), 30.0),
    "mineral": (("vegetable", "seaweed", "fish"), 25.0),
}


def estimate_nutrients(
    categories: Sequence[CategoryGuess], score: int
) -> NutrientProfile:
    """Estimate the nutrient profile for a scored dish.

    Example:
        >>> p = estimate_nutrients([CategoryGuess(label="vegetables", score=1.0)], 70)
        >>> round(p.vitamin, 1), round(p.protein, 1)
        (56.0, 35.0)
    """
    axes = {axis: AXIS_BASE for axis in NUTRIENT_RULES}
    for guess in categories:
        label = guess.label.lower()
        for axis, (keywords, weight) in NUTRIENT_RULES.items():
            if any(k in label for k in keywords):
                axes[axis] += weight * guess.score

    multiplier = score / 100
    scaled = {
        axis: max(AXIS_MIN, min(AXIS_MAX, value * multiplier))
        for axis, value in axes.items()
    }
    return NutrientProfile(**scaled)
