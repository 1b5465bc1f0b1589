"""
Dish evaluation service.

Pure, synchronous composition of the engine components:
categories → score → feedback → nutrients → summary.
Also builds the score-only assessment used when no categories can be
derived from the image at all.
"""

from __future__ import annotations

import random
from typing import Optional, Sequence

import structlog

from .category_estimator import estimate_categories
from .color_profiler import profile_colors
from .models import CategoryGuess, DishAssessment, PixelBuffer
from .narrator import EvaluationNarrator, RandomSource
from .nutrient_estimator import estimate_nutrients
from .phrase_catalog import JA_CATALOG, PhraseCatalog
from .score_calculator import calculate_score
from .summary import summarize

logger = structlog.get_logger(__name__)

HEURISTIC_SOURCE = "heuristic"
FALLBACK_SOURCE = "fallback"

# Score-only path draws uniformly from [60, 99].
FALLBACK_SCORE_MIN = 60
FALLBACK_SCORE_SPAN = 40


class DishEvaluationService:
    """
    Evaluation engine entry point.

    Example:
        >>> service = DishEvaluationService(rng=random.Random(1))
        >>> assessment = service.assess_pixels(PixelBuffer([0, 200, 0, 255] * 100))
        >>> assessment.result.score
        70
    """

    def __init__(
        self,
        catalog: PhraseCatalog = JA_CATALOG,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.catalog = catalog
        self.rng: RandomSource = rng if rng is not None else random.Random()
        self.narrator = EvaluationNarrator(catalog=catalog, rng=self.rng)

    def assess(
        self,
        categories: Sequence[CategoryGuess],
        *,
        source: str,
    ) -> DishAssessment:
        """Score, narrate and profile an already classified dish."""
        score = calculate_score(categories)
        result = self.narrator.narrate(categories, score)
        nutrients = estimate_nutrients(categories, score)
        logger.debug(
            "dish.assessed",
            source=source,
            categories=len(categories),
            score=score,
        )
        return DishAssessment(
            result=result,
            categories=list(categories),
            nutrients=nutrients,
            dish=summarize(categories),
            source=source,
        )

    def assess_pixels(self, pixels: PixelBuffer) -> DishAssessment:
        """Full local pipeline: color profile → categories → assessment."""
        categories = estimate_categories(profile_colors(pixels))
        return self.assess(categories, source=HEURISTIC_SOURCE)

    def fallback_assessment(self, notice: Optional[str] = None) -> DishAssessment:
        """Score-only assessment shown when classification failed entirely."""
        score = FALLBACK_SCORE_MIN + self.rng.randrange(FALLBACK_SCORE_SPAN)
        result = self.narrator.narrate_score_only(score)
        return DishAssessment(
            result=result,
            source=FALLBACK_SOURCE,
            fallback=True,
            notice=notice if notice is not None else self.catalog.fallback_notice,
        )
