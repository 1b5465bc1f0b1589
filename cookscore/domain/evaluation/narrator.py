"""Feedback text generation.

Turns categories and score into ordered good-point / improvement lists.
Fixed rules come from the phrase catalog; the improvement quota is
filled by random draws from the catalog pools through an injectable
random source, so tests can pin the outcome with a seeded generator.
"""

from __future__ import annotations

import random
from typing import List, Optional, Protocol, Sequence

from .models import CategoryGuess, EvaluationResult
from .phrase_catalog import (
    JA_CATALOG,
    FeedbackKind,
    PhraseCatalog,
    ScoreBand,
    score_band,
)

QUOTA_SCORE_LIMIT = 90
MAX_QUOTA = 3


class RandomSource(Protocol):
    """Subset of ``random.Random`` used by the narrator."""

    def random(self) -> float: ...

    def randrange(self, stop: int) -> int: ...


def improvement_quota(score: int) -> int:
    """Number of pool improvements to draw for a score below 90."""
    if score >= QUOTA_SCORE_LIMIT:
        return 0
    return min(MAX_QUOTA, (100 - score) // 20 + 1)


def _append_unique(target: List[str], phrase: str) -> None:
    if phrase not in target:
        target.append(phrase)


class EvaluationNarrator:
    """
    Feedback generator for one catalog and one random source.

    Example:
        >>> narrator = EvaluationNarrator(rng=random.Random(7))
        >>> result = narrator.narrate([CategoryGuess(label="vegetables", score=1.0)], 70)
        >>> result.good_points[0]
        '野菜が豊富に含まれています'
    """

    def __init__(
        self,
        catalog: PhraseCatalog = JA_CATALOG,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.catalog = catalog
        self.rng: RandomSource = rng if rng is not None else random.Random()

    def narrate(
        self,
        categories: Optional[Sequence[CategoryGuess]],
        score: int,
    ) -> EvaluationResult:
        """Feedback for a dish whose categories are known.

        With ``categories`` None or empty only the score tier and quota
        rules apply.
        """
        good_points: List[str] = []
        improvements: List[str] = []

        if categories:
            self._apply_category_rules(categories, good_points, improvements)

        for phrase in self.catalog.band_points[score_band(score)]:
            _append_unique(good_points, phrase)

        self._fill_quota(improvements, score, self.catalog.improvement_pool)

        return EvaluationResult(
            score=score,
            good_points=good_points,
            improvements=improvements,
        )

    def narrate_score_only(self, score: int) -> EvaluationResult:
        """Feedback when no categories could be derived at all."""
        good_points: List[str] = []
        improvements: List[str] = []

        band = score_band(score)
        for phrase in self.catalog.fallback_band_points[band]:
            _append_unique(good_points, phrase)
        if band is not ScoreBand.BASIC:
            for phrase in self.catalog.fallback_band_extras[band]:
                if self.rng.random() > 0.5:
                    _append_unique(good_points, phrase)

        self._fill_quota(improvements, score, self.catalog.fallback_improvement_pool)

        return EvaluationResult(
            score=score,
            good_points=good_points,
            improvements=improvements,
        )

    def _apply_category_rules(
        self,
        categories: Sequence[CategoryGuess],
        good_points: List[str],
        improvements: List[str],
    ) -> None:
        labels = [c.label.lower() for c in categories]

        for rule in self.catalog.keyword_rules:
            present = any(k in label for label in labels for k in rule.keywords)
            if present == rule.when_absent:
                continue
            target = good_points if rule.kind is FeedbackKind.GOOD_POINT else improvements
            for phrase in rule.phrases:
                _append_unique(target, phrase)

        if len(labels) >= 3:
            _append_unique(good_points, self.catalog.variety_point)
        elif len(labels) == 1:
            _append_unique(improvements, self.catalog.single_category_improvement)

    def _fill_quota(
        self,
        improvements: List[str],
        score: int,
        pool: Sequence[str],
    ) -> None:
        # At most len(pool) draws; duplicates of anything already listed are skipped.
        quota = improvement_quota(score)
        added = 0
        for _ in range(len(pool)):
            if added >= quota:
                break
            phrase = pool[self.rng.randrange(len(pool))]
            if phrase in improvements:
                continue
            improvements.append(phrase)
            added += 1
