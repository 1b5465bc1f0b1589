"""
Dish Evaluation Orchestrator.

Runs one evaluation pass: a single category source call, recovery
from classification failures, assessment and history recording.

An evaluation always completes with a valid assessment; image and
classifier problems degrade to the score-only fallback instead of
raising.
"""

from __future__ import annotations

from typing import Optional

import structlog

from ...domain.evaluation.models import DishAssessment, DishImage
from ...domain.evaluation.ports import CategorySource
from ...domain.evaluation.service import FALLBACK_SOURCE, DishEvaluationService
from ...domain.history.models import HistoryItem
from ...domain.shared.errors import ClassificationError, ImageDecodeError
from ...inference.adapter import resolved_source_name
from ...metrics.dish_evaluation import record_fallback, record_score, time_evaluation
from ..history.recorder import HistoryRecorder

logger = structlog.get_logger(__name__)


class DishEvaluationOrchestrator:
    """
    Orchestrates a dish evaluation.

    Dependencies (injected):
    - category_source: CategorySource - heuristic, remote or fallback chain
    - service: DishEvaluationService - pure scoring/feedback engine
    - history: HistoryRecorder - optional, records every result

    Example:
        >>> orchestrator = DishEvaluationOrchestrator(
        ...     category_source=HeuristicCategorySource(),
        ...     service=DishEvaluationService(),
        ... )
        >>> assessment = await orchestrator.evaluate(DishImage.from_bytes(data))
    """

    def __init__(
        self,
        category_source: CategorySource,
        service: DishEvaluationService,
        history: Optional[HistoryRecorder] = None,
    ) -> None:
        self.category_source = category_source
        self.service = service
        self.history = history
        self.last_history_item: Optional[HistoryItem] = None

    async def evaluate(self, image: DishImage) -> DishAssessment:
        """
        Evaluate one dish image.

        Workflow:
        1. Classify with the category source (one call)
        2. On ImageDecodeError / ClassificationError → fallback assessment
        3. Otherwise score, narrate and profile the categories
        4. Record the result in history (when configured)
        """
        with time_evaluation(phase="evaluate"):
            try:
                categories = await self.category_source.classify(image)
            except (ImageDecodeError, ClassificationError) as exc:
                logger.warning(
                    "evaluation.fallback",
                    source=self.category_source.name(),
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                record_fallback(type(exc).__name__, source=FALLBACK_SOURCE)
                assessment = self.service.fallback_assessment()
            else:
                assessment = self.service.assess(
                    categories,
                    source=resolved_source_name(self.category_source),
                )

        record_score(assessment.result.score, source=assessment.source)
        logger.info(
            "evaluation.completed",
            source=assessment.source,
            score=assessment.result.score,
            fallback=assessment.fallback,
            categories=[c.label for c in assessment.categories],
        )

        self.last_history_item = None
        if self.history is not None:
            self.last_history_item = await self.history.record(assessment.result)
        return assessment
